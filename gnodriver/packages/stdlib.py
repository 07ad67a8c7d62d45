# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Built-in library injection.

Standard library packages carry no `gno.mod`: their import path is simply the
directory path relative to the library root. They are synthesized here so user
packages can link against them.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path, PurePosixPath

from gnodriver.errors import PackageLoadError
from gnodriver.packages.descriptor import PackageDescriptor
from gnodriver.packages.extractor import clean_abs, is_primary_source, resolve_name_and_imports

logger = logging.getLogger(__name__)


def stdlib_pkg_path(libs_root: Path, directory: Path) -> str:
	return str(PurePosixPath(*directory.relative_to(libs_root).parts))


def stdlib_source_files(directory: Path) -> list[str]:
	try:
		entries = sorted(directory.iterdir())
	except OSError as err:
		raise PackageLoadError(
			reason_code="PACKAGE_LOAD",
			message=f"failed to read dir: {err}",
			path=str(directory),
		) from err
	return [str(e) for e in entries if is_primary_source(e.name) and not e.is_dir()]


def build_stdlib_descriptor(libs_root: Path, directory: Path) -> PackageDescriptor | None:
	"""Descriptor for one library directory, or None when it holds no primary sources."""
	files = stdlib_source_files(directory)
	if not files:
		return None
	pkg_path = stdlib_pkg_path(libs_root, directory)
	name, raw_imports = resolve_name_and_imports(files)
	return PackageDescriptor(
		id=pkg_path,
		pkg_path=pkg_path,
		name=name,
		go_files=files,
		raw_imports=raw_imports,
		dir=str(directory),
		injected=True,
	)


def inject_stdlibs(libs_root: Path) -> list[PackageDescriptor]:
	"""
	Synthesize descriptors for every directory under `libs_root` that directly
	holds primary sources (the root itself excluded).

	A missing root is a degraded no-op; a library that fails to load is dropped
	and its siblings are still injected.
	"""
	if not libs_root.is_dir():
		logger.warning("stdlib root not found, std packages are ignored: %s", libs_root, extra={"root": str(libs_root)})
		return []

	libs_root = clean_abs(libs_root)
	out: list[PackageDescriptor] = []
	for dirpath, dirnames, _filenames in os.walk(libs_root, onerror=lambda err: logger.warning("unable to read directory: %s", err)):
		dirnames.sort()
		directory = Path(dirpath)
		if directory == libs_root:
			continue
		try:
			pkg = build_stdlib_descriptor(libs_root, directory)
		except PackageLoadError as err:
			logger.warning("failed to inject stdlib: %s", err.format_human(), extra={"reason_code": err.reason_code})
			continue
		if pkg is None:
			continue
		logger.info("injecting stdlib", extra={"pkg_path": pkg.pkg_path, "pkg_name": pkg.name})
		out.append(pkg)
	return out
