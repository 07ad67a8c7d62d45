# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Package metadata extraction.

Given a package directory, classify its files and derive the package name and
raw import paths from an imports-only scan of the primary sources.

Unlike manifest problems, a primary file that cannot be read or scanned makes
the whole package unusable: extraction raises `PackageLoadError` and the caller
drops the package.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from gnodriver.errors import PackageLoadError
from gnodriver.gnomod import load_manifest
from gnodriver.packages.descriptor import DiscoveredPackage, PackageDescriptor
from gnodriver.syntax import ImportScanError, scan_file

logger = logging.getLogger(__name__)

SOURCE_EXT = ".gno"
TEST_SUFFIXES = ("_test.gno", "_filetest.gno")


def is_source_file(name: str) -> bool:
	return name.endswith(SOURCE_EXT) and not name.startswith(".")


def is_test_file(name: str) -> bool:
	return name.endswith(TEST_SUFFIXES)


def is_primary_source(name: str) -> bool:
	return is_source_file(name) and not is_test_file(name)


def list_package_files(directory: Path) -> tuple[list[str], list[str]]:
	"""
	Split the regular files of `directory` into (primary sources, other files).

	Test variants are neither primary nor "other": they are left out entirely.
	Both lists hold absolute paths, sorted.
	"""
	try:
		entries = sorted(directory.iterdir())
	except OSError as err:
		raise PackageLoadError(
			reason_code="PACKAGE_LOAD",
			message=f"failed to read pkg dir: {err}",
			path=str(directory),
		) from err

	sources: list[str] = []
	others: list[str] = []
	for entry in entries:
		if entry.is_dir():
			continue
		name = entry.name
		if name.endswith(SOURCE_EXT):
			if is_primary_source(name):
				sources.append(str(entry))
			continue
		others.append(str(entry))
	return sources, others


def resolve_name_and_imports(source_files: list[str]) -> tuple[str, list[str]]:
	"""
	Scan each file and vote on the package name.

	The chosen name is the one whose occurrence count becomes strictly greater
	than the best count seen so far, so among equally frequent names the first
	to reach that count wins. Imports are unioned across files.
	"""
	counts: dict[str, int] = {}
	best_name = ""
	best_count = 0
	imports: set[str] = set()
	for src_path in source_files:
		try:
			header = scan_file(Path(src_path))
		except ImportScanError as err:
			raise PackageLoadError(
				reason_code="PACKAGE_LOAD",
				message=f"parse: {err}",
				path=src_path,
				line=err.line,
				column=err.column,
			) from err
		except (OSError, UnicodeDecodeError) as err:
			raise PackageLoadError(
				reason_code="PACKAGE_LOAD",
				message=f"failed to read file: {err}",
				path=src_path,
			) from err

		counts[header.name] = counts.get(header.name, 0) + 1
		if counts[header.name] > best_count:
			best_name = header.name
			best_count = counts[header.name]
		imports.update(header.import_paths)

	logger.debug("analyzed sources", extra={"pkg_name": best_name, "imports": sorted(imports)})
	return best_name, sorted(imports)


def build_descriptor(pkg: DiscoveredPackage) -> PackageDescriptor:
	"""
	Build the local (unlinked) descriptor for a discovered package.

	The manifest is re-read so the module path reflects the directory as it is
	now, not as it was when the scanner passed by.
	"""
	manifest = load_manifest(pkg.dir)
	pkg_dir = clean_abs(pkg.dir)
	go_files, other_files = list_package_files(pkg_dir)
	name, raw_imports = resolve_name_and_imports(go_files)
	return PackageDescriptor(
		id=str(pkg_dir),
		pkg_path=manifest.module,
		name=name,
		go_files=go_files,
		other_files=other_files,
		raw_imports=raw_imports,
		dir=str(pkg_dir),
	)


def clean_abs(path: Path) -> Path:
	"""Absolute, lexically normalized path (symlinks are kept, not resolved)."""
	return Path(os.path.abspath(path))
