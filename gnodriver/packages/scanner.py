# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Manifest scanner.

Walks a directory tree and reports every directory holding a valid `gno.mod`.
A bad manifest only removes its own directory from the result: the walk keeps
descending into it and keeps visiting its siblings.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from gnodriver.errors import ManifestError
from gnodriver.gnomod import load_manifest
from gnodriver.packages.descriptor import DiscoveredPackage

logger = logging.getLogger(__name__)


def scan_packages(root: Path) -> list[DiscoveredPackage]:
	"""
	Discover packages under `root` (inclusive).

	The returned list is deterministic: directories are visited in sorted,
	depth-first order.
	"""
	if not root.is_dir():
		logger.warning("scan root is not a directory: %s", root, extra={"root": str(root)})
		return []

	def _on_walk_error(err: OSError) -> None:
		logger.warning("unable to read directory: %s", err, extra={"path": getattr(err, "filename", None)})

	out: list[DiscoveredPackage] = []
	for dirpath, dirnames, _filenames in os.walk(root, onerror=_on_walk_error):
		dirnames.sort()
		pkg = scan_directory(Path(dirpath))
		if pkg is not None:
			out.append(pkg)
	return out


def scan_directory(directory: Path) -> DiscoveredPackage | None:
	"""Return the package declared by `directory`, or None when it declares none (or a bad one)."""
	try:
		manifest = load_manifest(directory)
	except ManifestError as err:
		if err.reason_code == "MANIFEST_MISSING":
			return None
		logger.warning("skipping package with invalid gno.mod: %s", err.format_human(), extra={"reason_code": err.reason_code, "path": err.path})
		return None
	return DiscoveredPackage(
		dir=directory,
		module_path=manifest.module,
		draft=manifest.draft,
		requires=list(manifest.requires),
	)
