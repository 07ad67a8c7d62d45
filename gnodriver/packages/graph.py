# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Package graph assembly.

Two phases separated by a barrier:

1. local: build one descriptor per package, independently (optionally on a
   thread pool), and register it under its module path;
2. linking: resolve every raw import against the now complete registry.

No transitive loading happens here: an import that names a package outside
the discovered/injected set stays unresolved and its edge is dropped.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Iterable

from gnodriver.errors import IMPORT_UNRESOLVED, ManifestError, PackageLoadError
from gnodriver.packages.descriptor import DiscoveredPackage, PackageDescriptor
from gnodriver.packages.extractor import build_descriptor, clean_abs

logger = logging.getLogger(__name__)


class Registry:
	"""
	Module path -> descriptor map for one resolution pass.

	Inserts are write-once: the first package to claim a module path keeps it.
	"""

	def __init__(self) -> None:
		self._by_path: dict[str, PackageDescriptor] = {}

	def add(self, pkg: PackageDescriptor) -> bool:
		existing = self._by_path.get(pkg.pkg_path)
		if existing is not None and existing is not pkg:
			logger.warning(
				"duplicate package path %s: keeping %s, ignoring %s",
				pkg.pkg_path,
				existing.id,
				pkg.id,
				extra={"pkg_path": pkg.pkg_path},
			)
			return False
		self._by_path[pkg.pkg_path] = pkg
		return True

	def get(self, pkg_path: str) -> PackageDescriptor | None:
		return self._by_path.get(pkg_path)

	def __contains__(self, pkg_path: object) -> bool:
		return pkg_path in self._by_path

	def __len__(self) -> int:
		return len(self._by_path)


@dataclass
class GraphResult:
	packages: list[PackageDescriptor] = field(default_factory=list)
	roots: list[str] = field(default_factory=list)
	registry: Registry = field(default_factory=Registry)


@dataclass(frozen=True)
class Candidate:
	"""A discovered package plus whether an explicit pattern asked for it."""

	pkg: DiscoveredPackage
	explicit: bool


BuildFn = Callable[[DiscoveredPackage], PackageDescriptor]


class GraphBuilder:
	def __init__(self, *, workers: int = 1, build: BuildFn = build_descriptor) -> None:
		self.workers = max(1, workers)
		self._build = build

	def _build_one(self, pkg: DiscoveredPackage) -> PackageDescriptor | None:
		try:
			return self._build(pkg)
		except (PackageLoadError, ManifestError) as err:
			logger.error(
				"failed to convert package %s: %s",
				pkg.dir,
				err.format_human(),
				extra={"reason_code": err.reason_code, "pkg_dir": str(pkg.dir)},
			)
			return None

	def build_local(self, pkgs: list[DiscoveredPackage]) -> list[PackageDescriptor | None]:
		"""Phase 1. Results line up with `pkgs`; None marks a dropped package."""
		if self.workers == 1 or len(pkgs) < 2:
			return [self._build_one(p) for p in pkgs]
		with ThreadPoolExecutor(max_workers=self.workers) as pool:
			return list(pool.map(self._build_one, pkgs))

	def build(self, injected: Iterable[PackageDescriptor], candidates: list[Candidate]) -> GraphResult:
		res = GraphResult()
		by_id: dict[str, PackageDescriptor] = {}

		for pkg in injected:
			if pkg.id in by_id:
				continue
			by_id[pkg.id] = pkg
			res.registry.add(pkg)
			res.packages.append(pkg)

		# Same directory reached through several patterns: build it once.
		unique: list[DiscoveredPackage] = []
		explicit_dirs: set[str] = set()
		seen_dirs: set[str] = set()
		for cand in candidates:
			key = str(clean_abs(cand.pkg.dir))
			if cand.explicit:
				explicit_dirs.add(key)
			if key in seen_dirs:
				continue
			seen_dirs.add(key)
			unique.append(cand.pkg)

		built = self.build_local(unique)
		# Barrier: every local build has finished before linking starts.
		for src, pkg in zip(unique, built):
			if pkg is None or pkg.id in by_id:
				continue
			by_id[pkg.id] = pkg
			res.registry.add(pkg)
			res.packages.append(pkg)
			if str(clean_abs(src.dir)) in explicit_dirs:
				res.roots.append(pkg.id)

		logger.info("discovered packages", extra={"count": len(res.packages)})
		link_imports(res.packages, res.registry)
		return res


def link_imports(packages: list[PackageDescriptor], registry: Registry) -> None:
	"""Phase 2: attach registry hits as resolved imports, drop the rest."""
	for pkg in packages:
		pkg.imports = {}
		for import_path in pkg.raw_imports:
			dep = registry.get(import_path)
			if dep is not None:
				pkg.imports[import_path] = dep
				logger.debug("found import", extra={"pkg_id": pkg.id, "import_path": import_path})
			else:
				logger.debug(
					"missed import",
					extra={"reason_code": IMPORT_UNRESOLVED, "pkg_id": pkg.id, "import_path": import_path},
				)
