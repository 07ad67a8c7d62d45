# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Package loaders.

Two implementations of the same small capability:

- `BatchResolver` runs the stateless pipeline (patterns -> scan/inject ->
  extract -> link) from scratch on every call and never follows imports past
  the discovered set;
- `ResidentResolver` keeps descriptors in a `ResolutionCache` across calls,
  loads imports transitively, and re-resolves only what an edit invalidates.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Protocol

from gnodriver.errors import (
	IMPORT_UNRESOLVED,
	ImportCycleError,
	ManifestError,
	PackageLoadError,
	RootNotFoundError,
)
from gnodriver.gnoenv import examples_dir, guess_root_dir, stdlibs_dir
from gnodriver.gnomod import MANIFEST_NAME, module_path_problem
from gnodriver.options import DriverOptions
from gnodriver.packages.cache import ResolutionCache
from gnodriver.packages.descriptor import DiscoveredPackage, PackageDescriptor, PackageError
from gnodriver.packages.extractor import build_descriptor, clean_abs
from gnodriver.packages.graph import Candidate, GraphBuilder
from gnodriver.packages.patterns import Pattern, discover, resolve_patterns
from gnodriver.packages.request import DriverResponse
from gnodriver.packages.scanner import scan_directory
from gnodriver.packages.stdlib import build_stdlib_descriptor, inject_stdlibs, stdlib_source_files

logger = logging.getLogger(__name__)


class PackageLoader(Protocol):
	def discover(self, patterns: list[str]) -> DriverResponse:
		"""Resolve `patterns` and return the package graph."""
		...

	def refresh(self, path: Path) -> list[PackageDescriptor]:
		"""Re-resolve after `path` (a file or package directory) changed."""
		...

	def list(self) -> list[PackageDescriptor]:
		"""Currently known (fresh) packages."""
		...


def locate_root(options: DriverOptions) -> Path | None:
	"""Installation root from options or discovery; None (with a warning) when unavailable."""
	if options.gno_root is not None:
		return options.gno_root
	try:
		return guess_root_dir(timeout=options.root_lookup_timeout)
	except RootNotFoundError as err:
		logger.warning(
			"can't find gno root, examples and std packages are ignored: %s",
			err.format_human(),
			extra={"reason_code": err.reason_code},
		)
		return None


def _patterns_for(raw: list[str], root: Path | None, options: DriverOptions) -> list[Pattern]:
	examples_root = examples_dir(root) if root is not None and options.inject_examples else None
	return resolve_patterns(raw, examples_root=examples_root)


class BatchResolver:
	def __init__(self, options: DriverOptions | None = None) -> None:
		self.options = options or DriverOptions()
		self._last_patterns: list[str] = []
		self._last: DriverResponse = DriverResponse()

	def discover(self, patterns: list[str]) -> DriverResponse:
		root = locate_root(self.options)
		injected: list[PackageDescriptor] = []
		if root is not None and self.options.inject_stdlibs:
			injected = inject_stdlibs(stdlibs_dir(root))

		candidates: list[Candidate] = []
		for pattern in _patterns_for(patterns, root, self.options):
			for pkg in discover(pattern):
				candidates.append(Candidate(pkg=pkg, explicit=pattern.explicit))

		graph = GraphBuilder(workers=self.options.workers).build(injected, candidates)
		self._last_patterns = list(patterns)
		self._last = DriverResponse(packages=graph.packages, roots=graph.roots)
		return self._last

	def refresh(self, path: Path) -> list[PackageDescriptor]:
		# Nothing is cached: any change means a full re-run.
		logger.debug("refresh by full re-resolution", extra={"changed": str(path)})
		return self.discover(self._last_patterns).packages

	def list(self) -> list[PackageDescriptor]:
		return list(self._last.packages)


class ResidentResolver:
	"""
	Long-lived, incremental resolver.

	Packages are keyed by their absolute directory. Loading is recursive: every
	raw import is located and loaded in turn, so the cache ends up holding the
	transitive closure of the requested packages. A stack of the packages being
	loaded detects cycles; the package that closes a cycle gets a ListError and
	the offending edge is dropped.
	"""

	def __init__(
		self,
		options: DriverOptions | None = None,
		*,
		cache: ResolutionCache | None = None,
		extra_roots: list[Path] | None = None,
	) -> None:
		self.options = options or DriverOptions()
		self.cache = cache or ResolutionCache()
		self.extra_roots = [clean_abs(r) for r in (extra_roots or [])]
		self._root: Path | None = None
		self._root_checked = False
		self._pkg_dirs: dict[str, Path] = {}
		self._loading: list[str] = []
		self._patterns: list[str] = []
		self._roots: list[str] = []
		self._write_lock = threading.RLock()

	def _gno_root(self) -> Path | None:
		if not self._root_checked:
			self._root = locate_root(self.options)
			self._root_checked = True
		return self._root

	def _libs_root(self) -> Path | None:
		root = self._gno_root()
		if root is None or not self.options.inject_stdlibs:
			return None
		return clean_abs(stdlibs_dir(root))

	def _index(self, pkg: DiscoveredPackage) -> None:
		if self._pkg_dirs.setdefault(pkg.module_path, clean_abs(pkg.dir)) != clean_abs(pkg.dir):
			logger.warning("duplicate package path %s: keeping %s", pkg.module_path, self._pkg_dirs[pkg.module_path])

	def discover(self, patterns: list[str]) -> DriverResponse:
		with self._write_lock:
			explicit: list[Path] = []
			for pattern in _patterns_for(patterns, self._gno_root(), self.options):
				for pkg in discover(pattern):
					self._index(pkg)
					if pattern.explicit:
						explicit.append(clean_abs(pkg.dir))

			roots: list[str] = []
			for pkg_dir in explicit:
				try:
					desc = self._load(pkg_dir)
				except (PackageLoadError, ManifestError) as err:
					logger.error("failed to load package %s: %s", pkg_dir, err.format_human(), extra={"reason_code": err.reason_code})
					continue
				if desc.id not in roots:
					roots.append(desc.id)
			self._patterns = list(patterns)
			self._roots = roots
			return DriverResponse(packages=self.list(), roots=roots)

	def refresh(self, path: Path) -> list[PackageDescriptor]:
		"""
		Invalidate the package owning `path` and everything that imports it, then
		load them again. Returns the re-resolved descriptors.
		"""
		with self._write_lock:
			key = self._owner_key(clean_abs(path))
			if key is None:
				logger.debug("refresh: no cached package owns %s", path)
				return []
			pkg = scan_directory(Path(key))
			if pkg is not None:
				self._pkg_dirs[pkg.module_path] = clean_abs(pkg.dir)
			out: list[PackageDescriptor] = []
			for stale in self.cache.invalidate(key):
				try:
					out.append(self._load(Path(stale)))
				except (PackageLoadError, ManifestError) as err:
					logger.warning("package no longer loads %s: %s", stale, err.format_human(), extra={"reason_code": err.reason_code})
			return out

	def list(self) -> list[PackageDescriptor]:
		return self.cache.fresh_descriptors()

	def _owner_key(self, path: Path) -> str | None:
		cur = path
		while True:
			if self.cache.ancestors(str(cur)):
				return str(cur)
			if cur.parent == cur:
				return None
			cur = cur.parent

	def _locate(self, import_path: str) -> Path | None:
		"""Directory of the package imported as `import_path`, or None."""
		known = self._pkg_dirs.get(import_path)
		if known is not None:
			return known
		problem = module_path_problem(import_path)
		if problem is not None:
			# Absolute paths and dot elements are never joined onto a root.
			logger.debug("ignoring import %s: %s", import_path, problem, extra={"reason_code": IMPORT_UNRESOLVED, "import_path": import_path})
			return None
		libs_root = self._libs_root()
		if libs_root is not None:
			candidate = libs_root / import_path
			if candidate.is_dir() and stdlib_source_files(candidate):
				return candidate
		roots = list(self.extra_roots)
		root = self._gno_root()
		if root is not None and self.options.inject_examples:
			roots.append(clean_abs(examples_dir(root)))
		for base in roots:
			candidate = base / import_path
			if (candidate / MANIFEST_NAME).is_file():
				pkg = scan_directory(candidate)
				if pkg is not None and pkg.module_path == import_path:
					self._index(pkg)
					return clean_abs(candidate)
		return None

	def _build(self, pkg_dir: Path) -> PackageDescriptor:
		libs_root = self._libs_root()
		if libs_root is not None and pkg_dir.is_relative_to(libs_root):
			desc = build_stdlib_descriptor(libs_root, pkg_dir)
			if desc is None:
				raise PackageLoadError(reason_code="PACKAGE_LOAD", message="empty package", path=str(pkg_dir))
			return desc
		pkg = scan_directory(pkg_dir)
		if pkg is None:
			raise ManifestError(reason_code="MANIFEST_INVALID", message="no valid gno.mod", path=str(pkg_dir / MANIFEST_NAME))
		return build_descriptor(pkg)

	def _load(self, pkg_dir: Path) -> PackageDescriptor:
		key = str(pkg_dir)
		cached = self.cache.lookup(key)
		if cached is not None:
			return cached
		if key in self._loading:
			start = self._loading.index(key)
			cycle = tuple(self._loading[start:]) + (key,)
			raise ImportCycleError(
				reason_code="IMPORT_CYCLE",
				message="import cycle not allowed: " + " -> ".join(cycle),
				path=key,
				cycle=cycle,
			)

		self._loading.append(key)
		try:
			desc = self._build(pkg_dir)
			children: list[str] = []
			for import_path in desc.raw_imports:
				dep_dir = self._locate(import_path)
				if dep_dir is None:
					logger.debug("missed import", extra={"reason_code": IMPORT_UNRESOLVED, "pkg_id": desc.id, "import_path": import_path})
					continue
				# Failed and cyclic imports keep their edge: a change to the target
				# must invalidate this package as well.
				children.append(str(dep_dir))
				try:
					dep = self._load(dep_dir)
				except ImportCycleError as err:
					logger.warning("%s", err.format_human(), extra={"reason_code": err.reason_code})
					desc.errors.append(PackageError.from_error(err, kind="ListError"))
					continue
				except (PackageLoadError, ManifestError) as err:
					logger.warning("failed to load import %s: %s", import_path, err.format_human(), extra={"reason_code": err.reason_code})
					continue
				desc.imports[import_path] = dep
			self.cache.store(key, desc, children=children)
			return desc
		finally:
			self._loading.pop()
