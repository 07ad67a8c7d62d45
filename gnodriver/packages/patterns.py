# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Query pattern interpretation.

Supported shapes:
- `<dir>/...`   every package under `dir`
- `file=<path>` the package owning `path`
Anything else is reported and skipped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from gnodriver.errors import PATTERN_MATCH_COUNT, PATTERN_UNKNOWN
from gnodriver.packages.descriptor import DiscoveredPackage
from gnodriver.packages.scanner import scan_packages

logger = logging.getLogger(__name__)

RECURSIVE_SUFFIX = "..."
FILE_PREFIX = "file="


@dataclass(frozen=True)
class RecursivePattern:
	raw: str
	root: Path
	explicit: bool = True


@dataclass(frozen=True)
class FilePattern:
	raw: str
	path: Path
	explicit: bool = True

	@property
	def owner_dir(self) -> Path:
		# A directory names its own package; a file belongs to its directory.
		if self.path.is_dir():
			return self.path
		return self.path.parent


@dataclass(frozen=True)
class UnknownPattern:
	raw: str
	explicit: bool = True


Pattern = Union[RecursivePattern, FilePattern, UnknownPattern]


def parse_pattern(raw: str) -> Pattern:
	if raw.startswith(FILE_PREFIX):
		target = raw[len(FILE_PREFIX):]
		if target:
			return FilePattern(raw=raw, path=Path(target))
		return UnknownPattern(raw=raw)
	head, sep, tail = raw.rpartition("/")
	if tail == RECURSIVE_SUFFIX:
		return RecursivePattern(raw=raw, root=Path(head if sep and head else ("/" if sep else ".")))
	return UnknownPattern(raw=raw)


def resolve_patterns(raw_patterns: list[str], *, examples_root: Path | None) -> list[Pattern]:
	"""
	Parse caller patterns and append the implicit examples pattern.

	The examples pattern is never explicit, so packages it finds are not
	reported as roots unless a caller pattern also matched them.
	"""
	out: list[Pattern] = [parse_pattern(raw) for raw in raw_patterns]
	if examples_root is not None:
		out.append(
			RecursivePattern(
				raw=str(examples_root / RECURSIVE_SUFFIX),
				root=examples_root,
				explicit=False,
			)
		)
	return out


def discover(pattern: Pattern) -> list[DiscoveredPackage]:
	"""Packages matched by one pattern; unknown patterns match nothing."""
	if isinstance(pattern, RecursivePattern):
		return scan_packages(pattern.root)
	if isinstance(pattern, FilePattern):
		pkgs = scan_packages(pattern.owner_dir)
		if len(pkgs) != 1:
			logger.warning(
				"unexpected number of packages for %s: %d",
				pattern.raw,
				len(pkgs),
				extra={"reason_code": PATTERN_MATCH_COUNT, "pattern": pattern.raw, "count": len(pkgs)},
			)
		return pkgs
	logger.warning(
		"unknown pattern shape: %s",
		pattern.raw,
		extra={"reason_code": PATTERN_UNKNOWN, "pattern": pattern.raw},
	)
	return []
