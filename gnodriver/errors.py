# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Structured errors for the packages driver.

Every error carries a stable `reason_code` so log consumers and tests can match
on it without parsing messages. Only `FatalProtocolError` aborts a request;
the rest are caught at the package or directory boundary that raised them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class DriverError(Exception):
	reason_code: str
	message: str
	path: str | None = None
	pkg_path: str | None = None
	line: int | None = None
	column: int | None = None

	def __str__(self) -> str:
		return self.format_human()

	@property
	def pos(self) -> str:
		"""`file:line:col` when a location is known, else the bare path (or empty)."""
		if self.path is None:
			return ""
		if self.line is None:
			return self.path
		if self.column is None:
			return f"{self.path}:{self.line}"
		return f"{self.path}:{self.line}:{self.column}"

	def to_dict(self) -> dict[str, Any]:
		return {
			"reason_code": self.reason_code,
			"message": self.message,
			"path": self.path,
			"pkg_path": self.pkg_path,
			"line": self.line,
			"column": self.column,
		}

	def format_human(self) -> str:
		parts: list[str] = [f"[{self.reason_code}] {self.message}"]
		if self.pkg_path:
			parts.append(f"pkg_path={self.pkg_path}")
		if self.path:
			parts.append(f"pos={self.pos}")
		return " ".join(parts)


@dataclass(frozen=True)
class FatalProtocolError(DriverError):
	"""Request could not be read/decoded or the response could not be produced."""


@dataclass(frozen=True)
class PackageLoadError(DriverError):
	"""A package directory or one of its primary files could not be loaded."""


@dataclass(frozen=True)
class ManifestError(DriverError):
	"""`gno.mod` is missing (MANIFEST_MISSING) or malformed (MANIFEST_INVALID)."""


@dataclass(frozen=True)
class ImportCycleError(DriverError):
	"""
	Resident-mode recursive loading reached a package that is still loading.

	`cycle` lists the package directories along the cycle, starting and ending
	with the package that was re-entered.
	"""

	cycle: tuple[str, ...] = ()


@dataclass(frozen=True)
class RootNotFoundError(DriverError):
	"""The installation root (GNOROOT) could not be located."""


# Log-only events; these never surface as exceptions.
IMPORT_UNRESOLVED = "IMPORT_UNRESOLVED"
PATTERN_UNKNOWN = "PATTERN_UNKNOWN"
PATTERN_MATCH_COUNT = "PATTERN_MATCH_COUNT"
