# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Package records produced by discovery and consumed by the graph builder.

`PackageDescriptor` is the resolved metadata for one package. It is mutable
only while a pipeline owns it: extraction fills the local fields, linking fills
`imports`, after which the response serializes it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

from gnodriver.errors import DriverError

ErrorKind = Literal["UnknownError", "ListError", "ParseError", "TypeError"]


@dataclass(frozen=True)
class PackageError:
	pos: str
	msg: str
	kind: ErrorKind = "UnknownError"

	@classmethod
	def from_error(cls, err: DriverError, *, kind: ErrorKind = "ListError") -> "PackageError":
		return cls(pos=err.pos, msg=err.message, kind=kind)

	def to_dict(self) -> dict[str, Any]:
		return {"Pos": self.pos, "Msg": self.msg, "Kind": _KIND_CODES[self.kind]}


# Wire values of the packages-driver error kinds.
_KIND_CODES: dict[str, int] = {"UnknownError": 0, "ListError": 1, "ParseError": 2, "TypeError": 3}


@dataclass(frozen=True)
class DiscoveredPackage:
	"""A directory that holds a valid `gno.mod`, as reported by the scanner."""

	dir: Path
	module_path: str
	draft: bool = False
	requires: list[str] = field(default_factory=list)


@dataclass(eq=False)
class PackageDescriptor:
	id: str
	pkg_path: str
	name: str = ""
	go_files: list[str] = field(default_factory=list)
	other_files: list[str] = field(default_factory=list)
	raw_imports: list[str] = field(default_factory=list)
	imports: dict[str, "PackageDescriptor"] = field(default_factory=dict)
	errors: list[PackageError] = field(default_factory=list)
	dir: str | None = None
	injected: bool = False

	@property
	def compiled_go_files(self) -> list[str]:
		return list(self.go_files)

	def to_dict(self) -> dict[str, Any]:
		"""
		Serialize in the packages-driver wire shape.

		Empty fields other than `ID` are omitted. Imports refer to their target by
		ID; the full target record is part of the same response.
		"""
		out: dict[str, Any] = {"ID": self.id}
		if self.name:
			out["Name"] = self.name
		if self.pkg_path:
			out["PkgPath"] = self.pkg_path
		if self.errors:
			out["Errors"] = [e.to_dict() for e in self.errors]
		if self.go_files:
			out["GoFiles"] = list(self.go_files)
			out["CompiledGoFiles"] = self.compiled_go_files
		if self.other_files:
			out["OtherFiles"] = list(self.other_files)
		if self.imports:
			out["Imports"] = {path: dep.id for path, dep in sorted(self.imports.items())}
		return out

	def __repr__(self) -> str:
		return f"PackageDescriptor(id={self.id!r}, pkg_path={self.pkg_path!r}, name={self.name!r})"
