# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Driver request/response records.

Field names on the wire follow the packages-driver protocol (`Mode`, `Tests`,
`BuildFlags`, ...). Mode, build flags, env and overlay are carried through
untouched; they are logged but do not change resolution.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from gnodriver.packages.descriptor import PackageDescriptor


@dataclass(frozen=True)
class DriverRequest:
	mode: int = 0
	tests: bool = False
	build_flags: list[str] = field(default_factory=list)
	env: list[str] = field(default_factory=list)
	overlay: dict[str, str] = field(default_factory=dict)
	patterns: list[str] = field(default_factory=list)

	@classmethod
	def from_dict(cls, data: Any) -> "DriverRequest":
		"""Validate a decoded JSON request. Raises `ValueError` on shape errors."""
		if not isinstance(data, dict):
			raise ValueError("request must be a JSON object")
		mode = data.get("Mode", 0)
		tests = data.get("Tests", False)
		build_flags = data.get("BuildFlags") or []
		env = data.get("Env") or []
		overlay = data.get("Overlay") or {}
		patterns = data.get("Patterns") or []
		if not isinstance(mode, int) or isinstance(mode, bool):
			raise ValueError("request Mode must be an integer")
		if not isinstance(tests, bool):
			raise ValueError("request Tests must be a boolean")
		if not isinstance(build_flags, list) or not all(isinstance(f, str) for f in build_flags):
			raise ValueError("request BuildFlags must be a list of strings")
		if not isinstance(env, list) or not all(isinstance(e, str) for e in env):
			raise ValueError("request Env must be a list of strings")
		if not isinstance(overlay, dict) or not all(isinstance(k, str) and isinstance(v, str) for k, v in overlay.items()):
			raise ValueError("request Overlay must map paths to strings")
		if not isinstance(patterns, list) or not all(isinstance(p, str) for p in patterns):
			raise ValueError("request Patterns must be a list of strings")
		return cls(
			mode=mode,
			tests=tests,
			build_flags=list(build_flags),
			env=list(env),
			overlay=dict(overlay),
			patterns=list(patterns),
		)


@dataclass
class DriverResponse:
	packages: list[PackageDescriptor] = field(default_factory=list)
	roots: list[str] = field(default_factory=list)

	def to_dict(self) -> dict[str, Any]:
		return {
			"NotHandled": False,
			"Compiler": "gc",
			"Arch": "",
			"Roots": list(self.roots),
			"Packages": [p.to_dict() for p in self.packages],
			"GoVersion": 0,
		}
