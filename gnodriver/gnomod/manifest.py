# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
`gno.mod` manifest model and loader.

The manifest is authoritative for a package's logical module path. The driver
reads only `module`, `require`, `replace` and the `// Draft` marker; other
directives are parsed and ignored so newer manifests keep loading.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from pathlib import Path

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedInput

from gnodriver.errors import ManifestError

MANIFEST_NAME = "gno.mod"

_GRAMMAR_PATH = Path(__file__).with_name("gnomod.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="contextual",
	start="start",
	propagate_positions=True,
	maybe_placeholders=False,
)

_ELEM_RE = re.compile(r"^[A-Za-z0-9_.~+-]+$")
_DRAFT_RE = re.compile(r"^\s*//\s*Draft\s*$")


@dataclass(frozen=True)
class Replace:
	old_path: str
	old_version: str | None
	new_path: str
	new_version: str | None


@dataclass(frozen=True)
class Manifest:
	module: str
	draft: bool = False
	requires: list[str] = field(default_factory=list)
	replaces: list[Replace] = field(default_factory=list)
	path: str | None = None

	def sanitize(self) -> "Manifest":
		"""Return a copy with trimmed paths and duplicate requires dropped (first wins)."""
		seen: set[str] = set()
		reqs: list[str] = []
		for r in self.requires:
			clean = _clean_path(r)
			if not clean or clean in seen:
				continue
			seen.add(clean)
			reqs.append(clean)
		return replace(self, module=_clean_path(self.module), requires=reqs)

	def validate(self) -> None:
		"""Raise `ManifestError` unless the module path is a usable import path."""
		problem = module_path_problem(self.module)
		if problem is not None:
			raise ManifestError(
				reason_code="MANIFEST_INVALID",
				message=f"invalid module path {self.module!r}: {problem}",
				path=self.path,
			)
		for r in self.requires:
			problem = module_path_problem(r)
			if problem is not None:
				raise ManifestError(
					reason_code="MANIFEST_INVALID",
					message=f"invalid required module path {r!r}: {problem}",
					path=self.path,
				)


def _clean_path(p: str) -> str:
	return p.strip().rstrip("/")


def module_path_problem(path: str) -> str | None:
	"""Return a short reason why `path` is not a valid module path, or None."""
	if not path:
		return "empty"
	if path.startswith("/"):
		return "leading slash"
	for elem in path.split("/"):
		if not elem:
			return "empty path element"
		if elem in (".", ".."):
			return f"invalid path element {elem!r}"
		if elem.startswith(".") or elem.endswith("."):
			return f"path element {elem!r} has a leading or trailing dot"
		if not _ELEM_RE.match(elem):
			return f"path element {elem!r} contains invalid characters"
	return None


def _unquote(tok: Token) -> str:
	val = tok.value
	if tok.type == "STRING":
		return val[1:-1]
	return val


def _words(tree: Tree) -> list[Token]:
	return [c for c in tree.children if isinstance(c, Token)]


def parse_manifest(source: str, *, path: str | None = None) -> Manifest:
	"""
	Parse `gno.mod` text into a `Manifest` (not yet sanitized or validated).

	Raises `ManifestError(MANIFEST_INVALID)` on syntax errors, a missing or
	repeated `module` directive.
	"""
	try:
		tree = _PARSER.parse(source)
	except UnexpectedInput as err:
		raise ManifestError(
			reason_code="MANIFEST_INVALID",
			message=f"syntax error: {err.__class__.__name__}",
			path=path,
			line=getattr(err, "line", None),
			column=getattr(err, "column", None),
		) from err

	module: str | None = None
	module_line = 0
	requires: list[str] = []
	replaces: list[Replace] = []
	for stmt in tree.children:
		if not isinstance(stmt, Tree):
			continue
		kind = stmt.data
		if kind == "module_stmt":
			if module is not None:
				raise ManifestError(
					reason_code="MANIFEST_INVALID",
					message="repeated module directive",
					path=path,
					line=stmt.meta.line,
					column=stmt.meta.column,
				)
			module = _unquote(_words(stmt)[0])
			module_line = stmt.meta.line
		elif kind == "require_stmt":
			for spec in stmt.children:
				if isinstance(spec, Tree) and spec.data == "require_spec":
					requires.append(_unquote(_words(spec)[0]))
		elif kind == "replace_stmt":
			for spec in stmt.children:
				if isinstance(spec, Tree) and spec.data == "replace_spec":
					replaces.append(_build_replace(spec))

	if module is None:
		raise ManifestError(reason_code="MANIFEST_INVALID", message="no module directive", path=path)

	lines = source.splitlines()[: module_line - 1]
	draft = any(_DRAFT_RE.match(line) for line in lines)
	return Manifest(module=module, draft=draft, requires=requires, replaces=replaces, path=path)


def _build_replace(spec: Tree) -> Replace:
	toks = _words(spec)
	# Layout: old [old_version] new [new_version]; versions are VERSION_WORD tokens.
	old = _unquote(toks[0])
	i = 1
	old_version = None
	if i < len(toks) and toks[i].type == "VERSION_WORD":
		old_version = toks[i].value
		i += 1
	new = _unquote(toks[i])
	new_version = toks[i + 1].value if i + 1 < len(toks) else None
	return Replace(old_path=old, old_version=old_version, new_path=new, new_version=new_version)


def load_manifest(directory: Path) -> Manifest:
	"""
	Read, parse, sanitize and validate `<directory>/gno.mod`.

	A missing file raises `ManifestError(MANIFEST_MISSING)`; everything else
	that goes wrong raises `ManifestError(MANIFEST_INVALID)`.
	"""
	mod_path = directory / MANIFEST_NAME
	try:
		data = mod_path.read_text(encoding="utf-8")
	except FileNotFoundError as err:
		raise ManifestError(reason_code="MANIFEST_MISSING", message="no gno.mod", path=str(mod_path)) from err
	except (OSError, UnicodeDecodeError) as err:
		raise ManifestError(
			reason_code="MANIFEST_INVALID",
			message=f"unable to read gno.mod: {err}",
			path=str(mod_path),
		) from err
	manifest = parse_manifest(data, path=str(mod_path)).sanitize()
	manifest.validate()
	return manifest
