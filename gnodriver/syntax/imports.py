# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Imports-only scanner for Gno source files.

Parses the package clause and the import declarations of one file and stops
there: bodies are never parsed, so a file whose declarations are still being
edited keeps scanning as long as its header is well formed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedInput

_GRAMMAR_PATH = Path(__file__).with_name("imports.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="contextual",
	start="start",
	propagate_positions=True,
	maybe_placeholders=False,
)


@dataclass(frozen=True)
class ImportSpec:
	path: str
	alias: str | None = None
	line: int | None = None
	column: int | None = None


@dataclass(frozen=True)
class FileHeader:
	"""Package clause and imports of a single file."""

	name: str
	imports: list[ImportSpec] = field(default_factory=list)

	@property
	def import_paths(self) -> list[str]:
		return [imp.path for imp in self.imports]


class ImportScanError(ValueError):
	"""
	The header of a file could not be scanned.

	Carries a best-effort location so callers can report `file:line:col`.
	"""

	def __init__(self, message: str, *, line: int | None = None, column: int | None = None) -> None:
		super().__init__(message)
		self.line = line
		self.column = column


def _literal_value(tok: Token) -> str:
	# Import paths are plain literals; stripping the quotes is enough.
	return tok.value[1:-1]


def _build_import_spec(tree: Tree) -> ImportSpec | None:
	alias: str | None = None
	path: str | None = None
	for child in tree.children:
		if not isinstance(child, Token):
			continue
		if child.type in ("NAME", "DOT"):
			alias = child.value
		elif child.type == "STRING":
			path = _literal_value(child)
	if not path:
		return None
	return ImportSpec(path=path, alias=alias, line=tree.meta.line, column=tree.meta.column)


def scan_header(source: str) -> FileHeader:
	"""Scan `source` and return its package name and imports, in source order."""
	try:
		tree = _PARSER.parse(source)
	except UnexpectedInput as err:
		raise ImportScanError(
			f"expected package clause and imports: {err.__class__.__name__}",
			line=getattr(err, "line", None),
			column=getattr(err, "column", None),
		) from err

	name = ""
	imports: list[ImportSpec] = []
	for node in tree.children:
		if not isinstance(node, Tree):
			continue
		if node.data == "package_clause":
			name = next(c.value for c in node.children if isinstance(c, Token) and c.type == "NAME")
		elif node.data == "import_decl":
			for spec_tree in node.children:
				if isinstance(spec_tree, Tree) and spec_tree.data in ("single_spec", "import_spec"):
					spec = _build_import_spec(spec_tree)
					if spec is not None:
						imports.append(spec)
	return FileHeader(name=name, imports=imports)


def scan_file(path: Path) -> FileHeader:
	"""Read and scan one file. I/O and decode errors propagate as `OSError`/`UnicodeDecodeError`."""
	return scan_header(path.read_text(encoding="utf-8"))
