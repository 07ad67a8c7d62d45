# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Imports-only scanning of package clauses and import declarations."""

from __future__ import annotations

from pathlib import Path

import pytest

from gnodriver.syntax import ImportScanError, scan_file, scan_header
from gnodriver.test_support import write_file


def test_single_import():
	h = scan_header('package foo\n\nimport "std"\n\nfunc Foo() {}\n')
	assert h.name == "foo"
	assert h.import_paths == ["std"]


@pytest.mark.parametrize(
	"rest",
	["func A() {}\n", "var v = 1\n", "const c = 2\n", "type T struct{}\n", "func init() { x := y }\n"],
)
def test_single_import_followed_by_declarations(rest: str):
	"""A lone import spec must not swallow the first declaration keyword as an alias."""
	for header in ('import "x"\n', 'import ufmt "x"\n', 'import "x";'):
		h = scan_header(f"package a\n{header}{rest}")
		assert (h.name, h.import_paths) == ("a", ["x"])


def test_single_then_grouped_imports():
	h = scan_header('package a\nimport "x"\nimport (\n\t"y"\n)\nfunc A() {}\n')
	assert h.import_paths == ["x", "y"]


def test_grouped_imports_with_aliases():
	src = """package foo

import (
	"std"
	ufmt "gno.land/p/demo/ufmt"
	. "strings"
	_ "gno.land/p/demo/side"
)
"""
	h = scan_header(src)
	assert h.import_paths == ["std", "gno.land/p/demo/ufmt", "strings", "gno.land/p/demo/side"]
	assert [imp.alias for imp in h.imports] == [None, "ufmt", ".", "_"]
	assert h.imports[1].line == 5


def test_several_import_declarations_and_raw_strings():
	src = 'package bar\nimport "a/b"\nimport `c/d`\nimport ( "e" ; "f" )\n'
	assert scan_header(src).import_paths == ["a/b", "c/d", "e", "f"]


def test_comments_are_ignored():
	src = """/*
 * License header.
 */

// Package foo does things.
package foo // trailing

import (
	// the standard library
	"std" // inline
	/* block */ "strings"
)
"""
	h = scan_header(src)
	assert h.name == "foo"
	assert h.import_paths == ["std", "strings"]


def test_body_is_never_parsed():
	# Declarations after the imports may be broken while being edited.
	src = 'package foo\n\nimport "std"\n\nfunc broken( {\n\timport "not/an/import"\n'
	h = scan_header(src)
	assert h.import_paths == ["std"]


def test_file_without_imports():
	h = scan_header("package only\n")
	assert h.name == "only"
	assert h.imports == []


def test_empty_import_path_is_skipped():
	assert scan_header('package foo\nimport ""\nimport "x"\n').import_paths == ["x"]


def test_missing_package_clause_raises():
	with pytest.raises(ImportScanError) as info:
		scan_header("func main() {}\n")
	assert info.value.line == 1


def test_malformed_import_group_raises_with_position():
	with pytest.raises(ImportScanError) as info:
		scan_header('package foo\nimport (\n\t"std"\nfunc x()\n')
	assert info.value.line == 4


def test_scan_file_reads_utf8(tmp_path: Path):
	p = write_file(tmp_path / "a.gno", '// żółw\npackage a\n\nimport "std"\n')
	h = scan_file(p)
	assert (h.name, h.import_paths) == ("a", ["std"])
