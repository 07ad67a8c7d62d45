# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Helpers for building package trees on disk in tests.
"""

from __future__ import annotations

from pathlib import Path


def write_file(path: Path, text: str) -> Path:
	path.parent.mkdir(parents=True, exist_ok=True)
	path.write_text(text, encoding="utf-8")
	return path


def gno_source(name: str, imports: list[str] | tuple[str, ...] = (), body: str = "") -> str:
	lines = [f"package {name}", ""]
	if len(imports) == 1:
		lines.append(f'import "{imports[0]}"')
	elif imports:
		lines.append("import (")
		lines.extend(f'\t"{imp}"' for imp in imports)
		lines.append(")")
	lines.append("")
	lines.append(body or f"func {name.capitalize()}() int {{ return 0 }}")
	return "\n".join(lines) + "\n"


def write_gnomod(directory: Path, module: str, *, requires: list[str] | None = None, draft: bool = False) -> Path:
	lines: list[str] = []
	if draft:
		lines.append("// Draft")
		lines.append("")
	lines.append(f"module {module}")
	if requires:
		lines.append("")
		lines.append("require (")
		lines.extend(f"\t{r} v0.0.0-latest" for r in requires)
		lines.append(")")
	return write_file(directory / "gno.mod", "\n".join(lines) + "\n")


def write_package(
	directory: Path,
	module: str | None,
	*,
	name: str | None = None,
	imports: list[str] | tuple[str, ...] = (),
	files: int = 1,
) -> Path:
	"""
	Create a package directory with `files` primary sources.

	`module=None` leaves the directory without a manifest.
	"""
	if module is not None:
		write_gnomod(directory, module)
	pkg_name = name or (module.rsplit("/", 1)[-1] if module else directory.name)
	for i in range(files):
		write_file(directory / f"file{i}.gno", gno_source(pkg_name, imports if i == 0 else ()))
	return directory


def make_gno_root(base: Path) -> Path:
	"""
	Minimal installation root: `std` and `strings` in the library tree, and one
	example package (`gno.land/p/demo/avl`, importing `std`).
	"""
	libs = base / "gnovm" / "stdlibs"
	write_file(libs / "std" / "std.gno", gno_source("std"))
	write_file(libs / "strings" / "strings.gno", gno_source("strings"))
	write_package(base / "examples" / "gno.land" / "p" / "demo" / "avl", "gno.land/p/demo/avl", imports=["std"])
	return base
