# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Graph assembly: roots, dedup, write-once registry and best-effort linking."""

from __future__ import annotations

import logging
from pathlib import Path

from gnodriver.packages.descriptor import PackageDescriptor
from gnodriver.packages.extractor import build_descriptor
from gnodriver.packages.graph import Candidate, GraphBuilder, Registry, link_imports
from gnodriver.packages.scanner import scan_directory, scan_packages
from gnodriver.test_support import write_file, write_package


def _candidates(root: Path, *, explicit: bool = True) -> list[Candidate]:
	return [Candidate(pkg=p, explicit=explicit) for p in scan_packages(root)]


def test_unresolved_imports_are_dropped(tmp_path: Path, caplog):
	write_package(tmp_path / "a", "gno.land/p/demo/a", imports=["gno.land/p/demo/b", "gno.land/p/demo/missing"])
	write_package(tmp_path / "b", "gno.land/p/demo/b")

	with caplog.at_level(logging.DEBUG, logger="gnodriver"):
		res = GraphBuilder().build([], _candidates(tmp_path))

	a, b = res.packages
	assert a.raw_imports == ["gno.land/p/demo/b", "gno.land/p/demo/missing"]
	assert list(a.imports) == ["gno.land/p/demo/b"]
	assert a.imports["gno.land/p/demo/b"] is b
	missed = [r for r in caplog.records if getattr(r, "reason_code", None) == "IMPORT_UNRESOLVED"]
	assert [r.import_path for r in missed] == ["gno.land/p/demo/missing"]


def test_only_explicit_candidates_are_roots(tmp_path: Path):
	write_package(tmp_path / "ws" / "app", "gno.land/r/demo/app", imports=["gno.land/p/demo/lib"])
	write_package(tmp_path / "examples" / "lib", "gno.land/p/demo/lib")

	cands = _candidates(tmp_path / "ws") + _candidates(tmp_path / "examples", explicit=False)
	res = GraphBuilder().build([], cands)

	assert res.roots == [str(tmp_path / "ws" / "app")]
	assert [p.id for p in res.packages] == [str(tmp_path / "ws" / "app"), str(tmp_path / "examples" / "lib")]
	assert res.packages[0].to_dict()["Imports"] == {"gno.land/p/demo/lib": str(tmp_path / "examples" / "lib")}


def test_same_directory_through_two_patterns_is_built_once(tmp_path: Path):
	write_package(tmp_path / "lib", "gno.land/p/demo/lib")
	calls: list[Path] = []

	def counting_build(pkg):
		calls.append(pkg.dir)
		return build_descriptor(pkg)

	pkg = scan_directory(tmp_path / "lib")
	cands = [Candidate(pkg=pkg, explicit=False), Candidate(pkg=pkg, explicit=True)]
	res = GraphBuilder(build=counting_build).build([], cands)

	assert len(calls) == 1
	assert len(res.packages) == 1
	assert res.roots == [str(tmp_path / "lib")]


def test_duplicate_module_path_first_wins(tmp_path: Path, caplog):
	write_package(tmp_path / "a_first", "gno.land/p/demo/dup")
	write_package(tmp_path / "b_second", "gno.land/p/demo/dup")
	write_package(tmp_path / "c_user", "gno.land/r/demo/user", imports=["gno.land/p/demo/dup"])

	with caplog.at_level(logging.WARNING):
		res = GraphBuilder().build([], _candidates(tmp_path))

	first, second, user = res.packages
	assert len(res.packages) == 3
	assert res.registry.get("gno.land/p/demo/dup") is first
	assert user.imports["gno.land/p/demo/dup"] is first
	assert second.id not in user.to_dict()["Imports"].values()
	assert any("duplicate package path" in r.getMessage() for r in caplog.records)


def test_injected_packages_come_first_and_link(tmp_path: Path):
	std = PackageDescriptor(id="std", pkg_path="std", name="std", injected=True)
	write_package(tmp_path / "a", "gno.land/p/demo/a", imports=["std"])

	res = GraphBuilder().build([std], _candidates(tmp_path))

	assert res.packages[0] is std
	assert res.roots == [str(tmp_path / "a")]
	assert res.packages[1].to_dict()["Imports"] == {"std": "std"}


def test_failing_package_is_dropped(tmp_path: Path, caplog):
	write_package(tmp_path / "a", "gno.land/p/demo/a")
	write_package(tmp_path / "b", "gno.land/p/demo/b")
	write_file(tmp_path / "b" / "broken.gno", "package\n")

	with caplog.at_level(logging.ERROR):
		res = GraphBuilder().build([], _candidates(tmp_path))

	assert [p.pkg_path for p in res.packages] == ["gno.land/p/demo/a"]
	assert res.roots == [str(tmp_path / "a")]
	rec = next(r for r in caplog.records if "failed to convert package" in r.getMessage())
	assert rec.reason_code == "PACKAGE_LOAD"


def test_thread_pool_gives_the_same_graph(tmp_path: Path):
	for i in range(8):
		deps = [f"gno.land/p/demo/p{j}" for j in range(i)]
		write_package(tmp_path / f"p{i}", f"gno.land/p/demo/p{i}", imports=deps)

	serial = GraphBuilder(workers=1).build([], _candidates(tmp_path))
	pooled = GraphBuilder(workers=4).build([], _candidates(tmp_path))

	assert [p.to_dict() for p in pooled.packages] == [p.to_dict() for p in serial.packages]
	assert pooled.roots == serial.roots
	assert len(pooled.packages[7].imports) == 7


def test_registry_is_write_once():
	reg = Registry()
	a = PackageDescriptor(id="a", pkg_path="x")
	b = PackageDescriptor(id="b", pkg_path="x")
	assert reg.add(a) is True
	assert reg.add(b) is False
	assert reg.add(a) is True
	assert reg.get("x") is a
	assert "x" in reg
	assert len(reg) == 1


def test_link_imports_resets_previous_edges():
	reg = Registry()
	dep = PackageDescriptor(id="dep", pkg_path="dep")
	pkg = PackageDescriptor(id="pkg", pkg_path="pkg", raw_imports=["dep"])
	pkg.imports = {"stale": dep}
	reg.add(dep)
	reg.add(pkg)
	link_imports([pkg, dep], reg)
	assert pkg.imports == {"dep": dep}
