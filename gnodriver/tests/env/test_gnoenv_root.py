# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Installation root discovery and environment-driven options."""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from gnodriver import gnoenv
from gnodriver.errors import RootNotFoundError
from gnodriver.options import DriverOptions
from gnodriver.packages import loader
from gnodriver.test_support import write_package


def test_gnoroot_env_wins(tmp_path: Path, monkeypatch):
	def no_subprocess(*args, **kwargs):
		raise AssertionError("go list must not run when GNOROOT is set")

	monkeypatch.setattr(gnoenv.subprocess, "run", no_subprocess)
	assert gnoenv.guess_root_dir(env={"GNOROOT": str(tmp_path)}) == tmp_path


def test_gnoroot_env_must_be_a_directory(tmp_path: Path):
	with pytest.raises(RootNotFoundError) as info:
		gnoenv.guess_root_dir(env={"GNOROOT": str(tmp_path / "missing")})
	assert info.value.reason_code == "ROOT_NOT_FOUND"


def test_go_list_fallback(tmp_path: Path, monkeypatch):
	calls = []

	def fake_run(cmd, **kwargs):
		calls.append((cmd, kwargs["timeout"]))
		return subprocess.CompletedProcess(cmd, 0, stdout=f"{tmp_path}\n", stderr="")

	monkeypatch.setattr(gnoenv.subprocess, "run", fake_run)
	assert gnoenv.guess_root_dir(timeout=2.5, env={}) == tmp_path
	assert calls == [(["go", "list", "-m", "-mod=mod", "-f", "{{.Dir}}", "github.com/gnolang/gno"], 2.5)]


@pytest.mark.parametrize(
	"outcome",
	[
		FileNotFoundError("go"),
		subprocess.TimeoutExpired(["go"], 5.0),
		subprocess.CompletedProcess(["go"], 1, stdout="", stderr="not a module"),
		subprocess.CompletedProcess(["go"], 0, stdout="\n", stderr=""),
	],
)
def test_go_list_failures(monkeypatch, outcome):
	def fake_run(cmd, **kwargs):
		if isinstance(outcome, BaseException):
			raise outcome
		return outcome

	monkeypatch.setattr(gnoenv.subprocess, "run", fake_run)
	with pytest.raises(RootNotFoundError):
		gnoenv.guess_root_dir(env={})


def test_locate_root_degrades_to_none(monkeypatch, caplog):
	def missing(**kwargs):
		raise RootNotFoundError(reason_code="ROOT_NOT_FOUND", message="nope")

	monkeypatch.setattr(loader, "guess_root_dir", missing)
	assert loader.locate_root(DriverOptions()) is None
	assert any("can't find gno root" in r.getMessage() for r in caplog.records)


def test_batch_resolver_without_root(monkeypatch, tmp_path: Path):
	def missing(**kwargs):
		raise RootNotFoundError(reason_code="ROOT_NOT_FOUND", message="nope")

	monkeypatch.setattr(loader, "guess_root_dir", missing)
	write_package(tmp_path / "app", "gno.land/r/demo/app", imports=["std"])
	res = loader.BatchResolver().discover([f"{tmp_path}/..."])
	assert [p.pkg_path for p in res.packages] == ["gno.land/r/demo/app"]
	assert res.roots == [str(tmp_path / "app")]


def test_options_from_env(tmp_path: Path):
	opts = DriverOptions.from_env({"GNODRIVER_WORKERS": "0", "GNOROOT": str(tmp_path)})
	assert opts.workers == 1
	assert opts.gno_root == tmp_path
	assert DriverOptions.from_env({"GNODRIVER_WORKERS": "6"}).workers == 6
	with pytest.raises(ValueError, match="GNODRIVER_WORKERS"):
		DriverOptions.from_env({"GNODRIVER_WORKERS": "lots"})
