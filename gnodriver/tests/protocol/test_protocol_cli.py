# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Process contract: stdin request, stdout response, exit codes."""

from __future__ import annotations

import io
import json
import sys
from pathlib import Path

import pytest

from gnodriver import cli
from gnodriver.test_support import write_package


def _stdio(monkeypatch: pytest.MonkeyPatch, data: bytes) -> io.BytesIO:
	stdout = io.TextIOWrapper(io.BytesIO())
	monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(data)))
	monkeypatch.setattr(sys, "stdout", stdout)
	return stdout.buffer


def _stderr(monkeypatch: pytest.MonkeyPatch) -> io.StringIO:
	err = io.StringIO()
	monkeypatch.setattr(sys, "stderr", err)
	return err


def test_success_writes_response_and_exits_zero(monkeypatch, gno_root: Path, tmp_path: Path):
	write_package(tmp_path / "ws" / "app", "gno.land/r/demo/app", imports=["gno.land/p/demo/avl"])
	out = _stdio(monkeypatch, b"{}")

	code = cli.main(["--gno-root", str(gno_root), f"{tmp_path / 'ws'}/..."])

	assert code == 0
	res = json.loads(out.getvalue())
	assert res["Roots"] == [str(tmp_path / "ws" / "app")]
	assert {p["PkgPath"] for p in res["Packages"]} == {"std", "strings", "gno.land/r/demo/app", "gno.land/p/demo/avl"}


def test_no_examples_and_no_stdlibs(monkeypatch, gno_root: Path, tmp_path: Path):
	write_package(tmp_path / "ws" / "app", "gno.land/r/demo/app", imports=["gno.land/p/demo/avl"])
	out = _stdio(monkeypatch, json.dumps({"Patterns": [f"{tmp_path / 'ws'}/..."]}).encode())

	code = cli.main(["--gno-root", str(gno_root), "--no-examples", "--no-stdlibs", "--workers", "2"])

	assert code == 0
	res = json.loads(out.getvalue())
	assert [p["PkgPath"] for p in res["Packages"]] == ["gno.land/r/demo/app"]
	assert "Imports" not in res["Packages"][0]


def test_gnoroot_from_environment(monkeypatch, gno_root: Path, tmp_path: Path):
	monkeypatch.setenv("GNOROOT", str(gno_root))
	out = _stdio(monkeypatch, b"{}")
	assert cli.main([]) == 0
	res = json.loads(out.getvalue())
	assert res["Roots"] == []
	assert [p["ID"] for p in res["Packages"]][:2] == ["std", "strings"]


def test_decode_failure_exits_one(monkeypatch, gno_root: Path):
	out = _stdio(monkeypatch, b"")
	err = _stderr(monkeypatch)
	assert cli.main(["--gno-root", str(gno_root)]) == 1
	assert out.getvalue() == b""
	assert "PROTOCOL_DECODE" in err.getvalue()


def test_json_log_lines(monkeypatch, gno_root: Path):
	_stdio(monkeypatch, b"{")
	err = _stderr(monkeypatch)
	assert cli.main(["--gno-root", str(gno_root), "--log-json"]) == 1
	lines = [json.loads(line) for line in err.getvalue().splitlines()]
	assert lines[-1]["lvl"] == "ERROR"
	assert lines[-1]["reason_code"] == "PROTOCOL_DECODE"


def test_bad_worker_setting_is_a_usage_error(monkeypatch, gno_root: Path):
	monkeypatch.setenv("GNODRIVER_WORKERS", "many")
	_stdio(monkeypatch, b"{}")
	with pytest.raises(SystemExit) as info:
		cli.main(["--gno-root", str(gno_root)])
	assert info.value.code == 2
