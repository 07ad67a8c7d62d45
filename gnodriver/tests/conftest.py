# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from pathlib import Path

import pytest

from gnodriver.test_support import make_gno_root


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
	"""Keep the developer's own GNOROOT and driver settings out of the tests."""
	for name in ("GNOROOT", "GNODRIVER_WORKERS", "GNODRIVER_LOG_LEVEL"):
		monkeypatch.delenv(name, raising=False)


@pytest.fixture
def gno_root(tmp_path: Path) -> Path:
	return make_gno_root(tmp_path / "gnoroot")
