# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Installation root discovery.

The root holds the built-in library sources (`gnovm/stdlibs`) and the example
packages (`examples`). Discovery is bounded: when it cannot decide quickly it
reports the root as unavailable instead of waiting.
"""

from __future__ import annotations

import os
import subprocess
from pathlib import Path

from gnodriver.errors import RootNotFoundError

GNO_MODULE = "github.com/gnolang/gno"
DEFAULT_LOOKUP_TIMEOUT = 5.0


def stdlibs_dir(root: Path) -> Path:
	return root / "gnovm" / "stdlibs"


def examples_dir(root: Path) -> Path:
	return root / "examples"


def guess_root_dir(*, timeout: float = DEFAULT_LOOKUP_TIMEOUT, env: dict[str, str] | None = None) -> Path:
	"""
	Locate the installation root.

	Lookup order:
	1. `$GNOROOT`, when it names an existing directory;
	2. the module directory reported by `go list` for the gno module.

	Raises `RootNotFoundError` when neither works.
	"""
	environ = os.environ if env is None else env
	from_env = environ.get("GNOROOT")
	if from_env:
		root = Path(from_env)
		if root.is_dir():
			return root
		raise RootNotFoundError(
			reason_code="ROOT_NOT_FOUND",
			message="GNOROOT does not name a directory",
			path=from_env,
		)

	try:
		proc = subprocess.run(
			["go", "list", "-m", "-mod=mod", "-f", "{{.Dir}}", GNO_MODULE],
			stdout=subprocess.PIPE,
			stderr=subprocess.PIPE,
			text=True,
			timeout=timeout,
			check=False,
		)
	except (OSError, subprocess.TimeoutExpired) as err:
		raise RootNotFoundError(reason_code="ROOT_NOT_FOUND", message=f"go list failed: {err}") from err
	if proc.returncode != 0:
		raise RootNotFoundError(
			reason_code="ROOT_NOT_FOUND",
			message=f"go list exited with {proc.returncode}: {proc.stderr.strip()}",
		)
	out = proc.stdout.strip()
	if not out or not Path(out).is_dir():
		raise RootNotFoundError(reason_code="ROOT_NOT_FOUND", message="go list did not report a module directory")
	return Path(out)
