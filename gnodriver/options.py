# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path

from gnodriver.gnoenv import DEFAULT_LOOKUP_TIMEOUT


@dataclass(frozen=True)
class DriverOptions:
	"""
	Knobs for one resolution pass.

	`gno_root` short-circuits root discovery when set; `workers` sizes the
	thread pool used for per-package extraction (1 keeps it on the caller's
	thread).
	"""

	gno_root: Path | None = None
	workers: int = 1
	inject_examples: bool = True
	inject_stdlibs: bool = True
	root_lookup_timeout: float = DEFAULT_LOOKUP_TIMEOUT

	@classmethod
	def from_env(cls, env: dict[str, str] | None = None) -> "DriverOptions":
		environ = os.environ if env is None else env
		opts = cls()
		workers = environ.get("GNODRIVER_WORKERS")
		if workers:
			try:
				opts = replace(opts, workers=max(1, int(workers)))
			except ValueError:
				raise ValueError(f"GNODRIVER_WORKERS must be an integer, got: {workers}") from None
		root = environ.get("GNOROOT")
		if root:
			opts = replace(opts, gno_root=Path(root))
		return opts
