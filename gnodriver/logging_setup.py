# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Diagnostic logging to stderr.

Stdout carries the driver response, so every log record goes to stderr,
either as plain text or as one JSON object per line with the record's `extra`
fields merged in.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, TextIO

LOGGER_NAME = "gnodriver"
DEFAULT_LEVEL = "WARNING"

# Attributes every LogRecord has; anything else came in through `extra`.
_STANDARD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


def record_extras(record: logging.LogRecord) -> dict[str, Any]:
	return {k: v for k, v in vars(record).items() if k not in _STANDARD_ATTRS}


class JsonLinesFormatter(logging.Formatter):
	def format(self, record: logging.LogRecord) -> str:
		base: dict[str, Any] = {
			"ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(timespec="milliseconds"),
			"lvl": record.levelname,
			"logger": record.name,
			"message": record.getMessage(),
		}
		for k, v in record_extras(record).items():
			base.setdefault(k, v)
		if record.exc_info:
			base["exc"] = self.formatException(record.exc_info)
		return json.dumps(base, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
	def __init__(self) -> None:
		super().__init__("%(levelname)s %(name)s: %(message)s")

	def format(self, record: logging.LogRecord) -> str:
		text = super().format(record)
		extras = record_extras(record)
		if extras:
			text += " " + " ".join(f"{k}={v}" for k, v in sorted(extras.items()))
		return text


class _StderrHandler(logging.StreamHandler):
	"""
	Stream handler owned by `init_logging`; repeated setup replaces it.

	Without an explicit stream it writes to whatever `sys.stderr` is at emit
	time, so a redirected stderr is honored.
	"""

	def __init__(self, stream: TextIO | None = None) -> None:
		super().__init__(stream if stream is not None else sys.stderr)
		self._follow_stderr = stream is None

	def emit(self, record: logging.LogRecord) -> None:
		if self._follow_stderr:
			self.stream = sys.stderr
		super().emit(record)


def init_logging(level: str | None = None, *, json_lines: bool = False, stream: TextIO | None = None) -> logging.Logger:
	level_name = (level or os.environ.get("GNODRIVER_LOG_LEVEL") or DEFAULT_LEVEL).upper()
	logger = logging.getLogger(LOGGER_NAME)
	logger.setLevel(getattr(logging, level_name, logging.WARNING))
	for h in list(logger.handlers):
		if isinstance(h, _StderrHandler):
			logger.removeHandler(h)
	handler = _StderrHandler(stream)
	handler.setFormatter(JsonLinesFormatter() if json_lines else TextFormatter())
	logger.addHandler(handler)
	return logger
