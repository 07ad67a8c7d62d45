# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from gnodriver.errors import FatalProtocolError
from gnodriver.logging_setup import init_logging
from gnodriver.options import DriverOptions
from gnodriver.protocol import run_driver

logger = logging.getLogger("gnodriver.cli")


def _build_parser() -> argparse.ArgumentParser:
	p = argparse.ArgumentParser(
		prog="gnodriver",
		description="Packages driver for Gno: reads a driver request on stdin, writes the package graph on stdout.",
	)
	p.add_argument("patterns", nargs="*", help="Query patterns: <dir>/... or file=<path>")
	p.add_argument("--gno-root", type=Path, default=None, help="Installation root (default: $GNOROOT, then `go list`)")
	p.add_argument("--workers", type=int, default=None, help="Thread pool size for per-package extraction (default: 1)")
	p.add_argument("--no-examples", action="store_true", help="Do not scan the examples tree of the installation root")
	p.add_argument("--no-stdlibs", action="store_true", help="Do not inject the standard library packages")
	p.add_argument("--log-level", default=None, help="Log level for stderr diagnostics (default: $GNODRIVER_LOG_LEVEL or WARNING)")
	p.add_argument("--log-json", action="store_true", help="Emit diagnostics as JSON lines")
	return p


def options_from_args(args: argparse.Namespace) -> DriverOptions:
	opts = DriverOptions.from_env()
	if args.gno_root is not None:
		opts = replace(opts, gno_root=args.gno_root)
	if args.workers is not None:
		opts = replace(opts, workers=max(1, args.workers))
	if args.no_examples:
		opts = replace(opts, inject_examples=False)
	if args.no_stdlibs:
		opts = replace(opts, inject_stdlibs=False)
	return opts


def main(argv: list[str] | None = None) -> int:
	p = _build_parser()
	args = p.parse_args(argv)
	init_logging(args.log_level, json_lines=bool(args.log_json))
	logger.info("started gnodriver", extra={"patterns": list(args.patterns)})

	try:
		opts = options_from_args(args)
	except ValueError as err:
		p.error(str(err))

	try:
		run_driver(sys.stdin.buffer, sys.stdout.buffer, list(args.patterns), options=opts)
	except FatalProtocolError as err:
		logger.error("%s", err.format_human(), extra={"reason_code": err.reason_code})
		return 1
	return 0
