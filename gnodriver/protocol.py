# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Packages-driver protocol adapter.

One exchange per invocation: read a JSON request from a byte stream, resolve,
write a JSON response. Only framing failures (read, decode, encode, write) are
fatal; everything else degrades the package set.
"""

from __future__ import annotations

import json
import logging
from typing import BinaryIO

from gnodriver.errors import FatalProtocolError
from gnodriver.options import DriverOptions
from gnodriver.packages.loader import BatchResolver, PackageLoader
from gnodriver.packages.request import DriverRequest, DriverResponse

logger = logging.getLogger(__name__)


def read_request(stream: BinaryIO) -> DriverRequest:
	try:
		raw = stream.read()
	except OSError as err:
		raise FatalProtocolError(reason_code="PROTOCOL_READ", message=f"failed to read request: {err}") from err
	try:
		data = json.loads(raw)
		return DriverRequest.from_dict(data)
	except (ValueError, UnicodeDecodeError) as err:
		raise FatalProtocolError(reason_code="PROTOCOL_DECODE", message=f"failed to unmarshal request: {err}") from err


def encode_response(res: DriverResponse) -> bytes:
	"""Compact JSON with sorted keys, so identical graphs give identical bytes."""
	try:
		return json.dumps(res.to_dict(), sort_keys=True, separators=(",", ":")).encode("utf-8")
	except (TypeError, ValueError) as err:
		raise FatalProtocolError(reason_code="PROTOCOL_ENCODE", message=f"failed to marshal response: {err}") from err


def write_response(stream: BinaryIO, payload: bytes) -> None:
	try:
		stream.write(payload)
		stream.flush()
	except OSError as err:
		raise FatalProtocolError(reason_code="PROTOCOL_WRITE", message=f"failed to write response: {err}") from err


def run_driver(
	stdin: BinaryIO,
	stdout: BinaryIO,
	args: list[str] | None = None,
	*,
	options: DriverOptions | None = None,
	loader: PackageLoader | None = None,
) -> DriverResponse:
	"""
	Serve one request.

	Patterns are the request's `Patterns` followed by `args` (the command-line
	patterns), duplicates removed.
	"""
	req = read_request(stdin)
	logger.info(
		"unmarshalled request",
		extra={
			"mode": req.mode,
			"tests": req.tests,
			"build_flags": req.build_flags,
			"overlay": sorted(req.overlay),
		},
	)

	patterns: list[str] = []
	for p in list(req.patterns) + list(args or []):
		if p not in patterns:
			patterns.append(p)

	resolver = loader if loader is not None else BatchResolver(options)
	res = resolver.discover(patterns)
	write_response(stdout, encode_response(res))
	logger.info("success", extra={"packages": len(res.packages), "roots": len(res.roots)})
	return res
