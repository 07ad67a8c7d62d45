# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lightweight syntactic scanning of Gno sources (package clause + imports only).
"""

from .imports import FileHeader, ImportScanError, ImportSpec, scan_file, scan_header

__all__ = ["FileHeader", "ImportScanError", "ImportSpec", "scan_file", "scan_header"]
