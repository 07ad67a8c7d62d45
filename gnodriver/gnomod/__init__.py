# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
`gno.mod` manifest support.

The grammar lives next to the loader in `gnomod.lark`.
"""

from .manifest import MANIFEST_NAME, Manifest, Replace, load_manifest, module_path_problem, parse_manifest

__all__ = ["MANIFEST_NAME", "Manifest", "Replace", "load_manifest", "module_path_problem", "parse_manifest"]
