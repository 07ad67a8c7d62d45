# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
gnodriver: packages driver for Gno source trees.

Layout:
  gnomod:   `gno.mod` manifest grammar and loader
  syntax:   imports-only scanning of `.gno` sources
  packages: discovery, extraction, stdlib injection, graph building, loaders
  protocol: request/response framing (stdin -> stdout)

The CLI entrypoint is `gnodriver.cli:main`.
"""

__all__ = ["gnomod", "syntax", "packages", "protocol"]
