# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Generation-counted package cache for the resident resolver.

Nodes live in an arena (a plain list) and refer to each other by index, which
keeps the dependency graph acyclic in memory even when the import graph is not.
A node is fresh iff its stamp equals the current generation.

Invalidation bumps the generation and carries every unaffected node forward;
the invalidated node and all of its transitive parents keep the old stamp and
are therefore stale until re-stored.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator

from gnodriver.packages.descriptor import PackageDescriptor

DEFAULT_READ_TIMEOUT = 1.0


@dataclass
class _Node:
	key: str
	descriptor: PackageDescriptor | None = None
	stamp: int = -1
	parents: set[int] = field(default_factory=set)
	children: set[int] = field(default_factory=set)


class _ReadWriteLock:
	"""
	Many readers or one writer. Readers give up after a timeout instead of
	waiting forever, and a waiting writer holds back new readers.
	"""

	def __init__(self) -> None:
		self._cond = threading.Condition(threading.Lock())
		self._readers = 0
		self._writer = False
		self._writers_waiting = 0

	def acquire_read(self, timeout: float) -> bool:
		with self._cond:
			if not self._cond.wait_for(lambda: not self._writer and self._writers_waiting == 0, timeout=timeout):
				return False
			self._readers += 1
			return True

	def release_read(self) -> None:
		with self._cond:
			self._readers -= 1
			if self._readers == 0:
				self._cond.notify_all()

	@contextmanager
	def write(self) -> Iterator[None]:
		with self._cond:
			self._writers_waiting += 1
			try:
				self._cond.wait_for(lambda: not self._writer and self._readers == 0)
			finally:
				self._writers_waiting -= 1
			self._writer = True
		try:
			yield
		finally:
			with self._cond:
				self._writer = False
				self._cond.notify_all()


class ResolutionCache:
	"""
	Every accessor reads under the shared lock. A reader that cannot get it
	within `read_timeout` sees an empty cache rather than waiting.
	"""

	def __init__(self, *, read_timeout: float = DEFAULT_READ_TIMEOUT) -> None:
		self._nodes: list[_Node] = []
		self._index: dict[str, int] = {}
		self._generation = 0
		self._lock = _ReadWriteLock()
		self._read_timeout = read_timeout

	@property
	def generation(self) -> int:
		return self._generation

	@contextmanager
	def _reading(self) -> Iterator[bool]:
		acquired = self._lock.acquire_read(self._read_timeout)
		try:
			yield acquired
		finally:
			if acquired:
				self._lock.release_read()

	def _node_index(self, key: str) -> int:
		idx = self._index.get(key)
		if idx is None:
			idx = len(self._nodes)
			self._nodes.append(_Node(key=key))
			self._index[key] = idx
		return idx

	def lookup(self, key: str) -> PackageDescriptor | None:
		"""Fresh descriptor for `key`, or None (unknown, stale, or lock not obtained in time)."""
		with self._reading() as ok:
			idx = self._index.get(key) if ok else None
			if idx is None:
				return None
			node = self._nodes[idx]
			if node.stamp != self._generation:
				return None
			return node.descriptor

	def is_fresh(self, key: str) -> bool:
		return self.lookup(key) is not None

	def store(self, key: str, descriptor: PackageDescriptor, *, children: list[str] | tuple[str, ...] = ()) -> None:
		"""
		Record a freshly computed descriptor and its direct dependencies.

		Previous child edges of `key` are replaced, so an import removed from the
		package no longer links it to the old dependency.
		"""
		with self._lock.write():
			idx = self._node_index(key)
			node = self._nodes[idx]
			for old in node.children:
				self._nodes[old].parents.discard(idx)
			node.children = set()
			for child_key in children:
				cidx = self._node_index(child_key)
				node.children.add(cidx)
				self._nodes[cidx].parents.add(idx)
			node.descriptor = descriptor
			node.stamp = self._generation

	def ancestors(self, key: str) -> list[str]:
		"""`key` plus every package that (transitively) depends on it, in BFS order."""
		with self._reading() as ok:
			idx = self._index.get(key) if ok else None
			if idx is None:
				return []
			return [self._nodes[i].key for i in self._closure(idx)]

	def _closure(self, idx: int) -> list[int]:
		# Caller holds the lock.
		order: list[int] = [idx]
		seen = {idx}
		i = 0
		while i < len(order):
			for parent in sorted(self._nodes[order[i]].parents):
				if parent not in seen:
					seen.add(parent)
					order.append(parent)
			i += 1
		return order

	def invalidate(self, key: str) -> list[str]:
		"""
		Mark `key` and its ancestors stale; return their keys (empty if unknown).

		Always bumps the generation, even for unknown keys, so callers can use
		the counter as a change marker.
		"""
		with self._lock.write():
			previous = self._generation
			self._generation += 1
			idx = self._index.get(key)
			stale = set(self._closure(idx)) if idx is not None else set()
			for i, node in enumerate(self._nodes):
				if i not in stale and node.stamp == previous:
					node.stamp = self._generation
			return [self._nodes[i].key for i in sorted(stale, key=lambda i: self._nodes[i].key)]

	def _edges(self, key: str, attr: str) -> list[str]:
		with self._reading() as ok:
			idx = self._index.get(key) if ok else None
			if idx is None:
				return []
			return sorted(self._nodes[j].key for j in getattr(self._nodes[idx], attr))

	def children(self, key: str) -> list[str]:
		return self._edges(key, "children")

	def parents(self, key: str) -> list[str]:
		return self._edges(key, "parents")

	def fresh_descriptors(self) -> list[PackageDescriptor]:
		"""Fresh descriptors in insertion order (empty if the lock is not obtained in time)."""
		with self._reading() as ok:
			if not ok:
				return []
			return [
				node.descriptor
				for node in self._nodes
				if node.stamp == self._generation and node.descriptor is not None
			]

	def __len__(self) -> int:
		with self._reading() as ok:
			return len(self._nodes) if ok else 0
