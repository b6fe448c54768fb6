# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Build-time registry of exposed types.

`BuildContext` is an explicit, immutable value passed through the build: the
collector functions take a context and return a new one. There is no
process-wide singleton; two builds in one process never see each other's
declarations.

`SharedRegistry` is for builds that run declaration passes on several
threads. Accumulation for one type id is serialized by a per-entry lock;
different type ids never contend.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Dict, Iterator, Mapping, Optional, Tuple

from scriptbind.model import TypeId, TypeMetadata


def _frozen(entries: Mapping[TypeId, TypeMetadata]) -> Mapping[TypeId, TypeMetadata]:
	return MappingProxyType(dict(entries))


@dataclass(frozen=True)
class BuildContext:
	"""Mapping type id -> TypeMetadata; at most one entry per type id."""

	entries: Mapping[TypeId, TypeMetadata] = field(default_factory=lambda: _frozen({}))

	def __post_init__(self) -> None:
		if not isinstance(self.entries, MappingProxyType):
			object.__setattr__(self, "entries", _frozen(self.entries))

	def __contains__(self, type_id: object) -> bool:
		return type_id in self.entries

	def __iter__(self) -> Iterator[TypeId]:
		return iter(self.entries)

	def __len__(self) -> int:
		return len(self.entries)

	def get(self, type_id: TypeId) -> Optional[TypeMetadata]:
		return self.entries.get(type_id)

	def entry(self, type_id: TypeId) -> TypeMetadata:
		"""Existing entry for `type_id`, or a fresh empty one (not stored)."""
		existing = self.entries.get(type_id)
		if existing is not None:
			return existing
		return TypeMetadata(type_id=type_id)

	def type_ids(self) -> Tuple[TypeId, ...]:
		return tuple(self.entries)

	def with_entry(self, meta: TypeMetadata) -> "BuildContext":
		"""Return a new context with `meta` stored under its type id."""
		updated: Dict[TypeId, TypeMetadata] = dict(self.entries)
		updated[meta.type_id] = meta
		return BuildContext(entries=_frozen(updated))

	def merge(self, other: "BuildContext") -> "BuildContext":
		"""
		Combine two contexts built from disjoint sets of types.

		Contexts produced by independent declaration passes are merged at build
		assembly time. A type id present in both must have identical metadata.
		"""
		updated: Dict[TypeId, TypeMetadata] = dict(self.entries)
		for type_id, meta in other.entries.items():
			prev = updated.get(type_id)
			if prev is not None and prev != meta:
				raise ValueError(f"type '{type_id}' was declared in both contexts with different metadata")
			updated[type_id] = meta
		return BuildContext(entries=_frozen(updated))


Accumulate = Callable[[BuildContext], BuildContext]


class SharedRegistry:
	"""
	Thread-safe accumulation point for parallel declaration passes.

	`accumulate(type_id, step)` runs `step` on a one-entry context holding the
	current metadata for `type_id` and stores the entry the step returns.
	Only that type's lock is held while the step runs.
	"""

	def __init__(self, initial: Optional[BuildContext] = None) -> None:
		self._entries: Dict[TypeId, TypeMetadata] = dict((initial or BuildContext()).entries)
		self._locks: Dict[TypeId, threading.Lock] = {}
		self._guard = threading.Lock()

	def _lock_for(self, type_id: TypeId) -> threading.Lock:
		with self._guard:
			lock = self._locks.get(type_id)
			if lock is None:
				lock = threading.Lock()
				self._locks[type_id] = lock
			return lock

	def accumulate(self, type_id: TypeId, step: Accumulate) -> TypeMetadata:
		with self._lock_for(type_id):
			with self._guard:
				current = self._entries.get(type_id)
			ctx = BuildContext() if current is None else BuildContext({type_id: current})
			result = step(ctx).get(type_id)
			if result is None:
				raise ValueError(f"accumulation step for '{type_id}' did not produce an entry")
			with self._guard:
				self._entries[type_id] = result
			return result

	def snapshot(self) -> BuildContext:
		with self._guard:
			return BuildContext(entries=_frozen(self._entries))


__all__ = ["Accumulate", "BuildContext", "SharedRegistry"]
