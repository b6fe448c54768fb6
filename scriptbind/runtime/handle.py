# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Handles: script-side references to native instances.

A Handle pairs a native Python object with the CompiledAdapter that produced
it. All dotted access from script code goes through that adapter's tables,
never through the global name the type is bound under, so handles outlive a
reload of their type.

Borrow tracking belongs to the native instance, not to the handle: every
handle wrapping the same object shares the environment's BorrowState for
it. Access follows the receiver kinds:
  * field reads and SHARED_SELF calls take shared access,
  * field writes and EXCLUSIVE_SELF calls take exclusive access.
Many shared holders may coexist; exclusive access excludes everything else.
Under `BorrowPolicy.REJECT` a conflicting request raises BorrowConflict;
under `BorrowPolicy.SERIALIZE` it waits for the holders on other threads.
A thread never waits on itself: re-entrant conflicts are always rejected.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from enum import Enum
from typing import TYPE_CHECKING, Any, Iterator, Optional

from scriptbind.core.errors import BorrowConflict, ConversionError, UnknownMember
from scriptbind.model import MethodReceiver

if TYPE_CHECKING:
	from scriptbind.compiler import CompiledAdapter
	from scriptbind.runtime.environment import Environment


class BorrowPolicy(str, Enum):
	REJECT = "reject"
	SERIALIZE = "serialize"


class BorrowState:
	"""Reader/writer bookkeeping for one native instance."""

	def __init__(self, policy: BorrowPolicy) -> None:
		self.policy = policy
		self._cond = threading.Condition()
		self._readers: dict[int, int] = {}  # thread ident -> depth
		self._writer: Optional[int] = None

	def _held(self) -> str:
		return "exclusive" if self._writer is not None else "shared"

	@contextmanager
	def shared(self, type_id: str) -> Iterator[None]:
		me = threading.get_ident()
		with self._cond:
			while self._writer is not None:
				if self.policy is BorrowPolicy.REJECT or self._writer == me:
					raise BorrowConflict(type_id, "shared", "exclusive")
				self._cond.wait()
			self._readers[me] = self._readers.get(me, 0) + 1
		try:
			yield
		finally:
			with self._cond:
				depth = self._readers[me] - 1
				if depth:
					self._readers[me] = depth
				else:
					del self._readers[me]
				self._cond.notify_all()

	@contextmanager
	def exclusive(self, type_id: str) -> Iterator[None]:
		me = threading.get_ident()
		with self._cond:
			while self._writer is not None or self._readers:
				if self.policy is BorrowPolicy.REJECT or self._writer == me or me in self._readers:
					raise BorrowConflict(type_id, "exclusive", self._held())
				self._cond.wait()
			self._writer = me
		try:
			yield
		finally:
			with self._cond:
				self._writer = None
				self._cond.notify_all()


class BoundMethod:
	"""An instance method looked up on a handle (`handle.take_damage`)."""

	__slots__ = ("handle", "name")

	def __init__(self, handle: "Handle", name: str) -> None:
		self.handle = handle
		self.name = name

	def __call__(self, *args: Any) -> Any:
		h = self.handle
		entry = h._adapter.methods[self.name]
		return h._env.invoke(f"{h.type_id}:{self.name}", entry.call, h, *args)

	def __repr__(self) -> str:
		return f"<method {self.handle.type_id}:{self.name}>"


class Handle:
	"""Opaque shared reference to a native instance, as seen by scripts."""

	__slots__ = ("_native", "_adapter", "_env", "_borrow")

	def __init__(self, native: Any, adapter: "CompiledAdapter", env: "Environment") -> None:
		object.__setattr__(self, "_native", native)
		object.__setattr__(self, "_adapter", adapter)
		object.__setattr__(self, "_env", env)
		object.__setattr__(self, "_borrow", env.borrow_state(native))

	@property
	def type_id(self) -> str:
		return self._adapter.type_id

	@property
	def adapter(self) -> "CompiledAdapter":
		return self._adapter

	@property
	def native(self) -> Any:
		"""The wrapped instance; host code reads it without taking a borrow."""
		return self._native

	@contextmanager
	def access(self, receiver: MethodReceiver) -> Iterator[Any]:
		"""Hold the access a receiver kind needs and yield the native instance."""
		if receiver is MethodReceiver.EXCLUSIVE_SELF:
			with self._borrow.exclusive(self.type_id):
				yield self._native
		elif receiver is MethodReceiver.SHARED_SELF:
			with self._borrow.shared(self.type_id):
				yield self._native
		else:
			raise ConversionError(self.type_id, "static call", "static functions take no receiver")

	def __getattr__(self, name: str) -> Any:
		if name.startswith("_"):
			raise AttributeError(name)
		adapter = self._adapter
		accessor = adapter.fields.get(name)
		if accessor is not None:
			def read(env: "Environment", handle: "Handle") -> Any:
				with handle._borrow.shared(handle.type_id):
					return accessor.get(env, handle._native)
			return self._env.invoke(f"{self.type_id}.{name}", read, self)
		entry = adapter.methods.get(name)
		if entry is not None and entry.receiver.is_instance:
			return BoundMethod(self, name)
		raise UnknownMember(self.type_id, name)

	def __setattr__(self, name: str, value: Any) -> None:
		accessor = self._adapter.fields.get(name)
		if accessor is None:
			raise UnknownMember(self.type_id, name, f"{self.type_id} has no field '{name}'")
		if accessor.set is None:
			raise UnknownMember(self.type_id, name, f"field '{name}' of {self.type_id} is read-only")
		setter = accessor.set

		def write(env: "Environment", handle: "Handle", incoming: Any) -> None:
			with handle._borrow.exclusive(handle.type_id):
				setter(env, handle._native, incoming)

		self._env.invoke(f"{self.type_id}.{name}", write, self, value)

	def __eq__(self, other: object) -> bool:
		if not isinstance(other, Handle):
			return NotImplemented
		return self.type_id == other.type_id and self._native == other._native

	def __hash__(self) -> int:
		try:
			return hash((self.type_id, self._native))
		except TypeError:
			# Mutable natives compare by value but cannot be hashed.
			return hash(self.type_id)

	def __str__(self) -> str:
		return str(self._native)

	def __repr__(self) -> str:
		return f"<{self.type_id} handle {self._native!r}>"


__all__ = ["BorrowPolicy", "BorrowState", "BoundMethod", "Handle"]
