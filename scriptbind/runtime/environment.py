# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Script environment boundary.

The binding core only needs a small surface from the scripting runtime:
a function-registration primitive, a global table, a conversion boundary
and an error channel. `Environment` spells that surface out; the
in-memory `ScriptEnvironment` implements it so adapters can be installed and
exercised without an external interpreter (script code is ordinary Python
calls on the installed globals and handles).
"""

from __future__ import annotations

import logging
import threading
import weakref
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Protocol, Tuple

from scriptbind.core.errors import DuplicateGlobal, ScriptError
from scriptbind.runtime.conversion import Converter, StrictConverter
from scriptbind.runtime.handle import BorrowPolicy, BorrowState, Handle

if TYPE_CHECKING:
	from scriptbind.compiler import CompiledAdapter
	from scriptbind.config import EnvironmentConfig

logger = logging.getLogger(__name__)


class Environment(Protocol):
	"""What compiled adapters and the loader require from a scripting runtime."""

	borrow_policy: BorrowPolicy

	def register_function(self, name: str, closure: Callable[..., Any]) -> Any:
		...

	def bind_global(self, name: str, value: Any) -> None:
		...

	def register_adapter(self, adapter: "CompiledAdapter") -> None:
		...

	def adapter_for(self, native_type: type) -> Optional["CompiledAdapter"]:
		...

	def adapter_named(self, type_id: str) -> Optional["CompiledAdapter"]:
		...

	def wrap(self, native: Any, adapter: "CompiledAdapter") -> Handle:
		...

	def borrow_state(self, native: Any) -> BorrowState:
		...

	def encode(self, value: Any, shape: Optional[str] = None, *, owner: "CompiledAdapter | None" = None) -> Any:
		...

	def decode(self, value: Any, shape: Optional[str] = None) -> Any:
		...

	def invoke(self, label: str, fn: Callable[..., Any], *args: Any) -> Any:
		...


@dataclass(frozen=True)
class ScriptFunction:
	"""A native closure made callable from script code."""

	name: str
	closure: Callable[..., Any]
	env: "ScriptEnvironment"

	def __call__(self, *args: Any) -> Any:
		return self.env.invoke(self.name, self.closure, *args)

	def __repr__(self) -> str:
		return f"<function {self.name}>"


class ScriptEnvironment:
	"""
	In-memory scripting environment.

	`allow_rebind=False` makes loading a type under an already-bound global a
	`DuplicateGlobal` error; by default rebinding overwrites the old binding.
	"""

	def __init__(
		self,
		*,
		converter: Optional[Converter] = None,
		allow_rebind: bool = True,
		borrow_policy: BorrowPolicy = BorrowPolicy.REJECT,
	) -> None:
		self.globals: Dict[str, Any] = {}
		self.converter: Converter = converter or StrictConverter()
		self.allow_rebind = allow_rebind
		self.borrow_policy = BorrowPolicy(borrow_policy)
		self._adapters_by_native: Dict[type, "CompiledAdapter"] = {}
		self._adapters_by_name: Dict[str, "CompiledAdapter"] = {}
		# id(native) -> (weak or strong reference to native, its borrow state)
		self._borrows: Dict[int, Tuple[Callable[[], Any], BorrowState]] = {}
		# Reentrant: a finalizer may run during garbage collection inside borrow_state.
		self._borrows_lock = threading.RLock()

	@classmethod
	def from_config(cls, config: "EnvironmentConfig") -> "ScriptEnvironment":
		return cls(
			converter=StrictConverter(strict_integers=config.strict_integers),
			allow_rebind=config.allow_rebind,
			borrow_policy=config.borrow_policy,
		)

	# Registration (used by the loader).

	def register_function(self, name: str, closure: Callable[..., Any]) -> ScriptFunction:
		"""Wrap `closure(env, *args)` as a script-callable function."""
		return ScriptFunction(name=name, closure=closure, env=self)

	def bind_global(self, name: str, value: Any) -> None:
		if name in self.globals:
			if not self.allow_rebind:
				raise DuplicateGlobal(name)
			logger.warning("rebinding global '%s'", name)
		self.globals[name] = value

	def register_adapter(self, adapter: "CompiledAdapter") -> None:
		self._adapters_by_name[adapter.type_id] = adapter
		if adapter.native is not None:
			self._adapters_by_native[adapter.native] = adapter

	def adapter_for(self, native_type: type) -> Optional["CompiledAdapter"]:
		return self._adapters_by_native.get(native_type)

	def adapter_named(self, type_id: str) -> Optional["CompiledAdapter"]:
		return self._adapters_by_name.get(type_id)

	# Script-side globals.

	def get_global(self, name: str) -> Any:
		return self.globals.get(name)

	def set_global(self, name: str, value: Any) -> None:
		"""Plain script assignment (`player = Player.new(...)`); not subject to the rebind policy."""
		self.globals[name] = value

	# Conversion boundary.

	def wrap(self, native: Any, adapter: "CompiledAdapter") -> Handle:
		return Handle(native, adapter, self)

	def borrow_state(self, native: Any) -> BorrowState:
		"""
		The one BorrowState guarding `native`, shared by all of its handles.

		Entries are dropped when the native is collected; natives that cannot
		be weakly referenced are kept alive by the entry instead.
		"""
		key = id(native)
		with self._borrows_lock:
			entry = self._borrows.get(key)
			if entry is not None and entry[0]() is native:
				return entry[1]
			state = BorrowState(self.borrow_policy)
			try:
				ref: Callable[[], Any] = weakref.ref(native)
			except TypeError:
				ref = lambda: native
			else:
				weakref.finalize(native, self._forget_borrows, key, ref)
			self._borrows[key] = (ref, state)
			return state

	def _forget_borrows(self, key: int, ref: Callable[[], Any]) -> None:
		with self._borrows_lock:
			entry = self._borrows.get(key)
			if entry is not None and entry[0] is ref:
				del self._borrows[key]

	def encode(self, value: Any, shape: Optional[str] = None, *, owner: "CompiledAdapter | None" = None) -> Any:
		return self.converter.encode(self, value, shape, owner=owner)

	def decode(self, value: Any, shape: Optional[str] = None) -> Any:
		return self.converter.decode(self, value, shape)

	# Error channel.

	def invoke(self, label: str, fn: Callable[..., Any], *args: Any) -> Any:
		"""
		Run `fn(self, *args)` on behalf of script code.

		ScriptErrors propagate unchanged; any other exception escaping native
		code is reported as a ScriptError naming `label`.
		"""
		try:
			return fn(self, *args)
		except ScriptError:
			raise
		except Exception as exc:
			raise ScriptError(f"{label}: {type(exc).__name__}: {exc}") from exc

	def pcall(self, fn: Callable[..., Any], *args: Any) -> Tuple[bool, Any]:
		"""Protected call: `(True, result)` or `(False, ScriptError)`."""
		try:
			return True, fn(*args)
		except ScriptError as exc:
			return False, exc

	def tostring(self, value: Any) -> str:
		if value is None:
			return "nil"
		if isinstance(value, bool):
			return "true" if value else "false"
		if isinstance(value, ScriptFunction):
			return f"function: {value.name}"
		return str(value)


__all__ = ["Environment", "ScriptEnvironment", "ScriptFunction"]
