# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Loader: install compiled adapters into a script environment.

Each adapter becomes one global, a `TypeNamespace` holding the type-level
members (static functions, constructors, variant factories). Instance access
never goes through this global: handles dispatch through the adapter that
created them, so rebinding a type name leaves existing handles working.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Tuple, Union

from scriptbind.compiler import CompiledAdapter
from scriptbind.core.errors import UnknownMember
from scriptbind.model import TypeId
from scriptbind.runtime.environment import Environment

logger = logging.getLogger(__name__)

AdapterItem = Union[CompiledAdapter, Tuple[TypeId, CompiledAdapter]]


class TypeNamespace:
	"""Script-visible global for one exposed type (`Player.new(...)`, `PlayerStatus.Idle()`)."""

	__slots__ = ("_type_name", "_adapter", "_members")

	def __init__(self, name: str, adapter: CompiledAdapter, members: Mapping[str, Any]) -> None:
		self._type_name = name
		self._adapter = adapter
		self._members = dict(members)

	def __getattr__(self, member: str) -> Any:
		if member.startswith("_"):
			raise AttributeError(member)
		try:
			return self._members[member]
		except KeyError:
			raise UnknownMember(self._type_name, member) from None

	def __getitem__(self, member: str) -> Any:
		return self._members[member]

	def __contains__(self, member: object) -> bool:
		return member in self._members

	def __iter__(self) -> Iterator[str]:
		return iter(self._members)

	def __len__(self) -> int:
		return len(self._members)

	def __str__(self) -> str:
		return f"userdata: {self._type_name}"

	def __repr__(self) -> str:
		return f"<TypeNamespace {self._type_name} members={sorted(self._members)}>"


def _normalize(item: AdapterItem) -> Tuple[TypeId, CompiledAdapter]:
	if isinstance(item, CompiledAdapter):
		return item.type_id, item
	name, adapter = item
	if not isinstance(adapter, CompiledAdapter):
		raise TypeError(f"expected a CompiledAdapter for '{name}', got {type(adapter).__name__}")
	return name, adapter


def load(env: Environment, adapters: Iterable[AdapterItem]) -> List[TypeNamespace]:
	"""
	Install `adapters` into `env`, in order.

	Each type is installed atomically: its namespace is fully built before the
	global is bound, and the adapter becomes the environment's encoder for its
	native class only after the binding succeeded. A DuplicateGlobal from an
	environment that forbids rebinding stops the sequence; types installed
	before it stay installed.
	"""
	installed: List[TypeNamespace] = []
	for item in adapters:
		name, adapter = _normalize(item)
		members: Dict[str, Any] = {
			member: env.register_function(f"{name}.{member}", closure)
			for member, closure in adapter.statics().items()
		}
		namespace = TypeNamespace(name, adapter, members)
		env.bind_global(name, namespace)
		env.register_adapter(adapter)
		logger.debug("loaded %s: %s", name, ", ".join(members) or "(no static members)")
		installed.append(namespace)
	return installed


__all__ = ["AdapterItem", "TypeNamespace", "load"]
