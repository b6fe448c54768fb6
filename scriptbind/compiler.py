# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Compiler: one type's metadata -> CompiledAdapter.

The adapter is a set of dispatch tables built once, from metadata only:

  fields    name -> FieldAccessor(get, optional set)
  methods   name -> MethodEntry(call), calling convention fixed by receiver
  variants  name -> VariantFactory(make)

Closures take the environment as their first argument; that is where the
conversion boundary and handle construction live. Instance-method closures
take the receiving Handle next and hold the access their receiver kind
requires for the duration of the native call.

Compiling reads the BuildContext and nothing else. Compiling the same type
twice (with the same or different options) yields two independent adapters.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple

from scriptbind.core.errors import ConversionError, NameCollision, UnboundNative, UnknownType
from scriptbind.model import (
	CompileOptions,
	FieldBinding,
	MethodBinding,
	MethodReceiver,
	ParamBinding,
	TypeId,
	TypeMetadata,
	VariantBinding,
)
from scriptbind.registry import BuildContext
from scriptbind.runtime.conversion import script_type_name
from scriptbind.runtime.handle import Handle

logger = logging.getLogger(__name__)

Getter = Callable[[Any, Any], Any]
Setter = Callable[[Any, Any, Any], None]


@dataclass(frozen=True)
class FieldAccessor:
	name: str
	shape: Optional[str]
	writable: bool
	get: Getter
	set: Optional[Setter] = None


@dataclass(frozen=True)
class MethodEntry:
	"""
	One callable of the type.

	Instance entries: `call(env, handle, *args)`.
	Static entries (constructors included): `call(env, *args)`.
	"""

	name: str
	receiver: MethodReceiver
	params: Tuple[ParamBinding, ...]
	returns: Optional[str]
	is_constructor: bool
	call: Callable[..., Any]


@dataclass(frozen=True)
class VariantFactory:
	name: str
	make: Callable[[Any], Handle]


@dataclass(frozen=True, eq=False)
class CompiledAdapter:
	"""Immutable dispatch surface for one type; installable into any number of environments."""

	type_id: TypeId
	native: Any
	options: CompileOptions
	fields: Mapping[str, FieldAccessor] = field(default_factory=lambda: MappingProxyType({}))
	methods: Mapping[str, MethodEntry] = field(default_factory=lambda: MappingProxyType({}))
	variants: Mapping[str, VariantFactory] = field(default_factory=lambda: MappingProxyType({}))

	def statics(self) -> Dict[str, Callable[..., Any]]:
		"""Type-level members: static functions, constructors and variant factories."""
		members: Dict[str, Callable[..., Any]] = {}
		for name, entry in self.methods.items():
			if not entry.receiver.is_instance:
				members[name] = entry.call
		for name, factory in self.variants.items():
			members[name] = _factory_call(self.type_id, factory)
		return members

	def instance_methods(self) -> Tuple[str, ...]:
		return tuple(name for name, entry in self.methods.items() if entry.receiver.is_instance)

	def constructors(self) -> Tuple[str, ...]:
		return tuple(name for name, entry in self.methods.items() if entry.is_constructor)

	def describe(self) -> dict:
		"""JSON-friendly summary (used by `bindc`)."""
		return {
			"type": self.type_id,
			"native": getattr(self.native, "__qualname__", None),
			"fields": [
				{"name": a.name, "shape": a.shape, "writable": a.writable} for a in self.fields.values()
			],
			"methods": [
				{
					"name": m.name,
					"receiver": m.receiver.name,
					"params": [{"name": p.name, "shape": p.shape} for p in m.params],
					"returns": m.returns,
					"constructor": m.is_constructor,
				}
				for m in self.methods.values()
			],
			"variants": list(self.variants),
		}

	def __repr__(self) -> str:
		return (
			f"CompiledAdapter({self.type_id!r}, fields={list(self.fields)}, "
			f"methods={list(self.methods)}, variants={list(self.variants)})"
		)


def _factory_call(type_id: TypeId, factory: VariantFactory) -> Callable[..., Any]:
	def call(env: Any, *args: Any) -> Handle:
		if args:
			raise ConversionError("arguments", f"{type_id}.{factory.name}", f"expected 0 argument(s), got {len(args)}")
		return factory.make(env)

	return call


class _Owner:
	"""Late-bound reference from closures to the adapter that contains them."""

	adapter: Optional[CompiledAdapter] = None


def _check_collisions(type_id: TypeId, groups: Iterable[Tuple[str, Tuple[str, ...]]]) -> None:
	seen: Dict[str, str] = {}
	for group, names in groups:
		for name in names:
			prev = seen.get(name)
			if prev is not None and prev != group:
				raise NameCollision(type_id, name, (prev, group))
			seen[name] = group


def _compile_field(binding: FieldBinding) -> FieldAccessor:
	name = binding.name
	shape = binding.shape

	def get(env: Any, native: Any) -> Any:
		return env.encode(getattr(native, name), shape)

	def set_value(env: Any, native: Any, value: Any) -> None:
		# Decode first: a rejected value leaves the instance untouched.
		converted = env.decode(value, shape)
		setattr(native, name, converted)

	return FieldAccessor(
		name=name,
		shape=shape,
		writable=binding.writable,
		get=get,
		set=set_value if binding.writable else None,
	)


def _decode_args(env: Any, label: str, params: Tuple[ParamBinding, ...], args: Tuple[Any, ...]) -> list[Any]:
	if len(args) != len(params):
		raise ConversionError("arguments", label, f"expected {len(params)} argument(s), got {len(args)}")
	return [env.decode(arg, p.shape) for p, arg in zip(params, args)]


def _compile_method(type_id: TypeId, binding: MethodBinding, native: Any, owner: _Owner) -> MethodEntry:
	name = binding.name
	label = f"{type_id}.{name}"
	params = binding.params
	returns = binding.returns
	receiver = binding.receiver

	if receiver.is_instance:
		def call(env: Any, handle: Any, *args: Any) -> Any:
			if not isinstance(handle, Handle) or handle.type_id != type_id:
				raise ConversionError(script_type_name(handle), type_id, f"'{name}' needs a {type_id} receiver")
			values = _decode_args(env, label, params, args)
			with handle.access(receiver) as this:
				fn = getattr(this, name, None)
				if fn is None:
					raise UnboundNative(type_id, name)
				result = fn(*values)
			return env.encode(result, returns, owner=handle.adapter)
	else:
		target = getattr(native, name, None) if native is not None else None

		def call(env: Any, *args: Any) -> Any:
			if target is None:
				raise UnboundNative(type_id, name)
			values = _decode_args(env, label, params, args)
			result = target(*values)
			return env.encode(result, returns, owner=owner.adapter)

	return MethodEntry(
		name=name,
		receiver=receiver,
		params=params,
		returns=returns,
		is_constructor=binding.is_constructor_of(type_id),
		call=call,
	)


def _compile_variant(type_id: TypeId, binding: VariantBinding, native: Any, owner: _Owner) -> VariantFactory:
	name = binding.name
	value = binding.value
	if value is None and native is not None:
		value = getattr(native, name, None)

	def make(env: Any) -> Handle:
		if value is None or owner.adapter is None:
			raise UnboundNative(type_id, name)
		return env.wrap(value, owner.adapter)

	return VariantFactory(name=name, make=make)


def compile_type(
	ctx: BuildContext,
	type_id: TypeId,
	options: Optional[CompileOptions] = None,
	*,
	native: Any = None,
) -> CompiledAdapter:
	"""
	Compile the metadata of `type_id` into a CompiledAdapter.

	Groups enabled in `options` but never declared compile as empty. Raises
	UnknownType for an undeclared type and NameCollision when two enabled
	groups expose the same name.
	"""
	meta: Optional[TypeMetadata] = ctx.get(type_id)
	if meta is None:
		raise UnknownType(type_id)
	options = options or CompileOptions()
	native = native if native is not None else meta.native

	fields = (meta.fields or ()) if options.fields else ()
	methods = (meta.methods or ()) if options.methods else ()
	variants = (meta.variants or ()) if options.variants else ()
	_check_collisions(
		type_id,
		(
			("field", tuple(f.name for f in fields)),
			("method", tuple(m.name for m in methods)),
			("variant", tuple(v.name for v in variants)),
		),
	)

	owner = _Owner()
	adapter = CompiledAdapter(
		type_id=type_id,
		native=native,
		options=options,
		fields=MappingProxyType({f.name: _compile_field(f) for f in fields}),
		methods=MappingProxyType({m.name: _compile_method(type_id, m, native, owner) for m in methods}),
		variants=MappingProxyType({v.name: _compile_variant(type_id, v, native, owner) for v in variants}),
	)
	owner.adapter = adapter
	logger.debug(
		"compiled %s (%s): %d field(s), %d method(s), %d variant(s)",
		type_id,
		"+".join(options.enabled()) or "empty",
		len(adapter.fields),
		len(adapter.methods),
		len(adapter.variants),
	)
	return adapter


__all__ = [
	"CompiledAdapter",
	"FieldAccessor",
	"MethodEntry",
	"VariantFactory",
	"compile_type",
]
