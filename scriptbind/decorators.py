# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Python declaration front-end.

Decorators play the role of declaration sites:

	session = BindSession()

	@session.enumeration
	class PlayerStatus(Enum):
		Idle = auto()
		Walking = auto()

	@session.implementation
	@session.structure
	@dataclass
	class Player:
		name: str
		hp: int

		@staticmethod
		def new(name: str) -> "Player": ...

		@exclusive
		def take_damage(self, amount: int) -> None: ...

		def is_alive(self) -> bool: ...

	session.compile(PlayerStatus, variants=True)
	session.compile(Player, fields=True, methods=True)
	session.load(env)

Receivers are decided here, once: `staticmethod` and `classmethod` are
static, plain functions are SHARED_SELF unless marked `@exclusive`.
Shapes are taken from annotations as written (strings stay strings, classes
become their `__name__`), never evaluated.
"""

from __future__ import annotations

import dataclasses
import enum
import inspect
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, TypeVar

from scriptbind.collector import declare_fields, declare_methods, declare_native, declare_variants
from scriptbind.compiler import CompiledAdapter, compile_type
from scriptbind.core.errors import InvalidReceiver
from scriptbind.loader import TypeNamespace, load
from scriptbind.model import (
	SELF_SHAPE,
	UNIT_SHAPE,
	CompileOptions,
	FieldBinding,
	MethodBinding,
	MethodReceiver,
	ParamBinding,
	TypeId,
	VariantBinding,
)
from scriptbind.registry import BuildContext
from scriptbind.runtime.environment import Environment

T = TypeVar("T")

_RECEIVER_ATTR = "__scriptbind_receiver__"
_READONLY_KEY = "scriptbind_readonly"


def exclusive(fn: T) -> T:
	"""Mark a method as needing exclusive (mutable) access to its instance."""
	setattr(fn, _RECEIVER_ATTR, MethodReceiver.EXCLUSIVE_SELF)
	return fn


def shared(fn: T) -> T:
	"""Mark a method as read-only on its instance (the default for plain methods)."""
	setattr(fn, _RECEIVER_ATTR, MethodReceiver.SHARED_SELF)
	return fn


def readonly_field(**kwargs: Any) -> Any:
	"""`dataclasses.field` that is exposed to scripts without a setter."""
	metadata = dict(kwargs.pop("metadata", None) or {})
	metadata[_READONLY_KEY] = True
	return dataclasses.field(metadata=metadata, **kwargs)


def shape_of(annotation: Any) -> Optional[str]:
	"""Render an annotation as a shape string without evaluating it."""
	if annotation is inspect.Parameter.empty:
		return None
	if annotation is None or annotation is type(None):
		return UNIT_SHAPE
	if isinstance(annotation, str):
		text = annotation.strip().strip("'\"")
		return UNIT_SHAPE if text == "None" else text
	if isinstance(annotation, type):
		return annotation.__name__
	return str(annotation)


def _marker(obj: Any) -> Optional[MethodReceiver]:
	found = getattr(obj, _RECEIVER_ATTR, None)
	if found is None:
		found = getattr(getattr(obj, "__func__", None), _RECEIVER_ATTR, None)
	return found


def _signature_params(fn: Callable[..., Any], *, skip_first: bool) -> Tuple[ParamBinding, ...]:
	params = list(inspect.signature(fn).parameters.values())
	if skip_first:
		params = params[1:]
	result = []
	for p in params:
		if p.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
			raise InvalidReceiver(f"'{fn.__qualname__}': variadic parameter '{p.name}' cannot be exposed")
		result.append(ParamBinding(name=p.name, shape=shape_of(p.annotation)))
	return tuple(result)


def _return_shape(fn: Callable[..., Any], type_id: TypeId, cls: type) -> Optional[str]:
	shape = shape_of(inspect.signature(fn).return_annotation)
	if shape in (cls.__name__, type_id, "Self", "typing.Self"):
		return SELF_SHAPE
	return shape


def method_bindings(cls: type, type_id: TypeId) -> List[MethodBinding]:
	"""Classify the public functions declared directly on `cls`."""
	bindings: List[MethodBinding] = []
	for name, obj in vars(cls).items():
		if name.startswith("_"):
			continue
		hint = _marker(obj)
		if isinstance(obj, (staticmethod, classmethod)):
			if hint is not None:
				raise InvalidReceiver(
					f"'{type_id}.{name}': receiver marker {hint.name} on a static function"
				)
			fn = obj.__func__
			skip_first = isinstance(obj, classmethod)
			bindings.append(
				MethodBinding(
					name=name,
					receiver=MethodReceiver.NONE,
					params=_signature_params(fn, skip_first=skip_first),
					returns=_return_shape(fn, type_id, cls),
				)
			)
			continue
		if not inspect.isfunction(obj):
			continue
		receiver = hint or MethodReceiver.SHARED_SELF
		bindings.append(
			MethodBinding(
				name=name,
				receiver=receiver,
				params=_signature_params(obj, skip_first=True),
				returns=_return_shape(obj, type_id, cls),
			)
		)
	return bindings


def field_bindings(cls: type, readonly: Iterable[str] = ()) -> List[FieldBinding]:
	"""Fields of a dataclass, or the annotated attributes of a plain class."""
	readonly = set(readonly)
	if dataclasses.is_dataclass(cls):
		frozen = cls.__dataclass_params__.frozen  # type: ignore[attr-defined]
		return [
			FieldBinding(
				name=f.name,
				shape=shape_of(f.type),
				writable=not (frozen or f.name in readonly or f.metadata.get(_READONLY_KEY, False)),
			)
			for f in dataclasses.fields(cls)
			if not f.name.startswith("_")
		]
	annotations = inspect.get_annotations(cls)
	return [
		FieldBinding(name=name, shape=shape_of(ann), writable=name not in readonly)
		for name, ann in annotations.items()
		if not name.startswith("_") and "ClassVar" not in str(ann)
	]


class BindSession:
	"""
	Owns the BuildContext while decorators run, plus the adapters compiled from it.

	The context is replaced (never mutated) by every declaration; `ctx` always
	holds the latest value.
	"""

	def __init__(self, ctx: Optional[BuildContext] = None) -> None:
		self.ctx = ctx or BuildContext()
		self.adapters: List[CompiledAdapter] = []
		self._type_ids: Dict[type, TypeId] = {}

	def type_id_of(self, target: Any) -> TypeId:
		if isinstance(target, str):
			return target
		if isinstance(target, type):
			return self._type_ids.get(target, target.__name__)
		raise TypeError(f"expected a class or a type id, got {target!r}")

	def _register(self, cls: type, name: Optional[str]) -> TypeId:
		type_id = name or self._type_ids.get(cls) or cls.__name__
		self._type_ids[cls] = type_id
		self.ctx = declare_native(self.ctx, type_id, cls)
		return type_id

	def structure(self, cls: Optional[type] = None, *, name: Optional[str] = None, readonly: Iterable[str] = ()) -> Any:
		"""Declare the fields of a record type."""
		def apply(target: type) -> type:
			type_id = self._register(target, name)
			self.ctx = declare_fields(self.ctx, type_id, field_bindings(target, readonly))
			return target

		return apply(cls) if cls is not None else apply

	def enumeration(self, cls: Optional[type] = None, *, name: Optional[str] = None) -> Any:
		"""Declare the members of an `enum.Enum` as unit variants."""
		def apply(target: type) -> type:
			if not (isinstance(target, type) and issubclass(target, enum.Enum)):
				raise TypeError(f"@enumeration expects an Enum subclass, got {target!r}")
			type_id = self._register(target, name)
			variants = [VariantBinding(name=member.name, value=member) for member in target]
			self.ctx = declare_variants(self.ctx, type_id, variants)
			return target

		return apply(cls) if cls is not None else apply

	def implementation(self, cls: Optional[type] = None, *, name: Optional[str] = None) -> Any:
		"""Declare the functions defined in the class body."""
		def apply(target: type) -> type:
			type_id = self._register(target, name)
			self.ctx = declare_methods(self.ctx, type_id, method_bindings(target, type_id))
			return target

		return apply(cls) if cls is not None else apply

	def compile(self, target: Any, *, fields: bool = False, methods: bool = False, variants: bool = False) -> CompiledAdapter:
		"""Compile one type with the given groups and keep the adapter for `load`."""
		type_id = self.type_id_of(target)
		adapter = compile_type(self.ctx, type_id, CompileOptions(fields=fields, methods=methods, variants=variants))
		self.adapters.append(adapter)
		return adapter

	def build(self) -> List[CompiledAdapter]:
		"""Adapters compiled so far, in `compile` order."""
		return list(self.adapters)

	def load(self, env: Environment) -> List[TypeNamespace]:
		return load(env, self.adapters)


__all__ = [
	"BindSession",
	"exclusive",
	"field_bindings",
	"method_bindings",
	"readonly_field",
	"shape_of",
	"shared",
]
