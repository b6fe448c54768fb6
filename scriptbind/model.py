# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Metadata model for exposed types.

One `TypeMetadata` per exposed type, holding three independently declared
groups (fields, methods, variants). A group is `None` until its collector
call happens; afterwards it is an ordered tuple. Everything here is frozen so
that a BuildContext snapshot can be shared between build steps without copies.

Shapes (`FieldBinding.shape`, `ParamBinding.shape`, `MethodBinding.returns`)
are opaque strings to this layer; only the conversion boundary interprets
them.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum, auto
from typing import Any, Optional, Tuple

from scriptbind.core.span import Span

# Stable type identity (the name scripts see the type under).
TypeId = str

# Return shape of constructors written as `-> Self`.
SELF_SHAPE = "Self"
# Return shape of functions without a result.
UNIT_SHAPE = "()"


class MethodReceiver(Enum):
	"""How a method accesses its instance; decides the calling convention."""

	NONE = auto()            # static / constructor
	SHARED_SELF = auto()     # read-only instance access
	EXCLUSIVE_SELF = auto()  # mutable instance access

	@property
	def is_instance(self) -> bool:
		return self is not MethodReceiver.NONE


@dataclass(frozen=True)
class FieldBinding:
	"""A named field; always readable, writable unless declared read-only."""

	name: str
	shape: Optional[str] = None
	writable: bool = True
	span: Span = field(default_factory=Span, compare=False)

	@property
	def readable(self) -> bool:
		return True


@dataclass(frozen=True)
class ParamBinding:
	name: str
	shape: Optional[str] = None


@dataclass(frozen=True)
class MethodBinding:
	"""
	A function exposed on a type.

	Constructors are not a separate kind: they are static (`NONE` receiver)
	functions whose return shape is the owning type.
	"""

	name: str
	receiver: MethodReceiver
	params: Tuple[ParamBinding, ...] = ()
	returns: Optional[str] = None
	span: Span = field(default_factory=Span, compare=False)

	def is_constructor_of(self, type_id: TypeId) -> bool:
		return self.receiver is MethodReceiver.NONE and self.returns in (SELF_SHAPE, type_id)

	@property
	def arity(self) -> int:
		return len(self.params)


@dataclass(frozen=True)
class VariantBinding:
	"""
	A unit variant of an enumeration.

	`value` holds the native enum member when the variant was declared from
	Python; declaration files leave it unset and the compiler resolves it
	from the native enum by name.
	"""

	name: str
	value: Any = field(default=None, compare=False)
	span: Span = field(default_factory=Span, compare=False)


@dataclass(frozen=True)
class TypeMetadata:
	type_id: TypeId
	fields: Optional[Tuple[FieldBinding, ...]] = None
	methods: Optional[Tuple[MethodBinding, ...]] = None
	variants: Optional[Tuple[VariantBinding, ...]] = None
	# Python class implementing the type, when known.
	native: Any = field(default=None, compare=False)

	def with_fields(self, extra: Tuple[FieldBinding, ...]) -> "TypeMetadata":
		return replace(self, fields=(self.fields or ()) + extra)

	def with_methods(self, extra: Tuple[MethodBinding, ...]) -> "TypeMetadata":
		return replace(self, methods=(self.methods or ()) + extra)

	def with_variants(self, extra: Tuple[VariantBinding, ...]) -> "TypeMetadata":
		return replace(self, variants=(self.variants or ()) + extra)

	def field_names(self) -> Tuple[str, ...]:
		return tuple(f.name for f in self.fields or ())

	def method_names(self) -> Tuple[str, ...]:
		return tuple(m.name for m in self.methods or ())

	def variant_names(self) -> Tuple[str, ...]:
		return tuple(v.name for v in self.variants or ())


@dataclass(frozen=True)
class CompileOptions:
	"""Which metadata groups a compile step emits; every group is off by default."""

	fields: bool = False
	methods: bool = False
	variants: bool = False

	@classmethod
	def all(cls) -> "CompileOptions":
		return cls(fields=True, methods=True, variants=True)

	def enabled(self) -> Tuple[str, ...]:
		return tuple(name for name in ("fields", "methods", "variants") if getattr(self, name))


__all__ = [
	"CompileOptions",
	"FieldBinding",
	"MethodBinding",
	"MethodReceiver",
	"ParamBinding",
	"SELF_SHAPE",
	"TypeId",
	"TypeMetadata",
	"UNIT_SHAPE",
	"VariantBinding",
]
