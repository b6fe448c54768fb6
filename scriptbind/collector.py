# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Declaration collector.

Three independent entry points add metadata to one type's entry:

  * `declare_fields`   (record types)
  * `declare_variants` (enumerations)
  * `declare_methods`  (function-bearing blocks)

They may run in any order, for the same or for different types. Each only
ever appends to its group; a name already present in the group is rejected.
A rejected call leaves the input context untouched, since every function
returns a new `BuildContext` instead of mutating the one it was given.

Receiver kinds are inferred here, once, from the first parameter of each
function signature. The compiler only reads the stored `MethodReceiver`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Optional, Sequence, Tuple, Union

from scriptbind.core.errors import DuplicateField, DuplicateMethod, DuplicateVariant, InvalidReceiver
from scriptbind.core.span import Span
from scriptbind.model import (
	FieldBinding,
	MethodBinding,
	MethodReceiver,
	ParamBinding,
	TypeId,
	VariantBinding,
)
from scriptbind.registry import BuildContext

logger = logging.getLogger(__name__)

# Receiver spellings recognized in the first parameter slot.
_SHARED_PATTERNS = frozenset({"self", "&self"})
_EXCLUSIVE_PATTERNS = frozenset({"mut self", "&mut self"})


@dataclass(frozen=True)
class Signature:
	"""
	A function as written at its declaration site, before classification.

	`params` is the raw parameter list: the first element may be a receiver
	pattern string (`"&self"`, `"&mut self"`, ...); every other element is a
	`ParamBinding`. `receiver` is an optional explicit hint; when given it must
	agree with the pattern in the first slot.
	"""

	name: str
	params: Tuple[Union[str, ParamBinding], ...] = ()
	returns: Optional[str] = None
	receiver: Optional[MethodReceiver] = None
	span: Span = field(default_factory=Span, compare=False)


FieldInput = Union[str, FieldBinding]
VariantInput = Union[str, VariantBinding]
MethodInput = Union[Signature, MethodBinding]


def classify_receiver(first_param: object) -> MethodReceiver:
	"""
	Classify a receiver from the first parameter of a signature.

	No parameter, or a first parameter that is not a receiver pattern, means
	the function is static (`NONE`).
	"""
	if not isinstance(first_param, str):
		return MethodReceiver.NONE
	pattern = " ".join(first_param.split())
	pattern = pattern.replace("& ", "&")
	if pattern in _SHARED_PATTERNS:
		return MethodReceiver.SHARED_SELF
	if pattern in _EXCLUSIVE_PATTERNS:
		return MethodReceiver.EXCLUSIVE_SELF
	return MethodReceiver.NONE


def _to_method(type_id: TypeId, item: MethodInput) -> MethodBinding:
	if isinstance(item, MethodBinding):
		return item
	first = item.params[0] if item.params else None
	inferred = classify_receiver(first)
	params = item.params[1:] if inferred.is_instance else item.params
	for p in params:
		if not isinstance(p, ParamBinding):
			raise InvalidReceiver(
				f"'{type_id}.{item.name}': receiver '{p}' must be the first parameter",
				span=item.span,
			)
	receiver = inferred
	if item.receiver is not None:
		if inferred.is_instance and item.receiver is not inferred:
			raise InvalidReceiver(
				f"'{type_id}.{item.name}': receiver hint {item.receiver.name} contradicts '{first}'",
				span=item.span,
			)
		if item.receiver.is_instance and not inferred.is_instance and first is not None:
			raise InvalidReceiver(
				f"'{type_id}.{item.name}': receiver hint {item.receiver.name} but first parameter is not a receiver",
				span=item.span,
			)
		receiver = item.receiver
	return MethodBinding(
		name=item.name,
		receiver=receiver,
		params=tuple(params),  # type: ignore[arg-type]
		returns=item.returns,
		span=item.span,
	)


def _check_unique(names: Sequence[str], existing: Iterable[str]) -> Optional[int]:
	"""Index of the first name already seen, in `existing` or earlier in `names`."""
	seen = set(existing)
	for idx, name in enumerate(names):
		if name in seen:
			return idx
		seen.add(name)
	return None


def declare_fields(ctx: BuildContext, type_id: TypeId, fields: Iterable[FieldInput]) -> BuildContext:
	"""Record fields of a record type. Raises DuplicateField on a name clash."""
	bindings = tuple(f if isinstance(f, FieldBinding) else FieldBinding(name=f) for f in fields)
	meta = ctx.entry(type_id)
	idx = _check_unique([b.name for b in bindings], meta.field_names())
	if idx is not None:
		raise DuplicateField(type_id, bindings[idx].name, span=bindings[idx].span)
	logger.debug("declare fields %s: %s", type_id, ", ".join(b.name for b in bindings))
	return ctx.with_entry(meta.with_fields(bindings))


def declare_variants(ctx: BuildContext, type_id: TypeId, variants: Iterable[VariantInput]) -> BuildContext:
	"""Record unit variants of an enumeration. Raises DuplicateVariant on a name clash."""
	bindings = tuple(v if isinstance(v, VariantBinding) else VariantBinding(name=v) for v in variants)
	meta = ctx.entry(type_id)
	idx = _check_unique([b.name for b in bindings], meta.variant_names())
	if idx is not None:
		raise DuplicateVariant(type_id, bindings[idx].name, span=bindings[idx].span)
	logger.debug("declare variants %s: %s", type_id, ", ".join(b.name for b in bindings))
	return ctx.with_entry(meta.with_variants(bindings))


def declare_methods(ctx: BuildContext, type_id: TypeId, methods: Iterable[MethodInput]) -> BuildContext:
	"""
	Record functions of a type, classifying each receiver.

	Constructors, static functions and instance methods share one namespace:
	DuplicateMethod is raised when a name repeats anywhere in the group.
	"""
	bindings = tuple(_to_method(type_id, m) for m in methods)
	meta = ctx.entry(type_id)
	idx = _check_unique([b.name for b in bindings], meta.method_names())
	if idx is not None:
		raise DuplicateMethod(type_id, bindings[idx].name, span=bindings[idx].span)
	logger.debug(
		"declare methods %s: %s",
		type_id,
		", ".join(f"{b.name}[{b.receiver.name}]" for b in bindings),
	)
	return ctx.with_entry(meta.with_methods(bindings))


def declare_native(ctx: BuildContext, type_id: TypeId, native: Any) -> BuildContext:
	"""Attach the Python class implementing `type_id`."""
	meta = ctx.entry(type_id)
	if meta.native is not None and meta.native is not native:
		raise ValueError(f"type '{type_id}' is already implemented by {meta.native!r}")
	return ctx.with_entry(replace(meta, native=native))


__all__ = [
	"FieldInput",
	"MethodInput",
	"Signature",
	"VariantInput",
	"classify_receiver",
	"declare_fields",
	"declare_methods",
	"declare_native",
	"declare_variants",
]
