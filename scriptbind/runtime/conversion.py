# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Value conversion between native and script values.

Shapes are the strings recorded in the metadata. `StrictConverter`
understands:
  * integer shapes, sized (`i8` .. `u64`, `isize`, `usize`) or Python `int`,
  * float shapes (`f32`, `f64`, `float`),
  * `bool`, strings (`String`, `str`, `&str`) and unit (`()`, `None`),
  * the type id of any adapter the environment knows (a Handle of that type,
    or an instance of its native class).
Any other shape is opaque: the value passes through, with handles unwrapped
on the way into native code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional, Protocol

from scriptbind.core.errors import ConversionError
from scriptbind.model import SELF_SHAPE, UNIT_SHAPE
from scriptbind.runtime.handle import Handle

if TYPE_CHECKING:
	from scriptbind.compiler import CompiledAdapter
	from scriptbind.runtime.environment import Environment


def _int_range(bits: int, signed: bool) -> tuple[int, int]:
	if signed:
		return -(1 << (bits - 1)), (1 << (bits - 1)) - 1
	return 0, (1 << bits) - 1


INT_SHAPES: dict[str, Optional[tuple[int, int]]] = {
	"i8": _int_range(8, True),
	"i16": _int_range(16, True),
	"i32": _int_range(32, True),
	"i64": _int_range(64, True),
	"isize": _int_range(64, True),
	"u8": _int_range(8, False),
	"u16": _int_range(16, False),
	"u32": _int_range(32, False),
	"u64": _int_range(64, False),
	"usize": _int_range(64, False),
	"int": None,
}
FLOAT_SHAPES = frozenset({"f32", "f64", "float"})
STRING_SHAPES = frozenset({"String", "str", "&str"})
BOOL_SHAPES = frozenset({"bool"})
UNIT_SHAPES = frozenset({UNIT_SHAPE, "None"})


def script_type_name(value: Any) -> str:
	"""Name a value the way error messages show it to scripts."""
	if isinstance(value, Handle):
		return value.type_id
	if value is None:
		return "nil"
	if isinstance(value, bool):
		return "boolean"
	if isinstance(value, (int, float)):
		return "number"
	if isinstance(value, str):
		return "string"
	return type(value).__name__


class Converter(Protocol):
	def encode(self, env: "Environment", value: Any, shape: Optional[str], *, owner: "CompiledAdapter | None" = None) -> Any:
		...

	def decode(self, env: "Environment", value: Any, shape: Optional[str]) -> Any:
		...


class StrictConverter:
	"""Shape-checking converter; `strict_integers` enables range checks on sized ints."""

	def __init__(self, *, strict_integers: bool = True) -> None:
		self.strict_integers = strict_integers

	def encode(self, env: "Environment", value: Any, shape: Optional[str], *, owner: "CompiledAdapter | None" = None) -> Any:
		if isinstance(value, Handle):
			return value
		if owner is not None and owner.native is not None and shape in (SELF_SHAPE, owner.type_id):
			if isinstance(value, owner.native):
				return env.wrap(value, owner)
		adapter = env.adapter_for(type(value))
		if adapter is not None:
			return env.wrap(value, adapter)
		return value

	def decode(self, env: "Environment", value: Any, shape: Optional[str]) -> Any:
		if shape is None:
			return value.native if isinstance(value, Handle) else value
		if shape in INT_SHAPES:
			return self._decode_int(value, shape)
		if shape in FLOAT_SHAPES:
			if isinstance(value, (int, float)) and not isinstance(value, bool):
				return float(value)
			raise ConversionError(script_type_name(value), shape)
		if shape in BOOL_SHAPES:
			if isinstance(value, bool):
				return value
			raise ConversionError(script_type_name(value), shape)
		if shape in STRING_SHAPES:
			if isinstance(value, str):
				return value
			raise ConversionError(script_type_name(value), shape)
		if shape in UNIT_SHAPES:
			if value is None:
				return None
			raise ConversionError(script_type_name(value), shape)
		adapter = env.adapter_named(shape)
		if isinstance(value, Handle):
			if adapter is not None and value.type_id != shape:
				raise ConversionError(value.type_id, shape, "handle is not this exact type")
			return value.native
		if adapter is not None:
			if adapter.native is not None and isinstance(value, adapter.native):
				return value
			raise ConversionError(script_type_name(value), shape, f"expected a {shape} handle")
		return value

	def _decode_int(self, value: Any, shape: str) -> int:
		if isinstance(value, bool):
			raise ConversionError("boolean", shape)
		if isinstance(value, float):
			if not value.is_integer():
				raise ConversionError("number", shape, f"{value} has a fractional part")
			value = int(value)
		if not isinstance(value, int):
			raise ConversionError(script_type_name(value), shape)
		bounds = INT_SHAPES[shape]
		if self.strict_integers and bounds is not None:
			lo, hi = bounds
			if not lo <= value <= hi:
				raise ConversionError("number", shape, f"{value} is out of range [{lo}, {hi}]")
		return value


__all__ = ["Converter", "StrictConverter", "script_type_name"]
