# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Error taxonomy for the binding pipeline.

Build-time errors (declaration/compile) are misuses of the declaration
contract and should abort a build. Load-time `DuplicateGlobal` depends on the
environment's rebinding policy. Runtime errors (`ScriptError` and subclasses)
are reported to the script caller and never leave the environment's globals
half-updated.

Every error carries a stable `code` (used in JSON diagnostics) and an optional
`span` pointing at the declaration site.
"""

from __future__ import annotations

from typing import Optional

from .diagnostics import Diagnostic
from .span import Span


class BindError(Exception):
	"""Base class for every error raised by scriptbind."""

	code = "bind-error"
	phase = "build"

	def __init__(self, message: str, *, span: Optional[Span] = None) -> None:
		super().__init__(message)
		self.message = message
		self.span = span or Span()

	def to_diagnostic(self, phase: str | None = None) -> Diagnostic:
		return Diagnostic(message=self.message, code=self.code, phase=phase or self.phase, span=self.span)


class DeclarationError(BindError, ValueError):
	"""A declaration call was rejected; the caller must fix the annotation."""

	code = "declaration"
	phase = "declare"


class DuplicateField(DeclarationError):
	code = "duplicate-field"

	def __init__(self, type_id: str, name: str, *, span: Optional[Span] = None) -> None:
		super().__init__(f"duplicate field '{name}' on type '{type_id}'", span=span)
		self.type_id = type_id
		self.name = name


class DuplicateVariant(DeclarationError):
	code = "duplicate-variant"

	def __init__(self, type_id: str, name: str, *, span: Optional[Span] = None) -> None:
		super().__init__(f"duplicate variant '{name}' on type '{type_id}'", span=span)
		self.type_id = type_id
		self.name = name


class DuplicateMethod(DeclarationError):
	"""Constructors, static functions and instance methods share one namespace."""

	code = "duplicate-method"

	def __init__(self, type_id: str, name: str, *, span: Optional[Span] = None) -> None:
		super().__init__(f"duplicate method '{name}' on type '{type_id}'", span=span)
		self.type_id = type_id
		self.name = name


class InvalidReceiver(DeclarationError):
	"""A receiver hint contradicts the declared function (e.g. `@exclusive` on a staticmethod)."""

	code = "invalid-receiver"


class CompileError(BindError, ValueError):
	code = "compile"
	phase = "compile"


class UnknownType(CompileError):
	code = "unknown-type"

	def __init__(self, type_id: str, *, span: Optional[Span] = None) -> None:
		super().__init__(f"type '{type_id}' was never declared", span=span)
		self.type_id = type_id


class NameCollision(CompileError):
	"""Two emitted groups expose the same name on one dotted-access surface."""

	code = "name-collision"

	def __init__(self, type_id: str, name: str, groups: tuple[str, str], *, span: Optional[Span] = None) -> None:
		super().__init__(
			f"name '{name}' on type '{type_id}' is declared as both a {groups[0]} and a {groups[1]}",
			span=span,
		)
		self.type_id = type_id
		self.name = name
		self.groups = groups


class DuplicateGlobal(BindError, RuntimeError):
	code = "duplicate-global"
	phase = "load"

	def __init__(self, name: str) -> None:
		super().__init__(f"global '{name}' is already bound and the environment forbids rebinding")
		self.name = name


class ScriptError(BindError, RuntimeError):
	"""
	Runtime error surfaced to script code.

	Raised by script-visible functions and handle access. Native exceptions
	thrown by bound Python code are wrapped in a plain ScriptError with the
	original exception as `__cause__`.
	"""

	code = "script"
	phase = "runtime"


class ConversionError(ScriptError):
	"""A script value does not fit the shape expected on the native side."""

	code = "conversion"

	def __init__(self, from_: str, to: str, message: str | None = None) -> None:
		text = f"cannot convert {from_} to {to}"
		if message:
			text += f": {message}"
		super().__init__(text)
		self.from_ = from_
		self.to = to


class BorrowConflict(ScriptError):
	code = "borrow-conflict"

	def __init__(self, type_id: str, wanted: str, held: str) -> None:
		super().__init__(f"cannot take {wanted} access to {type_id} handle: {held} access is held")
		self.type_id = type_id
		self.wanted = wanted
		self.held = held


class UnboundNative(ScriptError):
	"""An adapter was compiled without a native implementation and then invoked."""

	code = "unbound-native"

	def __init__(self, type_id: str, member: str) -> None:
		super().__init__(f"type '{type_id}' has no native implementation for '{member}'")
		self.type_id = type_id
		self.member = member


class UnknownMember(ScriptError, AttributeError):
	"""Script code touched a member the adapter does not expose (or wrote a read-only field)."""

	code = "unknown-member"

	def __init__(self, type_id: str, member: str, message: str | None = None) -> None:
		super().__init__(message or f"{type_id} has no member '{member}'")
		self.type_id = type_id
		self.member = member


__all__ = [
	"BindError",
	"BorrowConflict",
	"CompileError",
	"ConversionError",
	"DeclarationError",
	"DuplicateField",
	"DuplicateGlobal",
	"DuplicateMethod",
	"DuplicateVariant",
	"InvalidReceiver",
	"NameCollision",
	"ScriptError",
	"UnboundNative",
	"UnknownMember",
	"UnknownType",
]
