# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Declaration-file front-end.

`.sbd` files carry the same information as the Python decorators, in a
signature syntax with explicit receivers (`&self`, `&mut self`):

	parse_declarations(source)             -> DeclFile (AST)
	collect_declarations(decl_file, ctx)   -> DeclarationResult (context + directives + diagnostics)
	build_declarations(source, natives=..) -> BuildResult (compiled adapters + load order)

Collection keeps going after a failed declaration so a single run reports
every problem in the file.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Tuple

from lark.exceptions import UnexpectedInput

from scriptbind.collector import Signature, declare_fields, declare_methods, declare_native, declare_variants
from scriptbind.compiler import CompiledAdapter, compile_type
from scriptbind.core.diagnostics import Diagnostic, has_errors
from scriptbind.core.errors import BindError
from scriptbind.core.span import Span
from scriptbind.loader import TypeNamespace, load
from scriptbind.model import CompileOptions, FieldBinding, ParamBinding, TypeId, VariantBinding
from scriptbind.registry import BuildContext
from scriptbind.runtime.environment import Environment

from . import ast as decl_ast
from .parser import parse_declarations

logger = logging.getLogger(__name__)

_COMPILE_FLAGS = ("fields", "methods", "variants")


@dataclass(frozen=True)
class CompileRequest:
	type_id: TypeId
	options: CompileOptions
	span: Span


@dataclass(frozen=True)
class LoadRequest:
	env_name: str
	type_ids: Tuple[TypeId, ...]
	span: Span


@dataclass
class DeclarationResult:
	ctx: BuildContext
	compiles: List[CompileRequest] = field(default_factory=list)
	loads: List[LoadRequest] = field(default_factory=list)
	diagnostics: List[Diagnostic] = field(default_factory=list)


@dataclass
class BuildResult:
	ctx: BuildContext
	adapters: List[CompiledAdapter] = field(default_factory=list)
	load_order: List[Tuple[TypeId, CompiledAdapter]] = field(default_factory=list)
	diagnostics: List[Diagnostic] = field(default_factory=list)

	@property
	def ok(self) -> bool:
		return not has_errors(self.diagnostics)

	def adapter(self, type_id: TypeId) -> Optional[CompiledAdapter]:
		"""Most recently compiled adapter for `type_id`."""
		for adapter in reversed(self.adapters):
			if adapter.type_id == type_id:
				return adapter
		return None

	def install(self, env: Environment) -> List[TypeNamespace]:
		"""Load every type named by the file's `load!` directives, in order."""
		return load(env, self.load_order)


def _span(loc: decl_ast.Located, filename: Optional[str]) -> Span:
	return Span(file=filename, line=loc.line or None, column=loc.column or None)


def _signature(fn: decl_ast.FnDecl, filename: Optional[str]) -> Signature:
	params: List[str | ParamBinding] = []
	for p in fn.params:
		if isinstance(p, decl_ast.ReceiverDecl):
			params.append(p.text)
		else:
			params.append(ParamBinding(name=p.name, shape=p.type_name))
	return Signature(name=fn.name, params=tuple(params), returns=fn.returns, span=_span(fn.loc, filename))


def _compile_request(
	directive: decl_ast.CompileDirective, filename: Optional[str], diagnostics: List[Diagnostic]
) -> Optional[CompileRequest]:
	type_id: Optional[str] = None
	flags: dict[str, bool] = {}
	seen: set[str] = set()
	ok = True
	for key, value, loc in directive.args:
		span = _span(loc, filename)
		if key in seen:
			diagnostics.append(Diagnostic(f"compile!: duplicate argument '{key}'", code="compile-args", phase="declare", span=span))
			ok = False
			continue
		seen.add(key)
		if key == "type_path":
			type_id = value
		elif key in _COMPILE_FLAGS:
			if value not in ("true", "false"):
				diagnostics.append(
					Diagnostic(f"compile!: '{key}' expects true or false, got '{value}'", code="compile-args", phase="declare", span=span)
				)
				ok = False
				continue
			flags[key] = value == "true"
		else:
			diagnostics.append(Diagnostic(f"compile!: unknown argument '{key}'", code="compile-args", phase="declare", span=span))
			ok = False
	if type_id is None:
		diagnostics.append(
			Diagnostic("compile!: missing required argument 'type_path'", code="compile-args", phase="declare", span=_span(directive.loc, filename))
		)
		return None
	if not ok:
		return None
	return CompileRequest(type_id=type_id, options=CompileOptions(**flags), span=_span(directive.loc, filename))


def collect_declarations(
	decl_file: decl_ast.DeclFile,
	ctx: Optional[BuildContext] = None,
	*,
	natives: Optional[Mapping[TypeId, Any]] = None,
) -> DeclarationResult:
	"""
	Feed every declaration of `decl_file` through the collector.

	`natives` maps type ids to the Python classes implementing them; entries
	for types the file never declares are ignored.
	"""
	result = DeclarationResult(ctx=ctx or BuildContext())
	filename = decl_file.filename
	for item in decl_file.items:
		try:
			if isinstance(item, decl_ast.StructDecl):
				fields = [
					FieldBinding(name=f.name, shape=f.type_name, writable=not f.readonly, span=_span(f.loc, filename))
					for f in item.fields
				]
				result.ctx = declare_fields(result.ctx, item.name, fields)
			elif isinstance(item, decl_ast.EnumDecl):
				variants = [VariantBinding(name=v.name, span=_span(v.loc, filename)) for v in item.variants]
				result.ctx = declare_variants(result.ctx, item.name, variants)
			elif isinstance(item, decl_ast.ImplDecl):
				sigs = [_signature(fn, filename) for fn in item.functions]
				result.ctx = declare_methods(result.ctx, item.target, sigs)
			elif isinstance(item, decl_ast.CompileDirective):
				request = _compile_request(item, filename, result.diagnostics)
				if request is not None:
					result.compiles.append(request)
			elif isinstance(item, decl_ast.LoadDirective):
				result.loads.append(
					LoadRequest(env_name=item.env_name, type_ids=tuple(item.type_names), span=_span(item.loc, filename))
				)
		except BindError as err:
			diag = err.to_diagnostic()
			if not diag.span.known:
				diag.span = _span(item.loc, filename)
			result.diagnostics.append(diag)
	for type_id, native in (natives or {}).items():
		if type_id in result.ctx:
			result.ctx = declare_native(result.ctx, type_id, native)
	return result


def build_declarations(
	source: str,
	*,
	filename: Optional[str] = None,
	natives: Optional[Mapping[TypeId, Any]] = None,
	ctx: Optional[BuildContext] = None,
) -> BuildResult:
	"""
	Parse, collect and compile a declaration file.

	Every `compile!` runs after all declarations of the file have been
	collected, whatever its position, so a directive may precede the
	declarations it compiles. `load!` names must refer to compiled types.
	"""
	try:
		decl_file = parse_declarations(source, filename=filename)
	except UnexpectedInput as exc:
		line = getattr(exc, "line", None)
		column = getattr(exc, "column", None)
		# UnexpectedEOF reports -1 for both.
		span = Span(file=filename, line=line if line and line > 0 else None, column=column if column and column > 0 else None)
		message = str(exc).strip().splitlines()[0] if str(exc).strip() else "syntax error"
		return BuildResult(
			ctx=ctx or BuildContext(),
			diagnostics=[Diagnostic(message=message, code="syntax", phase="parse", span=span)],
		)
	collected = collect_declarations(decl_file, ctx, natives=natives)
	result = BuildResult(ctx=collected.ctx, diagnostics=list(collected.diagnostics))
	for request in collected.compiles:
		try:
			adapter = compile_type(result.ctx, request.type_id, request.options)
		except BindError as err:
			diag = err.to_diagnostic()
			diag.span = request.span
			result.diagnostics.append(diag)
			continue
		result.adapters.append(adapter)
	for request in collected.loads:
		for type_id in request.type_ids:
			adapter = result.adapter(type_id)
			if adapter is None:
				result.diagnostics.append(
					Diagnostic(
						f"load!: type '{type_id}' has no compile! directive",
						code="unknown-type",
						phase="load",
						span=request.span,
					)
				)
				continue
			result.load_order.append((type_id, adapter))
	logger.debug(
		"built %s: %d adapter(s), %d diagnostic(s)",
		filename or "<source>",
		len(result.adapters),
		len(result.diagnostics),
	)
	return result


__all__ = [
	"BuildResult",
	"CompileRequest",
	"DeclarationResult",
	"LoadRequest",
	"build_declarations",
	"collect_declarations",
	"parse_declarations",
]
