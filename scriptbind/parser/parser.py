# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Parser for `.sbd` declaration files.

The grammar lives in `grammar.lark`; this module walks lark's parse tree into
the dataclasses of `scriptbind.parser.ast`. Syntax errors are lark
`UnexpectedInput` exceptions; callers turn them into diagnostics.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from lark import Lark, Token, Tree

from .ast import (
	CompileDirective,
	DeclFile,
	EnumDecl,
	FieldDecl,
	FnDecl,
	ImplDecl,
	Item,
	LoadDirective,
	Located,
	ParamDecl,
	ReceiverDecl,
	StructDecl,
	VariantDecl,
)

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	start="start",
	propagate_positions=True,
	maybe_placeholders=False,
)


def parse_declarations(source: str, *, filename: Optional[str] = None) -> DeclFile:
	tree = _PARSER.parse(source)
	return DeclFile(items=[_build_item(child) for child in tree.children], filename=filename)


def _name(node: Tree | Token) -> str:
	if isinstance(node, Tree):
		data = node.data
		if isinstance(data, Token):
			return data.value
		return data
	if isinstance(node, Token):
		return node.type
	return str(node)


def _loc(tree: Tree) -> Located:
	meta = tree.meta
	return Located(line=getattr(meta, "line", 0), column=getattr(meta, "column", 0))


def _loc_from_token(token: Token) -> Located:
	return Located(line=token.line or 0, column=token.column or 0)


def _tokens(tree: Tree, type_: str) -> List[Token]:
	return [c for c in tree.children if isinstance(c, Token) and c.type == type_]


def _subtrees(tree: Tree, name: str) -> List[Tree]:
	return [c for c in tree.children if isinstance(c, Tree) and _name(c) == name]


def _build_item(tree: Tree) -> Item:
	kind = _name(tree)
	if kind == "struct_def":
		return _build_struct(tree)
	if kind == "enum_def":
		return _build_enum(tree)
	if kind == "impl_def":
		return _build_impl(tree)
	if kind == "compile_stmt":
		return _build_compile(tree)
	if kind == "load_stmt":
		return _build_load(tree)
	raise ValueError(f"unexpected declaration item '{kind}'")


def _build_type(node: Tree | Token) -> str:
	"""Render a type reference back to a canonical shape string (`&str`, `Vec<i32>`, `()`)."""
	if isinstance(node, Token):
		return node.value
	kind = _name(node)
	if kind == "unit_type":
		return "()"
	if kind == "named_type":
		prefix = "&" if _tokens(node, "AMP") else ""
		name = _tokens(node, "NAME")[0].value
		args = _subtrees(node, "type_args")
		if args:
			inner = ", ".join(_build_type(c) for c in args[0].children)
			return f"{prefix}{name}<{inner}>"
		return prefix + name
	raise ValueError(f"unexpected type node '{kind}'")


def _build_struct(tree: Tree) -> StructDecl:
	name = _tokens(tree, "NAME")[0].value
	fields = []
	for node in _subtrees(tree, "field_def"):
		fields.append(
			FieldDecl(
				name=_tokens(node, "NAME")[0].value,
				type_name=_build_type(node.children[-1]),
				readonly=bool(_tokens(node, "READONLY")),
				loc=_loc(node),
			)
		)
	return StructDecl(name=name, fields=fields, loc=_loc(tree))


def _build_enum(tree: Tree) -> EnumDecl:
	name = _tokens(tree, "NAME")[0].value
	variants = [
		VariantDecl(name=_tokens(node, "NAME")[0].value, loc=_loc(node))
		for node in _subtrees(tree, "variant_def")
	]
	return EnumDecl(name=name, variants=variants, loc=_loc(tree))


def _build_receiver(tree: Tree) -> ReceiverDecl:
	text = ""
	if _tokens(tree, "AMP"):
		text += "&"
	if _tokens(tree, "MUT"):
		text += "mut "
	return ReceiverDecl(text=text + "self")


def _build_fn(tree: Tree) -> FnDecl:
	name = _tokens(tree, "NAME")[0].value
	params: List[ReceiverDecl | ParamDecl] = []
	returns = None
	for child in tree.children:
		if not isinstance(child, Tree):
			continue
		kind = _name(child)
		if kind == "receiver":
			params.append(_build_receiver(child))
		elif kind == "typed_param":
			params.append(
				ParamDecl(name=_tokens(child, "NAME")[0].value, type_name=_build_type(child.children[-1]))
			)
		elif kind == "return_type":
			returns = _build_type(child.children[0])
	return FnDecl(name=name, params=params, returns=returns, loc=_loc(tree))


def _build_impl(tree: Tree) -> ImplDecl:
	target = _tokens(tree, "NAME")[0].value
	return ImplDecl(
		target=target,
		functions=[_build_fn(node) for node in _subtrees(tree, "fn_sig")],
		loc=_loc(tree),
	)


def _build_compile(tree: Tree) -> CompileDirective:
	args = []
	for node in _subtrees(tree, "compile_arg"):
		key, value = _tokens(node, "NAME")
		args.append((key.value, value.value, _loc_from_token(key)))
	return CompileDirective(args=args, loc=_loc(tree))


def _build_load(tree: Tree) -> LoadDirective:
	names = [t.value for t in _tokens(tree, "NAME")]
	return LoadDirective(env_name=names[0], type_names=names[1:], loc=_loc(tree))


__all__ = ["parse_declarations"]
