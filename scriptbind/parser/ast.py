# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""AST for `.sbd` declaration files."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union


@dataclass(frozen=True)
class Located:
	line: int
	column: int


@dataclass
class FieldDecl:
	name: str
	type_name: str
	readonly: bool
	loc: Located


@dataclass
class StructDecl:
	name: str
	fields: List[FieldDecl]
	loc: Located


@dataclass
class VariantDecl:
	name: str
	loc: Located


@dataclass
class EnumDecl:
	name: str
	variants: List[VariantDecl]
	loc: Located


@dataclass
class ParamDecl:
	name: str
	type_name: str


@dataclass
class ReceiverDecl:
	"""`self`, `&self`, `mut self` or `&mut self` as written."""

	text: str


@dataclass
class FnDecl:
	name: str
	# Source order; a receiver is only meaningful in the first slot.
	params: List[Union[ReceiverDecl, ParamDecl]]
	returns: Optional[str]
	loc: Located


@dataclass
class ImplDecl:
	target: str
	functions: List[FnDecl]
	loc: Located


@dataclass
class CompileDirective:
	"""`compile!(key = value, ...)`; values are kept raw for the collector to validate."""

	args: List[Tuple[str, str, Located]]
	loc: Located


@dataclass
class LoadDirective:
	env_name: str
	type_names: List[str]
	loc: Located


Item = Union[StructDecl, EnumDecl, ImplDecl, CompileDirective, LoadDirective]


@dataclass
class DeclFile:
	items: List[Item] = field(default_factory=list)
	filename: Optional[str] = None
