# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
scriptbind: expose Python types to an embedded scripting runtime.

Pipeline:
  declarations (decorators or a `.sbd` declaration file)
    -> collector (accumulates TypeMetadata into a BuildContext)
    -> compiler (one CompiledAdapter per type: field/method/variant tables)
    -> loader (installs adapters as globals of a ScriptEnvironment)
"""

from scriptbind.collector import (
	classify_receiver,
	declare_fields,
	declare_methods,
	declare_native,
	declare_variants,
)
from scriptbind.compiler import CompiledAdapter, compile_type
from scriptbind.config import EnvironmentConfig, load_config_json
from scriptbind.core.errors import (
	BindError,
	BorrowConflict,
	CompileError,
	ConversionError,
	DeclarationError,
	DuplicateField,
	DuplicateGlobal,
	DuplicateMethod,
	DuplicateVariant,
	InvalidReceiver,
	NameCollision,
	ScriptError,
	UnboundNative,
	UnknownMember,
	UnknownType,
)
from scriptbind.decorators import BindSession, exclusive, shared
from scriptbind.loader import TypeNamespace, load
from scriptbind.model import (
	CompileOptions,
	FieldBinding,
	MethodBinding,
	MethodReceiver,
	ParamBinding,
	TypeMetadata,
	VariantBinding,
)
from scriptbind.parser import BuildResult, build_declarations, parse_declarations
from scriptbind.registry import BuildContext, SharedRegistry
from scriptbind.runtime.environment import ScriptEnvironment
from scriptbind.runtime.handle import BorrowPolicy, Handle

__all__ = [
	"BindError",
	"BindSession",
	"BorrowConflict",
	"BorrowPolicy",
	"BuildContext",
	"BuildResult",
	"CompileError",
	"CompileOptions",
	"CompiledAdapter",
	"ConversionError",
	"DeclarationError",
	"DuplicateField",
	"DuplicateGlobal",
	"DuplicateMethod",
	"DuplicateVariant",
	"EnvironmentConfig",
	"FieldBinding",
	"Handle",
	"InvalidReceiver",
	"MethodBinding",
	"MethodReceiver",
	"NameCollision",
	"ParamBinding",
	"ScriptEnvironment",
	"ScriptError",
	"SharedRegistry",
	"TypeMetadata",
	"TypeNamespace",
	"UnboundNative",
	"UnknownMember",
	"UnknownType",
	"VariantBinding",
	"build_declarations",
	"classify_receiver",
	"compile_type",
	"declare_fields",
	"declare_methods",
	"declare_native",
	"declare_variants",
	"exclusive",
	"load",
	"load_config_json",
	"parse_declarations",
	"shared",
]
