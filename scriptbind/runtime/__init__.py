# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Runtime-side collaborators: handles, value conversion and the script environment.
"""

from scriptbind.runtime.conversion import Converter, StrictConverter
from scriptbind.runtime.environment import Environment, ScriptEnvironment, ScriptFunction
from scriptbind.runtime.handle import BorrowPolicy, BoundMethod, Handle

__all__ = [
	"BorrowPolicy",
	"BoundMethod",
	"Converter",
	"Environment",
	"Handle",
	"ScriptEnvironment",
	"ScriptFunction",
	"StrictConverter",
]
