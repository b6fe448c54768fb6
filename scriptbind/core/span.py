# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Source span for declarations read from a `.sbd` file.

Declarations made through Python decorators have no file position; they use
the empty `Span()` sentinel.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Span:
	"""Best-effort file/line/column of a declaration site."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None

	@property
	def known(self) -> bool:
		return self.line is not None

	def __str__(self) -> str:
		where = self.file or "<decl>"
		if self.line is None:
			return where
		return f"{where}:{self.line}:{self.column or 0}"


__all__ = ["Span"]
