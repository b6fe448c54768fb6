# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Diagnostic record shared by the collector, compiler and CLI.

Build-time failures are raised as exceptions from `scriptbind.core.errors`;
front-ends that process many declarations at once (the declaration-file
collector, `bindc`) convert them into Diagnostics so one run can report every
problem instead of stopping at the first.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .span import Span


@dataclass
class Diagnostic:
	"""A single error/warning tied to a pipeline phase."""

	message: str
	code: str | None = None
	# One of: "parse", "declare", "compile", "load", "config".
	phase: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()

	def to_json(self) -> dict:
		return {
			"phase": self.phase,
			"code": self.code,
			"message": self.message,
			"severity": self.severity,
			"file": self.span.file,
			"line": self.span.line,
			"column": self.span.column,
			"notes": list(self.notes),
		}

	def render(self) -> str:
		phase = f"[{self.phase}] " if self.phase else ""
		code = f" ({self.code})" if self.code else ""
		text = f"{self.span}: {self.severity}: {phase}{self.message}{code}"
		for note in self.notes:
			text += f"\n  note: {note}"
		return text


def has_errors(diagnostics: list[Diagnostic]) -> bool:
	return any(d.severity == "error" for d in diagnostics)


__all__ = ["Diagnostic", "has_errors"]
