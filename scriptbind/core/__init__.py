# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Shared building blocks: source spans, diagnostics and the error taxonomy."""

__all__ = ["diagnostics", "errors", "span"]
