# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
bindc: check a `.sbd` declaration file and summarize the adapters it builds.

	bindc game.sbd
	bindc game.sbd --json
	bindc game.sbd --config env.json -v

The file is parsed, collected and compiled; `load!` directives are then
installed into a fresh ScriptEnvironment (configured from `--config`) so that
rebinding problems show up as load diagnostics. No native classes are
attached, so nothing is executed.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from scriptbind.config import EnvironmentConfig, load_config_json
from scriptbind.core.diagnostics import Diagnostic
from scriptbind.core.errors import BindError
from scriptbind.core.span import Span
from scriptbind.parser import BuildResult, build_declarations
from scriptbind.runtime.environment import ScriptEnvironment


def _diag_to_json(diag: Diagnostic, source: Path) -> dict:
	"""Render a Diagnostic to a structured JSON-friendly dict."""
	payload = diag.to_json()
	if payload["file"] is None:
		payload["file"] = str(source)
	return payload


def _install(result: BuildResult, config: EnvironmentConfig, source: Path) -> List[Diagnostic]:
	env = ScriptEnvironment.from_config(config)
	try:
		result.install(env)
	except BindError as err:
		diag = err.to_diagnostic()
		diag.span = Span(file=str(source))
		return [diag]
	return []


def _summary(result: BuildResult) -> List[str]:
	lines: List[str] = []
	for adapter in result.adapters:
		enabled = ", ".join(adapter.options.enabled()) or "nothing"
		lines.append(f"{adapter.type_id} ({enabled})")
		for accessor in adapter.fields.values():
			mode = "rw" if accessor.writable else "ro"
			lines.append(f"  field   {accessor.name}: {accessor.shape or '?'} [{mode}]")
		for entry in adapter.methods.values():
			params = ", ".join(f"{p.name}: {p.shape or '?'}" for p in entry.params)
			returns = f" -> {entry.returns}" if entry.returns else ""
			kind = "constructor" if entry.is_constructor else entry.receiver.name.lower()
			lines.append(f"  method  {entry.name}({params}){returns} [{kind}]")
		for name in adapter.variants:
			lines.append(f"  variant {name}")
	if result.load_order:
		lines.append("load: " + ", ".join(type_id for type_id, _ in result.load_order))
	return lines


def main(argv: list[str] | None = None) -> int:
	"""
	Check a declaration file. Exit code is 1 when any diagnostic was reported.

	With --json, prints `{"exit_code", "diagnostics", "adapters", "load"}`;
	otherwise prints the adapter summary to stdout and diagnostics to stderr.
	"""
	parser = argparse.ArgumentParser(prog="bindc", description="scriptbind declaration checker")
	parser.add_argument("source", type=Path, help="Path to a .sbd declaration file")
	parser.add_argument("--json", action="store_true", help="Emit structured JSON output")
	parser.add_argument("--config", type=Path, help="Environment config JSON used for the trial load")
	parser.add_argument("-v", "--verbose", action="store_true", help="Log each pipeline step to stderr")
	args = parser.parse_args(argv)

	if args.verbose:
		logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

	source_path: Path = args.source
	diagnostics: List[Diagnostic] = []
	config = EnvironmentConfig()
	result: Optional[BuildResult] = None

	if args.config is not None:
		try:
			config = load_config_json(args.config)
		except ValueError as exc:
			diagnostics.append(Diagnostic(message=str(exc), code="config", phase="config", span=Span(file=str(args.config))))

	if not diagnostics:
		try:
			source = source_path.read_text(encoding="utf-8")
		except OSError as exc:
			diagnostics.append(
				Diagnostic(message=f"cannot read {source_path}: {exc.strerror or exc}", code="io", phase="parse", span=Span(file=str(source_path)))
			)
		else:
			result = build_declarations(source, filename=str(source_path))
			diagnostics.extend(result.diagnostics)
			if result.ok:
				diagnostics.extend(_install(result, config, source_path))

	exit_code = 1 if diagnostics else 0
	if args.json:
		payload = {
			"exit_code": exit_code,
			"diagnostics": [_diag_to_json(d, source_path) for d in diagnostics],
			"adapters": [a.describe() for a in result.adapters] if result is not None else [],
			"load": [type_id for type_id, _ in result.load_order] if result is not None else [],
		}
		print(json.dumps(payload))
		return exit_code

	if result is not None:
		for line in _summary(result):
			print(line)
	for d in diagnostics:
		print(d.render(), file=sys.stderr)
	return exit_code


if __name__ == "__main__":
	sys.exit(main())
