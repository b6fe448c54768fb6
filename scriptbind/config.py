# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Environment configuration.

Read from a small JSON document, e.g.

	{"allow_rebind": false, "borrow_policy": "serialize", "strict_integers": true}

Every key is optional; unknown keys are rejected so typos do not silently
fall back to defaults.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping

from scriptbind.runtime.handle import BorrowPolicy


@dataclass(frozen=True)
class EnvironmentConfig:
	allow_rebind: bool = True
	borrow_policy: BorrowPolicy = BorrowPolicy.REJECT
	strict_integers: bool = True

	@classmethod
	def from_mapping(cls, data: Mapping[str, Any]) -> "EnvironmentConfig":
		if not isinstance(data, Mapping):
			raise ValueError("environment config must be a JSON object")
		known = {f.name for f in fields(cls)}
		unknown = sorted(set(data) - known)
		if unknown:
			raise ValueError(f"unknown environment config key(s): {', '.join(unknown)}")
		for key in ("allow_rebind", "strict_integers"):
			if key in data and not isinstance(data[key], bool):
				raise ValueError(f"environment config '{key}' must be a boolean")
		policy = data.get("borrow_policy", BorrowPolicy.REJECT.value)
		try:
			borrow_policy = BorrowPolicy(policy)
		except ValueError:
			allowed = ", ".join(p.value for p in BorrowPolicy)
			raise ValueError(f"environment config 'borrow_policy' must be one of: {allowed}") from None
		return cls(
			allow_rebind=data.get("allow_rebind", True),
			borrow_policy=borrow_policy,
			strict_integers=data.get("strict_integers", True),
		)

	def to_json(self) -> dict:
		return {
			"allow_rebind": self.allow_rebind,
			"borrow_policy": self.borrow_policy.value,
			"strict_integers": self.strict_integers,
		}


def load_config_json(path: Path) -> EnvironmentConfig:
	"""Load an EnvironmentConfig; missing file or malformed JSON raise ValueError."""
	try:
		raw = path.read_text(encoding="utf-8")
	except FileNotFoundError:
		raise ValueError(f"environment config not found: {path}") from None
	try:
		data = json.loads(raw)
	except json.JSONDecodeError as exc:
		raise ValueError(f"invalid JSON in {path}: {exc}") from exc
	return EnvironmentConfig.from_mapping(data)


__all__ = ["EnvironmentConfig", "load_config_json"]
