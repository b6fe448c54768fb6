# vim: set noexpandtab: -*- indent-tabs-mode: t -*-

import json
from pathlib import Path

import pytest

from scriptbind.config import EnvironmentConfig, load_config_json
from scriptbind.runtime.environment import ScriptEnvironment
from scriptbind.runtime.handle import BorrowPolicy


def test_defaults():
	config = EnvironmentConfig.from_mapping({})
	assert config == EnvironmentConfig()
	assert config.to_json() == {"allow_rebind": True, "borrow_policy": "reject", "strict_integers": True}


def test_from_mapping_reads_every_key():
	config = EnvironmentConfig.from_mapping(
		{"allow_rebind": False, "borrow_policy": "serialize", "strict_integers": False}
	)
	assert config.allow_rebind is False
	assert config.borrow_policy is BorrowPolicy.SERIALIZE
	assert config.strict_integers is False


@pytest.mark.parametrize(
	"data, fragment",
	[
		({"allow_rebinding": True}, "unknown environment config key(s): allow_rebinding"),
		({"allow_rebind": "no"}, "'allow_rebind' must be a boolean"),
		({"strict_integers": 1}, "'strict_integers' must be a boolean"),
		({"borrow_policy": "wait"}, "must be one of: reject, serialize"),
	],
)
def test_from_mapping_rejects_bad_values(data, fragment):
	with pytest.raises(ValueError) as excinfo:
		EnvironmentConfig.from_mapping(data)
	assert fragment in str(excinfo.value)


def test_from_mapping_rejects_non_objects():
	with pytest.raises(ValueError):
		EnvironmentConfig.from_mapping(["allow_rebind"])  # type: ignore[arg-type]


def test_load_config_json(tmp_path: Path):
	path = tmp_path / "env.json"
	path.write_text(json.dumps({"allow_rebind": False}))
	config = load_config_json(path)
	assert config.allow_rebind is False
	assert config.borrow_policy is BorrowPolicy.REJECT


def test_load_config_json_errors(tmp_path: Path):
	with pytest.raises(ValueError, match="not found"):
		load_config_json(tmp_path / "missing.json")
	bad = tmp_path / "bad.json"
	bad.write_text("{allow_rebind: false")
	with pytest.raises(ValueError, match="invalid JSON"):
		load_config_json(bad)


def test_environment_from_config():
	config = EnvironmentConfig(allow_rebind=False, borrow_policy=BorrowPolicy.SERIALIZE, strict_integers=False)
	env = ScriptEnvironment.from_config(config)
	assert env.allow_rebind is False
	assert env.borrow_policy is BorrowPolicy.SERIALIZE
	assert env.decode(300, "u8") == 300
