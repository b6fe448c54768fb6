# vim: set noexpandtab: -*- indent-tabs-mode: t -*-

import pytest

from scriptbind.collector import Signature, declare_fields, declare_methods, declare_native, declare_variants
from scriptbind.compiler import compile_type
from scriptbind.core.errors import ConversionError, NameCollision, UnboundNative, UnknownType
from scriptbind.model import CompileOptions, FieldBinding, MethodReceiver, ParamBinding
from scriptbind.registry import BuildContext
from scriptbind.runtime.environment import ScriptEnvironment


def _player_ctx() -> BuildContext:
	ctx = declare_fields(
		BuildContext(),
		"Player",
		[FieldBinding("name", "String"), FieldBinding("hp", "i32"), FieldBinding("level", "u32", writable=False)],
	)
	return declare_methods(
		ctx,
		"Player",
		[
			Signature("new", params=(ParamBinding("name", "String"),), returns="Self"),
			Signature("max_hp", returns="i32"),
			Signature("take_damage", params=("&mut self", ParamBinding("amount", "i32"))),
			Signature("is_alive", params=("&self",), returns="bool"),
		],
	)


def test_unknown_type():
	with pytest.raises(UnknownType) as excinfo:
		compile_type(BuildContext(), "Ghost", CompileOptions.all())
	assert excinfo.value.type_id == "Ghost"


def test_options_select_groups():
	ctx = _player_ctx()
	fields_only = compile_type(ctx, "Player", CompileOptions(fields=True))
	assert list(fields_only.fields) == ["name", "hp", "level"]
	assert dict(fields_only.methods) == {}
	methods_only = compile_type(ctx, "Player", CompileOptions(methods=True))
	assert dict(methods_only.fields) == {}
	assert list(methods_only.methods) == ["new", "max_hp", "take_damage", "is_alive"]
	nothing = compile_type(ctx, "Player")
	assert not nothing.fields and not nothing.methods and not nothing.variants


def test_enabled_but_undeclared_group_is_empty():
	ctx = declare_variants(BuildContext(), "PlayerStatus", ["Idle"])
	adapter = compile_type(ctx, "PlayerStatus", CompileOptions.all())
	assert dict(adapter.fields) == {}
	assert dict(adapter.methods) == {}
	assert list(adapter.variants) == ["Idle"]


def test_read_only_field_has_no_setter():
	adapter = compile_type(_player_ctx(), "Player", CompileOptions(fields=True))
	assert adapter.fields["hp"].set is not None
	assert adapter.fields["level"].set is None
	assert not adapter.fields["level"].writable


def test_static_and_instance_split():
	adapter = compile_type(_player_ctx(), "Player", CompileOptions.all())
	assert set(adapter.statics()) == {"new", "max_hp"}
	assert adapter.instance_methods() == ("take_damage", "is_alive")
	assert adapter.constructors() == ("new",)
	assert adapter.methods["take_damage"].receiver is MethodReceiver.EXCLUSIVE_SELF


def test_recompiling_yields_independent_equal_adapters():
	ctx = _player_ctx()
	first = compile_type(ctx, "Player", CompileOptions(fields=True))
	second = compile_type(ctx, "Player", CompileOptions(fields=True))
	assert first is not second
	assert list(first.fields) == list(second.fields)
	assert first.describe() == second.describe()


def test_name_collision_across_enabled_groups():
	ctx = declare_fields(BuildContext(), "Player", ["status"])
	ctx = declare_methods(ctx, "Player", [Signature("status", params=("&self",))])
	with pytest.raises(NameCollision) as excinfo:
		compile_type(ctx, "Player", CompileOptions(fields=True, methods=True))
	assert excinfo.value.groups == ("field", "method")
	# Only one group enabled: no clash on the dotted surface.
	assert list(compile_type(ctx, "Player", CompileOptions(fields=True)).fields) == ["status"]


def test_describe_summary():
	adapter = compile_type(_player_ctx(), "Player", CompileOptions.all())
	summary = adapter.describe()
	assert summary["type"] == "Player"
	assert summary["native"] is None
	assert {"name": "level", "shape": "u32", "writable": False} in summary["fields"]
	take_damage = next(m for m in summary["methods"] if m["name"] == "take_damage")
	assert take_damage == {
		"name": "take_damage",
		"receiver": "EXCLUSIVE_SELF",
		"params": [{"name": "amount", "shape": "i32"}],
		"returns": None,
		"constructor": False,
	}
	assert summary["variants"] == []


def test_missing_native_fails_when_called():
	env = ScriptEnvironment()
	ctx = declare_variants(_player_ctx(), "PlayerStatus", ["Idle"])
	adapter = compile_type(ctx, "Player", CompileOptions.all())
	with pytest.raises(UnboundNative):
		env.invoke("Player.new", adapter.methods["new"].call, "LuaHero")
	status = compile_type(ctx, "PlayerStatus", CompileOptions(variants=True))
	with pytest.raises(UnboundNative):
		status.variants["Idle"].make(env)


def test_variant_resolved_from_native_by_name():
	from enum import Enum

	class PlayerStatus(Enum):
		Idle = 0
		Walking = 1

	ctx = declare_variants(BuildContext(), "PlayerStatus", ["Idle", "Walking"])
	ctx = declare_native(ctx, "PlayerStatus", PlayerStatus)
	adapter = compile_type(ctx, "PlayerStatus", CompileOptions(variants=True))
	handle = adapter.variants["Walking"].make(ScriptEnvironment())
	assert handle.native is PlayerStatus.Walking
	assert handle.adapter is adapter


def test_variant_factory_takes_no_arguments(game, env):
	adapter = game.session.compile(game.PlayerStatus, variants=True)
	factory = adapter.statics()["Idle"]
	assert factory(env).native is game.PlayerStatus.Idle
	with pytest.raises(ConversionError):
		factory(env, "extra")


def test_static_call_checks_arity_and_wraps_constructors(game, env):
	adapter = game.session.compile(game.Player, fields=True, methods=True)
	new = adapter.methods["new"].call
	hero = new(env, "LuaHero")
	assert hero.adapter is adapter
	assert hero.native == game.Player(name="LuaHero")
	with pytest.raises(ConversionError):
		new(env)
	with pytest.raises(ConversionError):
		new(env, "LuaHero", 7)
	assert adapter.methods["max_hp"].call(env) == 100


def test_instance_call_requires_matching_handle(game, env):
	status = game.session.compile(game.PlayerStatus, variants=True)
	player = game.session.compile(game.Player, methods=True)
	idle = status.variants["Idle"].make(env)
	with pytest.raises(ConversionError):
		player.methods["is_alive"].call(env, idle)
	with pytest.raises(ConversionError):
		player.methods["is_alive"].call(env, "not a handle")
