# vim: set noexpandtab: -*- indent-tabs-mode: t -*-

import pytest

from scriptbind.core.errors import DuplicateGlobal, UnknownMember
from scriptbind.loader import TypeNamespace, load
from scriptbind.runtime.environment import ScriptEnvironment, ScriptFunction


def test_namespaces_hold_static_members(loaded):
	Player = loaded.globals["Player"]
	PlayerStatus = loaded.globals["PlayerStatus"]
	assert isinstance(Player, TypeNamespace)
	assert set(Player) == {"new", "max_hp"}
	assert set(PlayerStatus) == {"Idle", "Walking", "Attacking"}
	assert isinstance(Player["new"], ScriptFunction)
	assert Player.new.name == "Player.new"
	assert "take_damage" not in Player
	assert len(PlayerStatus) == 3
	assert str(Player) == "userdata: Player"
	with pytest.raises(UnknownMember):
		Player.take_damage


def test_load_returns_namespaces_in_order(game, env):
	status = game.session.compile(game.PlayerStatus, variants=True)
	player = game.session.compile(game.Player, methods=True)
	installed = load(env, [player, status])
	assert [str(ns) for ns in installed] == ["userdata: Player", "userdata: PlayerStatus"]
	assert env.adapter_for(game.Player) is player
	assert env.adapter_named("PlayerStatus") is status


def test_load_under_another_name(game, env):
	adapter = game.session.compile(game.Player, fields=True, methods=True)
	(hero_type,) = load(env, [("Hero", adapter)])
	assert env.globals["Hero"] is hero_type
	assert "Player" not in env.globals
	assert hero_type.new.name == "Hero.new"
	assert hero_type.new("LuaHero").type_id == "Player"


def test_load_rejects_non_adapters(env):
	with pytest.raises(TypeError):
		load(env, [("Player", object())])


def test_reload_keeps_existing_handles_working(game, env):
	game.session.compile(game.PlayerStatus, variants=True)
	first = game.session.compile(game.Player, fields=True, methods=True)
	game.session.load(env)
	hero = env.globals["Player"].new("LuaHero")

	second = game.session.compile(game.Player, fields=True)
	load(env, [second])
	assert env.adapter_for(game.Player) is second
	with pytest.raises(UnknownMember):
		env.globals["Player"].new

	# The old handle still dispatches through the adapter that created it.
	assert hero.adapter is first
	hero.take_damage(30)
	assert hero.hp == 70


def test_duplicate_global_when_rebinding_is_forbidden(game):
	env = ScriptEnvironment(allow_rebind=False)
	status = game.session.compile(game.PlayerStatus, variants=True)
	first = game.session.compile(game.Player, fields=True)
	second = game.session.compile(game.Player, fields=True, methods=True)
	load(env, [status, first])
	bound = env.globals["Player"]
	with pytest.raises(DuplicateGlobal):
		load(env, [second])
	assert env.globals["Player"] is bound
	assert env.adapter_for(game.Player) is first
