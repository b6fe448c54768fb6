# vim: set noexpandtab: -*- indent-tabs-mode: t -*-

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

import pytest

from scriptbind.core.errors import InvalidReceiver, UnknownType
from scriptbind.decorators import (
	BindSession,
	exclusive,
	field_bindings,
	method_bindings,
	shape_of,
	shared,
)
from scriptbind.model import MethodReceiver, SELF_SHAPE, UNIT_SHAPE


def test_shape_of_never_evaluates():
	assert shape_of(int) == "int"
	assert shape_of("Player") == "Player"
	assert shape_of("'Player'") == "Player"
	assert shape_of(None) == UNIT_SHAPE
	assert shape_of("None") == UNIT_SHAPE


def test_game_types_are_collected(game):
	ctx = game.session.ctx
	player = ctx.get("Player")
	assert player.native is game.Player
	assert player.field_names() == ("name", "hp", "status", "level")
	writable = {f.name: f.writable for f in player.fields}
	assert writable == {"name": True, "hp": True, "status": True, "level": False}
	receivers = {m.name: m.receiver for m in player.methods}
	assert receivers["new"] is MethodReceiver.NONE
	assert receivers["max_hp"] is MethodReceiver.NONE
	assert receivers["take_damage"] is MethodReceiver.EXCLUSIVE_SELF
	assert receivers["is_alive"] is MethodReceiver.SHARED_SELF
	assert ctx.get("PlayerStatus").variant_names() == ("Idle", "Walking", "Attacking")


def test_return_annotation_of_own_class_is_self(game):
	methods = {m.name: m for m in game.session.ctx.get("Player").methods}
	assert methods["new"].returns == SELF_SHAPE
	assert methods["new"].is_constructor_of("Player")
	assert methods["take_damage"].returns == UNIT_SHAPE
	assert methods["take_damage"].params[0].shape == "int"


def test_classmethod_skips_cls_and_is_static():
	class Monster:
		@classmethod
		def spawn(cls, level: int) -> Monster:
			return cls()

	(binding,) = method_bindings(Monster, "Monster")
	assert binding.receiver is MethodReceiver.NONE
	assert [p.name for p in binding.params] == ["level"]
	assert binding.returns == SELF_SHAPE


def test_shared_marker_and_private_names():
	class Monster:
		@shared
		def roar(self) -> str:
			return "roar"

		def _secret(self) -> None:
			pass

	bindings = method_bindings(Monster, "Monster")
	assert [b.name for b in bindings] == ["roar"]
	assert bindings[0].receiver is MethodReceiver.SHARED_SELF


def test_marker_on_static_function_is_rejected():
	session = BindSession()
	with pytest.raises(InvalidReceiver):
		@session.implementation
		class Monster:
			@staticmethod
			@exclusive
			def spawn() -> Monster:
				return Monster()


def test_variadic_parameters_are_rejected():
	class Monster:
		def shout(self, *words: str) -> None:
			pass

	with pytest.raises(InvalidReceiver):
		method_bindings(Monster, "Monster")


def test_frozen_dataclass_fields_are_read_only():
	@dataclass(frozen=True)
	class Point:
		x: int
		y: int

	assert [f.writable for f in field_bindings(Point)] == [False, False]


def test_plain_class_annotations_and_readonly_names():
	class Monster:
		kind: ClassVar[str] = "orc"
		name: str
		hp: int

	bindings = field_bindings(Monster, readonly=["name"])
	assert [(b.name, b.shape, b.writable) for b in bindings] == [("name", "str", False), ("hp", "int", True)]


def test_enumeration_requires_enum():
	session = BindSession()
	with pytest.raises(TypeError):
		session.enumeration(object)


def test_custom_type_name():
	session = BindSession()

	@session.enumeration(name="Mood")
	class Status(Enum):
		Calm = 1
		Angry = 2

	assert session.type_id_of(Status) == "Mood"
	adapter = session.compile(Status, variants=True)
	assert adapter.type_id == "Mood"
	assert list(adapter.variants) == ["Calm", "Angry"]


def test_compile_unknown_type():
	session = BindSession()
	with pytest.raises(UnknownType):
		session.compile("Ghost", fields=True)


def test_build_lists_adapters_in_compile_order(game):
	player = game.session.compile(game.Player, fields=True)
	status = game.session.compile(game.PlayerStatus, variants=True)
	built = game.session.build()
	assert built == [player, status]
	built.clear()
	assert game.session.adapters == [player, status]
