# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Shared game types for the scriptbind tests.

Every test gets freshly decorated classes and a fresh BindSession, so
declarations never leak between tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from types import SimpleNamespace

import pytest

from scriptbind.decorators import BindSession, exclusive, readonly_field
from scriptbind.runtime.environment import ScriptEnvironment


@pytest.fixture
def game() -> SimpleNamespace:
	session = BindSession()

	@session.enumeration
	class PlayerStatus(Enum):
		Idle = auto()
		Walking = auto()
		Attacking = auto()

	@session.implementation
	@session.structure
	@dataclass
	class Player:
		name: str
		hp: int = 100
		status: PlayerStatus = PlayerStatus.Idle
		level: int = readonly_field(default=1)

		@staticmethod
		def new(name: str) -> Player:
			return Player(name=name)

		@staticmethod
		def max_hp() -> int:
			return 100

		@exclusive
		def take_damage(self, amount: int) -> None:
			self.hp = max(0, self.hp - amount)

		@exclusive
		def heal(self, amount: int) -> int:
			self.hp = min(Player.max_hp(), self.hp + amount)
			return self.hp

		@exclusive
		def rename(self, name: str) -> None:
			if not name:
				raise ValueError("name must not be empty")
			self.name = name

		@exclusive
		def apply(self, effect) -> None:
			effect()

		def is_alive(self) -> bool:
			return self.hp > 0

		def greet(self) -> str:
			return f"I am {self.name}"

	return SimpleNamespace(session=session, Player=Player, PlayerStatus=PlayerStatus)


@pytest.fixture
def env() -> ScriptEnvironment:
	return ScriptEnvironment()


@pytest.fixture
def loaded(game: SimpleNamespace, env: ScriptEnvironment) -> ScriptEnvironment:
	"""`env` with PlayerStatus (variants) and Player (fields + methods) installed."""
	game.session.compile(game.PlayerStatus, variants=True)
	game.session.compile(game.Player, fields=True, methods=True)
	game.session.load(env)
	return env
