# vim: set noexpandtab: -*- indent-tabs-mode: t -*-

import threading

import pytest

from scriptbind.collector import declare_fields, declare_methods, Signature
from scriptbind.core.errors import DuplicateField
from scriptbind.model import TypeMetadata
from scriptbind.registry import BuildContext, SharedRegistry


def test_context_is_immutable():
	ctx = declare_fields(BuildContext(), "Player", ["hp"])
	with pytest.raises(TypeError):
		ctx.entries["Monster"] = TypeMetadata("Monster")  # type: ignore[index]
	assert "Monster" not in ctx
	assert len(ctx) == 1


def test_entry_for_unknown_type_is_not_stored():
	ctx = BuildContext()
	meta = ctx.entry("Player")
	assert meta == TypeMetadata("Player")
	assert "Player" not in ctx


def test_plain_dict_is_frozen_on_construction():
	entries = {"Player": TypeMetadata("Player")}
	ctx = BuildContext(entries)
	entries["Monster"] = TypeMetadata("Monster")
	assert list(ctx) == ["Player"]


def test_merge_disjoint_and_conflicting_contexts():
	a = declare_fields(BuildContext(), "Player", ["hp"])
	b = declare_fields(BuildContext(), "Monster", ["hp"])
	merged = a.merge(b)
	assert set(merged.type_ids()) == {"Player", "Monster"}
	assert a.merge(a) == a
	with pytest.raises(ValueError):
		a.merge(declare_fields(BuildContext(), "Player", ["name"]))


def test_shared_registry_serializes_accumulation_per_type():
	registry = SharedRegistry()
	barrier = threading.Barrier(8)

	def worker(i: int) -> None:
		barrier.wait()
		registry.accumulate("Player", lambda ctx: declare_fields(ctx, "Player", [f"f{i}"]))
		registry.accumulate(f"T{i}", lambda ctx: declare_methods(ctx, f"T{i}", [Signature("make", returns="Self")]))

	threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
	for t in threads:
		t.start()
	for t in threads:
		t.join(timeout=10)

	snapshot = registry.snapshot()
	assert sorted(snapshot.get("Player").field_names()) == sorted(f"f{i}" for i in range(8))
	assert all(f"T{i}" in snapshot for i in range(8))


def test_shared_registry_failed_step_keeps_previous_entry():
	registry = SharedRegistry()
	registry.accumulate("Player", lambda ctx: declare_fields(ctx, "Player", ["hp"]))
	with pytest.raises(DuplicateField):
		registry.accumulate("Player", lambda ctx: declare_fields(ctx, "Player", ["hp"]))
	assert registry.snapshot().get("Player").field_names() == ("hp",)


def test_shared_registry_rejects_step_without_entry():
	registry = SharedRegistry()
	with pytest.raises(ValueError):
		registry.accumulate("Player", lambda ctx: ctx)
