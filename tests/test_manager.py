"""Tests for the EffectManager live set."""

import pytest

from beatburst.effects.director import SpawnRequest
from beatburst.effects.manager import EffectHandle, EffectManager
from beatburst.effects.particle import EffectState


def _request(max_age: int) -> SpawnRequest:
    return SpawnRequest(
        position=(0.0, 0.0, 0.0),
        color=(1.0, 1.0, 1.0),
        particle_count=10,
        point_size=0.1,
        speed=1.0,
        max_age=max_age,
    )


@pytest.fixture
def manager(sink, rng) -> EffectManager:
    return EffectManager(sink, rng=rng)


class TestCreate:
    def test_registers_with_sink(self, manager, sink):
        handle = manager.create(_request(10))
        assert isinstance(handle, EffectHandle)
        assert handle in manager
        assert len(manager) == 1
        assert sink.drawables == [manager.get(handle)]

    def test_handles_are_unique(self, manager):
        handles = {manager.create(_request(10)) for _ in range(20)}
        assert len(handles) == 20

    def test_many_creates_between_advances(self, manager):
        for _ in range(50):
            manager.create(_request(3))
        manager.advance_all()
        assert len(manager) == 50
        assert all(e.age == 1 for e in manager.effects)


class TestAdvanceAll:
    def test_empty_is_noop(self, manager, sink):
        assert manager.advance_all() == []
        assert sink.removed == []

    def test_each_effect_advanced_once_per_call(self, manager):
        for _ in range(5):
            manager.create(_request(10))
        manager.advance_all()
        manager.advance_all()
        assert [e.age for e in manager.effects] == [2] * 5

    def test_dies_on_first_advance(self, manager, sink):
        handle = manager.create(_request(1))
        effect = manager.get(handle)

        retired = manager.advance_all()

        assert retired == [handle]
        assert handle not in manager
        assert effect.state is EffectState.DEAD
        assert sink.removed == [effect]
        assert sink.drawables == []

    def test_live_set_is_previous_minus_dead(self, manager, sink):
        handles = [manager.create(_request(age)) for age in (1, 2, 3, 2)]

        retired = manager.advance_all()
        assert retired == [handles[0]]
        assert set(h for h in handles if h in manager) == set(handles[1:])

        retired = manager.advance_all()
        assert set(retired) == {handles[1], handles[3]}
        assert [h for h in handles if h in manager] == [handles[2]]

        manager.advance_all()
        assert len(manager) == 0
        assert len(sink.removed) == 4
        assert sink.drawables == []

    def test_dead_effects_never_advanced_again(self, manager):
        manager.create(_request(2))
        for _ in range(10):
            manager.advance_all()  # would raise RuntimeError on a dead effect
        assert len(manager) == 0

    def test_drawables_removed_exactly_once(self, manager, sink):
        effects = [manager.get(manager.create(_request(3))) for _ in range(4)]
        for _ in range(6):
            manager.advance_all()
        assert len(sink.removed) == 4
        assert all(sum(r is e for r in sink.removed) == 1 for e in effects)

    def test_counters(self, manager):
        for age in (1, 1, 5):
            manager.create(_request(age))
        manager.advance_all()
        assert manager.created == 3
        assert manager.retired == 2


class TestClear:
    def test_disposes_everything(self, manager, sink):
        effects = [manager.get(manager.create(_request(10))) for _ in range(3)]
        manager.clear()
        assert all(e.state is EffectState.DEAD for e in effects)
        assert len(manager) == 0
        assert sink.drawables == []
        assert len(sink.removed) == 3
        assert manager.advance_all() == []
