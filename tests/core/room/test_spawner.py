"""Spawner: 개수, 범위, instance_id 고유성"""

import random

import pytest

from src.core.catalog.models import RoomDefinition
from src.core.room.spawner import (
    ASSIST_COUNT,
    ASSIST_Z_OFFSET,
    INITIAL_MAX_COUNT,
    INITIAL_MIN_COUNT,
    Spawner,
)

ROOM = RoomDefinition("r", ("a", "b", "c"), clear_target=10, coin_reward=0)


@pytest.fixture()
def spawner() -> Spawner:
    return Spawner(random.Random(1234))


class TestGenerate:
    def test_count_and_pool(self, spawner: Spawner) -> None:
        items = spawner.generate(ROOM, 50)
        assert len(items) == 50
        assert {i.item_id for i in items} <= set(ROOM.item_pool)

    def test_placement_ranges(self, spawner: Spawner) -> None:
        for item in spawner.generate(ROOM, 200):
            pos = item.position
            assert 10 <= pos.x <= 90
            assert 10 <= pos.y <= 80
            assert 0 <= pos.rotation < 360
            assert 0.8 <= pos.scale <= 1.2

    def test_z_is_spawn_index(self, spawner: Spawner) -> None:
        items = spawner.generate(ROOM, 5, z_offset=7)
        assert [i.position.z for i in items] == [7, 8, 9, 10, 11]

    def test_instance_ids_unique(self, spawner: Spawner) -> None:
        ids = [i.instance_id for _ in range(20) for i in spawner.generate(ROOM, 10)]
        assert len(ids) == len(set(ids))

    def test_zero_count(self, spawner: Spawner) -> None:
        assert spawner.generate(ROOM, 0) == []


class TestPopulations:
    def test_initial_size_range(self) -> None:
        sizes = {len(Spawner(random.Random(seed)).initial(ROOM)) for seed in range(200)}
        assert min(sizes) >= INITIAL_MIN_COUNT
        assert max(sizes) <= INITIAL_MAX_COUNT

    def test_assist_batch(self, spawner: Spawner) -> None:
        initial = spawner.initial(ROOM)
        extra = spawner.assist(ROOM)
        assert len(extra) == ASSIST_COUNT
        assert min(i.position.z for i in extra) >= ASSIST_Z_OFFSET
        assert max(i.position.z for i in initial) < ASSIST_Z_OFFSET
