"""RoomSession 상태 머신 통합 테스트 (ManualScheduler + 고정 seed)"""

import random

import pytest

from src.core.catalog.models import RoomDefinition
from src.core.catalog.registry import DataIntegrityError
from src.core.event_bus import EventBus, GameEvent
from src.core.event_types import EventTypes
from src.core.room.merge import MERGE_BONUS_COINS, MERGE_DELAY_MS
from src.core.room.session import ASSIST_BONUS_COINS, RoomSession, SessionState
from src.core.room.spawner import ASSIST_Z_OFFSET, Spawner


class FixedSpawner(Spawner):
    """초기 배치 개수 고정"""

    def __init__(self, count: int) -> None:
        super().__init__(random.Random(0))
        self._count = count

    def initial(self, room: RoomDefinition):
        return self.generate(room, self._count)


def _extract_next(session: RoomSession) -> str:
    instance_id = session.spawned_items[0].instance_id
    assert session.extract(instance_id)
    return instance_id


def _drain(session: RoomSession, scheduler) -> None:
    """남은 아이템을 모두 꺼내며 합성까지 진행"""
    while session.spawned_items and session.state is SessionState.PLAYING:
        _extract_next(session)
        scheduler.advance(MERGE_DELAY_MS)


@pytest.fixture()
def events() -> list[GameEvent]:
    return []


@pytest.fixture()
def bus(events) -> EventBus:
    bus = EventBus()
    for name, event_type in vars(EventTypes).items():
        if not name.startswith("_"):
            bus.subscribe(event_type, events.append)
    return bus


# ── 초기화 ────────────────────────────────────────────────────


class TestInitialize:
    def test_fresh_state(self, make_session) -> None:
        session = make_session("tiny")
        assert session.state is SessionState.PLAYING
        assert session.score == 0
        assert session.target_score == 3
        assert session.slots == (None, None, None)
        assert 15 <= len(session.spawned_items) <= 24
        assert not session.assist_offered

    def test_unknown_room(self, tiny_catalog, ledger, scheduler) -> None:
        with pytest.raises(DataIntegrityError):
            RoomSession("nope", tiny_catalog, ledger, scheduler)

    def test_unknown_pool_item(self, tiny_catalog, ledger, scheduler) -> None:
        tiny_catalog.register_room(
            RoomDefinition("broken", ("ghost",), clear_target=1, coin_reward=0)
        )
        with pytest.raises(DataIntegrityError):
            RoomSession("broken", tiny_catalog, ledger, scheduler)


# ── 꺼내기 ────────────────────────────────────────────────────


class TestExtract:
    def test_places_in_lowest_slot(self, make_session, ledger) -> None:
        session = make_session("long")
        _extract_next(session)
        assert session.slots == ("a", None, None)
        assert session.score == 1
        _extract_next(session)
        assert session.slots == ("a", "a", None)
        assert session.score == 2
        assert ledger.collected_count("a") == 2
        assert ledger.data.stats.total_items_collected == 2

    def test_double_extract_is_noop(self, make_session, ledger) -> None:
        session = make_session("long")
        instance_id = _extract_next(session)
        snapshot = ledger.data
        remaining = len(session.spawned_items)

        assert session.extract(instance_id) is False
        assert session.score == 1
        assert ledger.data is snapshot
        assert len(session.spawned_items) == remaining

    def test_unknown_instance_is_noop(self, make_session) -> None:
        session = make_session("long")
        assert session.extract("does-not-exist") is False
        assert session.score == 0

    def test_full_slots_collect_but_discard(
        self, make_session, ledger, bus, events
    ) -> None:
        session = make_session("long", bus)
        for _ in range(3):
            _extract_next(session)
        remaining = len(session.spawned_items)

        _extract_next(session)

        assert len(session.spawned_items) == remaining - 1
        assert session.slots == ("a", "a", "a")
        assert session.score == 3
        assert ledger.collected_count("a") == 4
        assert events[-1].event_type == EventTypes.ITEM_DISCARDED

    def test_feedback_expires(self, make_session, scheduler) -> None:
        session = make_session("long")
        _extract_next(session)
        assert [f.text for f in session.view().feedback] == ["+1"]
        scheduler.advance(1000)
        assert session.view().feedback == ()


# ── 합성 ──────────────────────────────────────────────────────


class TestMergeInSession:
    def test_merge_credits_score_and_coins(self, make_session, scheduler, ledger) -> None:
        session = make_session("long")
        for _ in range(3):
            _extract_next(session)
        assert session.merge_pending
        coins = ledger.data.coins

        scheduler.advance(MERGE_DELAY_MS)

        assert session.slots == (None, None, None)
        assert session.score == 8
        assert ledger.data.coins == coins + MERGE_BONUS_COINS
        assert ledger.collected_count("b") == 1
        assert not session.merge_pending

    def test_clear_slot_cancels_merge(self, make_session, scheduler, ledger) -> None:
        session = make_session("long")
        for _ in range(3):
            _extract_next(session)
        snapshot = ledger.data

        scheduler.advance(MERGE_DELAY_MS // 2)
        assert session.clear_slot(0) is True
        scheduler.advance(MERGE_DELAY_MS * 4)

        assert session.score == 3
        assert session.slots == (None, "a", "a")
        assert ledger.data is snapshot
        assert not session.merge_pending

    def test_clear_then_refill_merges(self, make_session, scheduler) -> None:
        session = make_session("long")
        for _ in range(3):
            _extract_next(session)
        session.clear_slot(1)
        _extract_next(session)
        assert session.slots == ("a", "a", "a")
        scheduler.advance(MERGE_DELAY_MS)
        assert session.score == 4 + 5

    def test_clear_slot_out_of_range(self, make_session) -> None:
        session = make_session("long")
        with pytest.raises(IndexError):
            session.clear_slot(3)

    def test_clear_empty_slot(self, make_session) -> None:
        session = make_session("long")
        assert session.clear_slot(0) is False

    def test_terminal_items_stay(self, make_session, scheduler, ledger) -> None:
        session = make_session("terminal")
        for _ in range(3):
            _extract_next(session)
        coins = ledger.data.coins

        scheduler.advance(MERGE_DELAY_MS * 10)
        assert session.slots == ("c", "c", "c")
        assert not session.merge_pending
        assert ledger.data.coins == coins

        session.clear_slot(0)
        _extract_next(session)
        assert session.slots == ("c", "c", "c")
        assert session.score == 4


# ── 완료 ──────────────────────────────────────────────────────


class TestCompletion:
    def test_concrete_scenario(self, make_session, scheduler, ledger, bus, events) -> None:
        """목표 3, pool [a]: 3번째 꺼내기에서 완료, 이후 합성도 반영"""
        session = make_session("tiny", bus)

        _extract_next(session)
        assert (session.slots[0], session.score) == ("a", 1)
        _extract_next(session)
        assert (session.slots[1], session.score) == ("a", 2)
        _extract_next(session)
        assert (session.slots[2], session.score) == ("a", 3)

        assert session.state is SessionState.COMPLETED
        assert ledger.data.coins == 100 + 50
        assert ledger.data.stats.total_games_played == 1
        assert session.merge_pending

        scheduler.advance(MERGE_DELAY_MS)

        assert session.score == 8
        assert ledger.data.coins == 100 + 50 + MERGE_BONUS_COINS
        assert session.state is SessionState.COMPLETED
        assert ledger.data.stats.total_games_played == 1

        types = [e.event_type for e in events]
        assert types == [
            EventTypes.ROOM_STARTED,
            EventTypes.ITEM_EXTRACTED,
            EventTypes.ITEM_EXTRACTED,
            EventTypes.ITEM_EXTRACTED,
            EventTypes.ROOM_COMPLETED,
            EventTypes.MERGE_COMPLETED,
        ]

    def test_no_input_after_completion(self, make_session, ledger) -> None:
        session = make_session("tiny")
        for _ in range(3):
            _extract_next(session)
        remaining = len(session.spawned_items)

        assert session.extract(session.spawned_items[0].instance_id) is False
        assert session.clear_slot(0) is False
        assert len(session.spawned_items) == remaining
        assert ledger.data.stats.total_games_played == 1

    def test_last_item_reaches_target(self, tiny_catalog, ledger, scheduler) -> None:
        session = RoomSession(
            "tiny", tiny_catalog, ledger, scheduler, spawner=FixedSpawner(3)
        )
        for _ in range(3):
            _extract_next(session)
        assert session.spawned_items == []
        assert session.state is SessionState.COMPLETED
        assert not session.assist_offered

    def test_pending_merge_completes_after_assist_offer(
        self, tiny_catalog, ledger, scheduler
    ) -> None:
        tiny_catalog.register_room(
            RoomDefinition("five", ("a",), clear_target=5, coin_reward=40)
        )
        session = RoomSession(
            "five", tiny_catalog, ledger, scheduler, spawner=FixedSpawner(3)
        )
        for _ in range(3):
            _extract_next(session)
        assert session.assist_offered

        scheduler.advance(MERGE_DELAY_MS)

        assert session.state is SessionState.COMPLETED
        assert not session.assist_offered
        assert session.score == 8


# ── 소진 / 광고 보조 ─────────────────────────────────────────


class TestExhaustion:
    def test_assist_offered_when_empty(self, make_session, scheduler, bus, events) -> None:
        session = make_session("long", bus)
        _drain(session, scheduler)
        assert session.spawned_items == []
        assert session.assist_offered
        assert session.state is SessionState.PLAYING
        assert EventTypes.ASSIST_OFFERED in [e.event_type for e in events]

    def test_accept_assist(self, make_session, scheduler, ledger) -> None:
        session = make_session("long")
        _drain(session, scheduler)
        score, target, coins = session.score, session.target_score, ledger.data.coins

        assert session.accept_assist() is True

        assert session.state is SessionState.PLAYING
        assert not session.assist_offered
        assert len(session.spawned_items) == 5
        assert all(i.position.z >= ASSIST_Z_OFFSET for i in session.spawned_items)
        assert ledger.data.coins == coins + ASSIST_BONUS_COINS
        assert (session.score, session.target_score) == (score, target)

    def test_assist_offered_again(self, make_session, scheduler) -> None:
        session = make_session("long")
        _drain(session, scheduler)
        session.accept_assist()
        _drain(session, scheduler)
        assert session.assist_offered

    def test_decline_assist_fails(self, make_session, scheduler, ledger) -> None:
        session = make_session("long")
        _drain(session, scheduler)
        games = ledger.data.stats.total_games_played

        assert session.decline_assist() is True
        assert session.state is SessionState.FAILED
        assert not session.assist_offered
        assert ledger.data.stats.total_games_played == games

    def test_assist_intents_without_offer(self, make_session) -> None:
        session = make_session("long")
        assert session.accept_assist() is False
        assert session.decline_assist() is False
        assert session.state is SessionState.PLAYING


# ── 재시작 ────────────────────────────────────────────────────


class TestRestart:
    def test_restart_resets(self, make_session, scheduler, ledger) -> None:
        session = make_session("long")
        _drain(session, scheduler)
        session.decline_assist()

        session.restart()

        assert session.state is SessionState.PLAYING
        assert session.score == 0
        assert session.slots == (None, None, None)
        assert not session.assist_offered
        assert 15 <= len(session.spawned_items) <= 24

    def test_restart_cancels_pending_merge(self, make_session, scheduler, ledger) -> None:
        session = make_session("long")
        for _ in range(3):
            _extract_next(session)
        old_ids = {i.instance_id for i in session.spawned_items}

        session.restart()
        snapshot = ledger.data
        scheduler.advance(MERGE_DELAY_MS)

        assert ledger.data is snapshot
        assert session.score == 0
        assert old_ids.isdisjoint(i.instance_id for i in session.spawned_items)

    def test_collection_survives_restart(self, make_session, ledger) -> None:
        session = make_session("long")
        _extract_next(session)
        session.restart()
        assert ledger.collected_count("a") == 1

    def test_dispose_cancels_pending_merge(self, make_session, scheduler, ledger) -> None:
        session = make_session("long")
        for _ in range(3):
            _extract_next(session)
        session.dispose()
        scheduler.advance(MERGE_DELAY_MS)
        assert ledger.collected_count("b") == 0
