"""
Room Session - 방 1회 플레이 상태 머신
=====================================

PLAYING → COMPLETED | FAILED (종료 상태), restart()로 새 PLAYING.
assist_offered는 상태가 아니라 PLAYING 위의 오버레이 플래그.

처리 순서 (extract):
1. 방에서 제거 + 수집 기록
2. 빈 슬롯이 있으면 배치 + 점수 +1
3. 합성 판정 (지연 예약)
4. 완료 판정 → 소진 판정 (이 순서 고정: 마지막 아이템으로 목표 달성 시 실패 제안 방지)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from src.core.catalog.registry import Catalog
from src.core.collection.ledger import CollectionLedger
from src.core.event_bus import EventBus, GameEvent
from src.core.event_types import EventTypes
from src.core.logging import get_logger

from .feedback import MERGE_FEEDBACK_DURATION_MS, Feedback, FeedbackBoard
from .merge import (
    MERGE_BONUS_COINS,
    MERGE_DELAY_MS,
    SLOT_COUNT,
    MergeOutcome,
    MergeResolver,
    MergeSlots,
)
from .spawner import PlacedItem, Spawner
from .timer import Scheduler

logger = get_logger(__name__)

ASSIST_BONUS_COINS = 20
EXTRACT_SCORE_DELTA = 1


class SessionState(str, Enum):
    PLAYING = "playing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class SessionView:
    """표시 계층에 넘기는 읽기 전용 스냅샷"""

    room_id: str
    state: SessionState
    score: int
    target_score: int
    spawned_items: tuple[PlacedItem, ...]
    slots: tuple[Optional[str], ...]
    assist_offered: bool
    merge_pending: bool
    feedback: tuple[Feedback, ...]


class RoomSession:
    """방 세션 오케스트레이터. Spawner + MergeResolver + Ledger 조합."""

    def __init__(
        self,
        room_id: str,
        catalog: Catalog,
        ledger: CollectionLedger,
        scheduler: Scheduler,
        spawner: Optional[Spawner] = None,
        event_bus: Optional[EventBus] = None,
        merge_delay_ms: int = MERGE_DELAY_MS,
        merge_bonus_coins: int = MERGE_BONUS_COINS,
        assist_bonus_coins: int = ASSIST_BONUS_COINS,
    ) -> None:
        # 방/아이템 조회 실패 시 DataIntegrityError → 세션 생성 불가
        self._room = catalog.room_by_id(room_id)
        for item_id in self._room.item_pool:
            catalog.item_by_id(item_id)

        self._ledger = ledger
        self._scheduler = scheduler
        self._spawner = spawner or Spawner()
        self._bus = event_bus
        self._assist_bonus_coins = assist_bonus_coins

        self._slots = MergeSlots()
        self._resolver = MergeResolver(
            catalog,
            ledger,
            scheduler,
            on_merged=self._on_merged,
            delay_ms=merge_delay_ms,
            bonus_coins=merge_bonus_coins,
        )
        self._feedback = FeedbackBoard()

        self._spawned: dict[str, PlacedItem] = {}
        self._state = SessionState.PLAYING
        self._score = 0
        self._target_score = self._room.clear_target
        self._assist_offered = False

        self.initialize()

    # === 조회 ===

    @property
    def room_id(self) -> str:
        return self._room.room_id

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def score(self) -> int:
        return self._score

    @property
    def target_score(self) -> int:
        return self._target_score

    @property
    def assist_offered(self) -> bool:
        return self._assist_offered

    @property
    def merge_pending(self) -> bool:
        return self._resolver.pending

    @property
    def slots(self) -> tuple[Optional[str], ...]:
        return self._slots.contents()

    @property
    def spawned_items(self) -> list[PlacedItem]:
        return list(self._spawned.values())

    def view(self) -> SessionView:
        return SessionView(
            room_id=self.room_id,
            state=self._state,
            score=self._score,
            target_score=self._target_score,
            spawned_items=tuple(self._spawned.values()),
            slots=self._slots.contents(),
            assist_offered=self._assist_offered,
            merge_pending=self._resolver.pending,
            feedback=tuple(self._feedback.active(self._scheduler.now_ms())),
        )

    # === 생명주기 ===

    def initialize(self) -> None:
        """점수/슬롯 초기화 + 초기 배치. PLAYING 진입."""
        self._resolver.cancel()
        self._slots.clear_all()
        self._feedback.clear()
        self._score = 0
        self._target_score = self._room.clear_target
        self._state = SessionState.PLAYING
        self._assist_offered = False
        self._spawned = {
            item.instance_id: item for item in self._spawner.initial(self._room)
        }

        logger.info(
            "Room started: %s (%d items, target=%d)",
            self.room_id,
            len(self._spawned),
            self._target_score,
        )
        self._emit(
            EventTypes.ROOM_STARTED,
            {"spawned": len(self._spawned), "target_score": self._target_score},
        )

    def restart(self) -> None:
        self.initialize()

    def dispose(self) -> None:
        """방 나가기. 대기 중인 합성 취소."""
        self._resolver.cancel()

    # === 플레이어 입력 ===

    def extract(self, instance_id: str) -> bool:
        """아이템 꺼내기. 반환: 처리 여부 (이미 없는 아이템이면 False)."""
        if self._state is not SessionState.PLAYING:
            logger.debug("Extract ignored, session is %s", self._state.value)
            return False

        item = self._spawned.pop(instance_id, None)
        if item is None:
            logger.debug("Extract ignored, stale instance: %s", instance_id)
            return False

        self._ledger.record_collected(item.item_id)
        slot_index = self._slots.place(item.item_id)

        if slot_index is None:
            logger.info("Slots full, %s collected but not placed", item.item_id)
            self._emit(
                EventTypes.ITEM_DISCARDED,
                {"item_id": item.item_id, "instance_id": instance_id},
            )
        else:
            self._score += EXTRACT_SCORE_DELTA
            self._feedback.push(
                f"+{EXTRACT_SCORE_DELTA}",
                self._scheduler.now_ms(),
                x=item.position.x,
                y=item.position.y,
            )
            self._emit(
                EventTypes.ITEM_EXTRACTED,
                {
                    "item_id": item.item_id,
                    "instance_id": instance_id,
                    "slot": slot_index,
                    "score": self._score,
                },
            )

        self._resolver.evaluate(self._slots)
        self._check_completion()
        self._check_exhaustion()
        return True

    def clear_slot(self, index: int) -> bool:
        """슬롯 비우기. 범위 밖 index는 IndexError. 반환: 비운 아이템이 있었는지."""
        if not 0 <= index < SLOT_COUNT:
            raise IndexError(f"slot index out of range: {index}")
        if self._state is not SessionState.PLAYING:
            return False

        removed = self._slots.clear(index)
        if removed is None:
            return False

        self._resolver.evaluate(self._slots)
        self._emit(EventTypes.SLOT_CLEARED, {"slot": index, "item_id": removed})
        return True

    def accept_assist(self) -> bool:
        """광고 보조 수락: 아이템 5개 추가 + 보너스 코인."""
        if not self._assist_offered:
            logger.warning("accept_assist ignored, no assist offer: %s", self.room_id)
            return False

        self._assist_offered = False
        extra = self._spawner.assist(self._room)
        for item in extra:
            self._spawned[item.instance_id] = item
        self._ledger.add_coins(self._assist_bonus_coins)

        logger.info(
            "Assist accepted: %s (+%d items, +%d coins)",
            self.room_id,
            len(extra),
            self._assist_bonus_coins,
        )
        self._emit(
            EventTypes.ASSIST_ACCEPTED,
            {"added": len(extra), "bonus_coins": self._assist_bonus_coins},
        )
        return True

    def decline_assist(self) -> bool:
        """광고 보조 거절 → FAILED"""
        if not self._assist_offered:
            logger.warning("decline_assist ignored, no assist offer: %s", self.room_id)
            return False

        self._assist_offered = False
        self._state = SessionState.FAILED
        logger.info(
            "Room failed: %s (score %d/%d)",
            self.room_id,
            self._score,
            self._target_score,
        )
        self._emit(
            EventTypes.ROOM_FAILED,
            {"score": self._score, "target_score": self._target_score},
        )
        return True

    # === 판정 ===

    def _on_merged(self, outcome: MergeOutcome) -> None:
        # 완료 후에도 합성 점수는 반영한다 (합성은 세션 상태와 독립)
        self._score += outcome.score_delta
        self._feedback.push(
            f"Merged! +{outcome.bonus_coins} coins",
            self._scheduler.now_ms(),
            y=90.0,
            duration_ms=MERGE_FEEDBACK_DURATION_MS,
            color="text-yellow-400",
        )
        self._emit(
            EventTypes.MERGE_COMPLETED,
            {
                "source_item_id": outcome.source_item_id,
                "result_item_id": outcome.result_item_id,
                "bonus_coins": outcome.bonus_coins,
                "score": self._score,
            },
        )
        self._check_completion()

    def _check_completion(self) -> None:
        if self._state is not SessionState.PLAYING:
            return
        if self._score < self._target_score:
            return

        self._state = SessionState.COMPLETED
        self._assist_offered = False
        self._ledger.add_coins(self._room.coin_reward)
        self._ledger.record_game_played()

        logger.info(
            "Room completed: %s (score %d/%d, +%d coins)",
            self.room_id,
            self._score,
            self._target_score,
            self._room.coin_reward,
        )
        self._emit(
            EventTypes.ROOM_COMPLETED,
            {"score": self._score, "coin_reward": self._room.coin_reward},
        )

    def _check_exhaustion(self) -> None:
        if self._state is not SessionState.PLAYING or self._assist_offered:
            return
        if self._spawned or self._score >= self._target_score:
            return

        self._assist_offered = True
        logger.info(
            "Assist offered: %s (score %d/%d)",
            self.room_id,
            self._score,
            self._target_score,
        )
        self._emit(
            EventTypes.ASSIST_OFFERED,
            {"score": self._score, "target_score": self._target_score},
        )

    def _emit(self, event_type: str, data: dict[str, Any]) -> None:
        if self._bus is None:
            return
        self._bus.emit(
            GameEvent(
                event_type=event_type,
                data={"room_id": self.room_id, **data},
                source="room_session",
            )
        )
