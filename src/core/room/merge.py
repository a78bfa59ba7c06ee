"""합성 슬롯 + 합성 판정

슬롯 3개가 모두 같은 item_id로 차면 MERGE_DELAY_MS 후 상위 티어로 합성.
지연 중 슬롯이 비워지면 예약된 합성은 취소된다.
최종 티어(merge_to 없음)는 합성하지 않고 슬롯을 그대로 둔다.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from src.core.catalog.registry import Catalog
from src.core.collection.ledger import CollectionLedger
from src.core.logging import get_logger

from .timer import Scheduler, TimerToken

logger = get_logger(__name__)

SLOT_COUNT = 3
MERGE_DELAY_MS = 500  # 연출용 지연
MERGE_BONUS_COINS = 10
MERGE_SCORE_DELTA = 5


class MergeSlots:
    """고정 길이 3. 각 슬롯은 비어 있거나 item_id 1개."""

    def __init__(self) -> None:
        self._slots: list[Optional[str]] = [None] * SLOT_COUNT

    def __getitem__(self, index: int) -> Optional[str]:
        return self._slots[index]

    def contents(self) -> tuple[Optional[str], ...]:
        return tuple(self._slots)

    def first_empty(self) -> Optional[int]:
        for index, item_id in enumerate(self._slots):
            if item_id is None:
                return index
        return None

    def place(self, item_id: str) -> Optional[int]:
        """가장 앞의 빈 슬롯에 배치. 가득 차 있으면 None."""
        index = self.first_empty()
        if index is not None:
            self._slots[index] = item_id
        return index

    def clear(self, index: int) -> Optional[str]:
        """슬롯 비우기. 반환: 비우기 전 item_id."""
        if not 0 <= index < SLOT_COUNT:
            raise IndexError(f"slot index out of range: {index}")
        removed = self._slots[index]
        self._slots[index] = None
        return removed

    def clear_all(self) -> None:
        self._slots = [None] * SLOT_COUNT

    def is_full(self) -> bool:
        return all(s is not None for s in self._slots)

    def uniform_item(self) -> Optional[str]:
        """3칸 모두 같은 item_id면 그 id, 아니면 None."""
        first = self._slots[0]
        if first is None:
            return None
        if all(s == first for s in self._slots):
            return first
        return None


@dataclass(frozen=True)
class MergeOutcome:
    source_item_id: str
    result_item_id: str
    bonus_coins: int
    score_delta: int


class MergeResolver:
    """
    슬롯 변경 직후 evaluate() 호출.
    예약 토큰을 보관하며, 조건이 깨지면 취소한다.
    """

    def __init__(
        self,
        catalog: Catalog,
        ledger: CollectionLedger,
        scheduler: Scheduler,
        on_merged: Callable[[MergeOutcome], None],
        delay_ms: int = MERGE_DELAY_MS,
        bonus_coins: int = MERGE_BONUS_COINS,
    ) -> None:
        self._catalog = catalog
        self._ledger = ledger
        self._scheduler = scheduler
        self._on_merged = on_merged
        self._delay_ms = delay_ms
        self._bonus_coins = bonus_coins
        self._token: Optional[TimerToken] = None
        self._pending_item: Optional[str] = None
        self._generation = 0

    @property
    def pending(self) -> bool:
        return self._token is not None and self._token.active

    @property
    def pending_item(self) -> Optional[str]:
        return self._pending_item if self.pending else None

    def evaluate(self, slots: MergeSlots) -> bool:
        """합성 조건 판정. 반환: 합성 예약 중 여부."""
        item_id = slots.uniform_item()
        if item_id is None:
            self.cancel()
            return False

        if self.pending and self._pending_item == item_id:
            return True

        item = self._catalog.item_by_id(item_id)
        if item.merge_to is None:
            logger.debug("Terminal item in all slots, no merge: %s", item_id)
            return False

        self.cancel()
        self._generation += 1
        generation = self._generation
        merge_to = item.merge_to
        self._pending_item = item_id
        self._token = self._scheduler.schedule(
            self._delay_ms,
            lambda: self._complete(slots, item_id, merge_to, generation),
        )
        logger.debug("Merge scheduled: 3x %s -> %s", item_id, merge_to)
        return True

    def cancel(self) -> bool:
        """예약된 합성 취소. 반환: 취소 여부."""
        if not self.pending:
            self._token = None
            self._pending_item = None
            return False
        self._token.cancel()
        logger.debug("Merge cancelled: %s", self._pending_item)
        self._token = None
        self._pending_item = None
        self._generation += 1
        return True

    def _complete(
        self, slots: MergeSlots, item_id: str, merge_to: str, generation: int
    ) -> None:
        if generation != self._generation or slots.uniform_item() != item_id:
            logger.warning("Stale merge ignored: %s", item_id)
            return

        self._token = None
        self._pending_item = None
        slots.clear_all()
        self._ledger.record_collected(merge_to)
        self._ledger.add_coins(self._bonus_coins)
        logger.info("Merged 3x %s -> %s (+%d coins)", item_id, merge_to, self._bonus_coins)
        self._on_merged(
            MergeOutcome(
                source_item_id=item_id,
                result_item_id=merge_to,
                bonus_coins=self._bonus_coins,
                score_delta=MERGE_SCORE_DELTA,
            )
        )
