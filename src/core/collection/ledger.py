"""수집 원장: 수집/코인/통계 갱신

순수 함수는 PlayerData를 받아 새 PlayerData를 반환한다.
CollectionLedger는 최신 스냅샷을 보관하고 호출 순서대로 적용한다.
수집 기록은 증가만 한다 (삭제 없음).
"""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import Callable, List, Optional

from .models import PlayerData, PlayerSettings

logger = logging.getLogger(__name__)

LedgerListener = Callable[[PlayerData], None]


# === 순수 함수 ===


def record_collected(data: PlayerData, item_id: str) -> PlayerData:
    """item_id 수집 +1, total_items_collected +1"""
    collected = dict(data.collected_items)
    collected[item_id] = collected.get(item_id, 0) + 1
    return replace(
        data,
        collected_items=collected,
        stats=replace(
            data.stats, total_items_collected=data.stats.total_items_collected + 1
        ),
    )


def add_coins(data: PlayerData, amount: int) -> PlayerData:
    """코인 지급. total_coins_earned도 함께 증가."""
    if amount < 0:
        raise ValueError(f"amount must be >= 0: {amount}")
    return replace(
        data,
        coins=data.coins + amount,
        stats=replace(
            data.stats, total_coins_earned=data.stats.total_coins_earned + amount
        ),
    )


def spend_coins(data: PlayerData, amount: int) -> Optional[PlayerData]:
    """코인 소비. 잔액 부족 시 None. 통계는 건드리지 않는다."""
    if amount < 0:
        raise ValueError(f"amount must be >= 0: {amount}")
    if data.coins < amount:
        return None
    return replace(data, coins=data.coins - amount)


def record_game_played(data: PlayerData) -> PlayerData:
    return replace(
        data,
        stats=replace(data.stats, total_games_played=data.stats.total_games_played + 1),
    )


def is_room_unlocked(data: PlayerData, room_id: str) -> bool:
    return room_id in data.unlocked_rooms


def unlock_room(data: PlayerData, room_id: str) -> PlayerData:
    if is_room_unlocked(data, room_id):
        return data
    return replace(data, unlocked_rooms=data.unlocked_rooms + (room_id,))


def update_settings(
    data: PlayerData,
    sound_enabled: Optional[bool] = None,
    music_enabled: Optional[bool] = None,
) -> PlayerData:
    current = data.settings
    return replace(
        data,
        settings=PlayerSettings(
            sound_enabled=current.sound_enabled
            if sound_enabled is None
            else sound_enabled,
            music_enabled=current.music_enabled
            if music_enabled is None
            else music_enabled,
        ),
    )


def touch(data: PlayerData, now_ms: int) -> PlayerData:
    return replace(data, last_play_time=now_ms)


def completion_rate(data: PlayerData, total_items: int) -> int:
    """수집률 (%). 카탈로그가 비어 있으면 0."""
    if total_items <= 0:
        return 0
    # 0.5는 올림
    return math.floor(100 * len(data.collected_items) / total_items + 0.5)


# === 상태 보관 ===


class CollectionLedger:
    """
    플레이어 1명의 최신 PlayerData 보관.
    세션 간에 공유되는 유일한 가변 자원. 모든 변경 후 구독자에게 통지.
    """

    def __init__(self, data: PlayerData, total_items: int) -> None:
        self._data = data
        self._total_items = total_items
        self._listeners: List[LedgerListener] = []

    @property
    def data(self) -> PlayerData:
        return self._data

    def subscribe(self, listener: LedgerListener) -> None:
        """변경 통지 구독 (저장 정책 등)"""
        self._listeners.append(listener)

    def record_collected(self, item_id: str) -> None:
        self._apply(record_collected(self._data, item_id))

    def add_coins(self, amount: int) -> None:
        self._apply(add_coins(self._data, amount))

    def spend_coins(self, amount: int) -> bool:
        updated = spend_coins(self._data, amount)
        if updated is None:
            logger.info("Not enough coins: have %d, need %d", self._data.coins, amount)
            return False
        self._apply(updated)
        return True

    def record_game_played(self) -> None:
        self._apply(record_game_played(self._data))

    def unlock_room(self, room_id: str) -> None:
        self._apply(unlock_room(self._data, room_id))

    def update_settings(
        self,
        sound_enabled: Optional[bool] = None,
        music_enabled: Optional[bool] = None,
    ) -> None:
        self._apply(update_settings(self._data, sound_enabled, music_enabled))

    def touch(self, now_ms: int) -> None:
        self._apply(touch(self._data, now_ms))

    def completion_rate(self) -> int:
        return completion_rate(self._data, self._total_items)

    def collected_count(self, item_id: str) -> int:
        return self._data.collected_items.get(item_id, 0)

    def _apply(self, updated: PlayerData) -> None:
        if updated is self._data:
            return
        self._data = updated
        for listener in self._listeners:
            listener(updated)
