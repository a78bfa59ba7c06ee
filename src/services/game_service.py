"""게임 Service: 로비/방 입장/도감, 저장 정책

Service → Core, Service → DB(PlayerDataStore) 허용.
플레이어별 CollectionLedger 1개를 세션 간에 공유하고,
PlayerData가 바뀔 때마다 저장한다.
"""

import random
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from src.core.catalog.models import MAX_TIER, ItemDefinition, RoomDefinition
from src.core.catalog.registry import Catalog, DataIntegrityError
from src.core.collection.ledger import CollectionLedger
from src.core.collection.models import PlayerData
from src.core.event_bus import EventBus, GameEvent
from src.core.event_types import EventTypes
from src.core.logging import get_logger
from src.core.room.merge import MERGE_BONUS_COINS, MERGE_DELAY_MS
from src.core.room.session import ASSIST_BONUS_COINS, RoomSession
from src.core.room.spawner import Spawner
from src.core.room.timer import Scheduler
from src.services.player_store import PlayerDataStore

logger = get_logger(__name__)


@dataclass
class RoomEntryResult:
    """방 입장 결과"""

    success: bool
    message: str  # "ok" | "room_not_found" | "room_locked"
    session: Optional[RoomSession] = None


@dataclass
class CollectionEntry:
    item: ItemDefinition
    count: int

    @property
    def collected(self) -> bool:
        return self.count > 0


@dataclass
class CollectionView:
    """도감 화면용 집계"""

    completion_rate: int
    collected_count: int
    total_count: int
    tiers: dict[int, list[CollectionEntry]] = field(default_factory=dict)


def _now_ms() -> int:
    return int(time.time() * 1000)


class GameService:
    """플레이어 데이터 + 활성 세션 관리"""

    def __init__(
        self,
        store: PlayerDataStore,
        catalog: Catalog,
        event_bus: EventBus,
        scheduler: Scheduler,
        rng: Optional[random.Random] = None,
        merge_delay_ms: int = MERGE_DELAY_MS,
        merge_bonus_coins: int = MERGE_BONUS_COINS,
        assist_bonus_coins: int = ASSIST_BONUS_COINS,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self._store = store
        self._catalog = catalog
        self._bus = event_bus
        self._scheduler = scheduler
        self._spawner = Spawner(rng)
        self._merge_delay_ms = merge_delay_ms
        self._merge_bonus_coins = merge_bonus_coins
        self._assist_bonus_coins = assist_bonus_coins
        self._clock = clock

        self._ledgers: dict[str, CollectionLedger] = {}
        self._sessions: dict[str, RoomSession] = {}

    # === 플레이어 데이터 ===

    def get_ledger(self, player_id: str) -> CollectionLedger:
        """최초 접근 시 저장소에서 로드. 이후 변경마다 저장."""
        ledger = self._ledgers.get(player_id)
        if ledger is None:
            data = self._store.load(player_id, now_ms=self._clock())
            ledger = CollectionLedger(data, self._catalog.item_count())
            ledger.subscribe(lambda d: self._store.save(player_id, d))
            self._ledgers[player_id] = ledger
        return ledger

    def get_player_data(self, player_id: str) -> PlayerData:
        return self.get_ledger(player_id).data

    def update_settings(
        self,
        player_id: str,
        sound_enabled: Optional[bool] = None,
        music_enabled: Optional[bool] = None,
    ) -> PlayerData:
        ledger = self.get_ledger(player_id)
        ledger.update_settings(sound_enabled, music_enabled)
        return ledger.data

    # === 로비 ===

    def list_rooms(self, player_id: str) -> list[tuple[RoomDefinition, bool]]:
        """(방, 해금 여부) 목록. 카탈로그 순서."""
        unlocked = set(self.get_player_data(player_id).unlocked_rooms)
        return [(room, room.room_id in unlocked) for room in self._catalog.all_rooms()]

    def unlock_room(self, player_id: str, room_id: str) -> bool:
        """코인으로 방 해금. 반환: 해금 상태 여부 (이미 해금이면 True)."""
        room = self._catalog.room_by_id(room_id)
        ledger = self.get_ledger(player_id)
        if room_id in ledger.data.unlocked_rooms:
            return True

        if not ledger.spend_coins(room.unlock_cost):
            logger.info("Unlock refused: %s needs %d coins", room_id, room.unlock_cost)
            return False

        ledger.unlock_room(room_id)
        logger.info("Room unlocked: %s by %s", room_id, player_id)
        self._bus.emit(
            GameEvent(
                event_type=EventTypes.ROOM_UNLOCKED,
                data={"player_id": player_id, "room_id": room_id},
                source="game_service",
            )
        )
        return True

    # === 방 세션 ===

    def enter_room(self, player_id: str, room_id: str) -> RoomEntryResult:
        ledger = self.get_ledger(player_id)
        try:
            room = self._catalog.room_by_id(room_id)
        except DataIntegrityError:
            logger.warning("Room not found: %s", room_id)
            return RoomEntryResult(success=False, message="room_not_found")

        if room.room_id not in ledger.data.unlocked_rooms:
            return RoomEntryResult(success=False, message="room_locked")

        self.exit_room(player_id)
        try:
            session = RoomSession(
                room_id,
                self._catalog,
                ledger,
                self._scheduler,
                spawner=self._spawner,
                event_bus=self._bus,
                merge_delay_ms=self._merge_delay_ms,
                merge_bonus_coins=self._merge_bonus_coins,
                assist_bonus_coins=self._assist_bonus_coins,
            )
        except DataIntegrityError as e:
            logger.error("Room data broken: %s (%s)", room_id, e)
            return RoomEntryResult(success=False, message="room_not_found")

        ledger.touch(self._clock())
        self._sessions[player_id] = session
        return RoomEntryResult(success=True, message="ok", session=session)

    def get_session(self, player_id: str) -> Optional[RoomSession]:
        return self._sessions.get(player_id)

    def exit_room(self, player_id: str) -> bool:
        """활성 세션 종료. 반환: 종료한 세션이 있었는지."""
        session = self._sessions.pop(player_id, None)
        if session is None:
            return False
        session.dispose()
        self._bus.emit(
            GameEvent(
                event_type=EventTypes.ROOM_EXITED,
                data={"player_id": player_id, "room_id": session.room_id},
                source="game_service",
            )
        )
        return True

    # === 도감 ===

    def get_collection(self, player_id: str) -> CollectionView:
        ledger = self.get_ledger(player_id)
        collected = ledger.data.collected_items
        tiers = {
            tier: [
                CollectionEntry(item=item, count=collected.get(item.item_id, 0))
                for item in self._catalog.items_by_tier(tier)
            ]
            for tier in range(1, MAX_TIER + 1)
        }
        return CollectionView(
            completion_rate=ledger.completion_rate(),
            collected_count=len(collected),
            total_count=self._catalog.item_count(),
            tiers=tiers,
        )
