"""카탈로그 저장소: JSON 로드 + 정합성 검증"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from .models import MAX_TIER, ItemDefinition, Rarity, RoomDefinition

logger = logging.getLogger(__name__)


class DataIntegrityError(LookupError):
    """카탈로그에 없는 item/room 참조, 또는 깨진 merge_to 체인."""


class Catalog:
    """
    아이템/방 정의 저장소. 읽기 전용으로 사용한다.
    세션 시작 전에 load_from_json() + validate()가 끝나 있어야 한다.
    """

    def __init__(self) -> None:
        self._items: dict[str, ItemDefinition] = {}
        self._rooms: dict[str, RoomDefinition] = {}

    def load_from_json(self, path: str | Path) -> int:
        """catalog.json 로드. 반환: 로드된 item + room 수.

        {"items": [...], "rooms": [...]} 형식.
        잘못된 항목은 경고 로그 후 건너뛴다.
        """
        path = Path(path)
        with path.open("r", encoding="utf-8") as f:
            raw: dict = json.load(f)

        count = 0
        for raw_item in raw.get("items", []):
            try:
                self.register_item(
                    ItemDefinition(
                        item_id=raw_item["item_id"],
                        tier=int(raw_item["tier"]),
                        rarity=Rarity(raw_item["rarity"]),
                        merge_to=raw_item.get("merge_to"),
                        name=raw_item.get("name", ""),
                        description=raw_item.get("description", ""),
                        image=raw_item.get("image", ""),
                    )
                )
                count += 1
            except (KeyError, ValueError) as e:
                logger.warning(
                    "Failed to load item: %s (%s)", raw_item.get("item_id", "?"), e
                )

        for raw_room in raw.get("rooms", []):
            try:
                self.register_room(
                    RoomDefinition(
                        room_id=raw_room["room_id"],
                        item_pool=tuple(raw_room["item_pool"]),
                        clear_target=int(raw_room["clear_target"]),
                        coin_reward=int(raw_room["coin_reward"]),
                        unlock_cost=int(raw_room.get("unlock_cost", 0)),
                        name=raw_room.get("name", ""),
                        description=raw_room.get("description", ""),
                        background=raw_room.get("background", ""),
                    )
                )
                count += 1
            except (KeyError, ValueError) as e:
                logger.warning(
                    "Failed to load room: %s (%s)", raw_room.get("room_id", "?"), e
                )

        logger.info(
            "Loaded %d items, %d rooms from %s",
            len(self._items),
            len(self._rooms),
            path,
        )
        return count

    def register_item(self, item: ItemDefinition) -> None:
        if not 1 <= item.tier <= MAX_TIER:
            raise ValueError(f"tier out of range: {item.tier}")
        if item.item_id in self._items:
            logger.warning("Overwriting existing item: %s", item.item_id)
        self._items[item.item_id] = item

    def register_room(self, room: RoomDefinition) -> None:
        if not room.item_pool:
            raise ValueError("item_pool must not be empty")
        if room.clear_target <= 0:
            raise ValueError(f"clear_target must be positive: {room.clear_target}")
        if room.coin_reward < 0:
            raise ValueError(f"coin_reward must be >= 0: {room.coin_reward}")
        if room.room_id in self._rooms:
            logger.warning("Overwriting existing room: %s", room.room_id)
        self._rooms[room.room_id] = room

    def validate(self) -> None:
        """merge_to 체인과 item_pool 참조 검증. 실패 시 DataIntegrityError."""
        problems: list[str] = []
        for item in self._items.values():
            if item.merge_to is None:
                continue
            target = self._items.get(item.merge_to)
            if target is None:
                problems.append(f"{item.item_id}: unknown merge_to {item.merge_to}")
            elif target.tier != item.tier + 1:
                problems.append(
                    f"{item.item_id}: merge_to {target.item_id} is tier "
                    f"{target.tier}, expected {item.tier + 1}"
                )
        for room in self._rooms.values():
            for item_id in room.item_pool:
                if item_id not in self._items:
                    problems.append(f"{room.room_id}: unknown pool item {item_id}")

        if problems:
            raise DataIntegrityError("; ".join(problems))

    # === 조회 ===

    def get_item(self, item_id: str) -> Optional[ItemDefinition]:
        """O(1) 조회. 없으면 None."""
        return self._items.get(item_id)

    def get_room(self, room_id: str) -> Optional[RoomDefinition]:
        return self._rooms.get(room_id)

    def item_by_id(self, item_id: str) -> ItemDefinition:
        """없으면 DataIntegrityError."""
        item = self._items.get(item_id)
        if item is None:
            raise DataIntegrityError(f"Item not found: {item_id}")
        return item

    def room_by_id(self, room_id: str) -> RoomDefinition:
        """없으면 DataIntegrityError."""
        room = self._rooms.get(room_id)
        if room is None:
            raise DataIntegrityError(f"Room not found: {room_id}")
        return room

    def all_items(self) -> list[ItemDefinition]:
        return list(self._items.values())

    def all_rooms(self) -> list[RoomDefinition]:
        """등록 순서 유지 (로비 표시 순서)."""
        return list(self._rooms.values())

    def items_by_tier(self, tier: int) -> list[ItemDefinition]:
        return [i for i in self._items.values() if i.tier == tier]

    def item_count(self) -> int:
        """수집률 계산용 전체 아이템 종류 수."""
        return len(self._items)
