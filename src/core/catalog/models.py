"""카탈로그 도메인 모델 (DB 무관, 불변)"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

MAX_TIER = 3


class Rarity(str, Enum):
    COMMON = "common"
    RARE = "rare"
    LEGENDARY = "legendary"


@dataclass(frozen=True)
class ItemDefinition:
    """아이템 정의: catalog.json에서 로드."""

    item_id: str  # "glowing-bottle"
    tier: int  # 1~3
    rarity: Rarity
    merge_to: Optional[str] = None  # tier 3은 None (최종 단계)

    # 표시용
    name: str = ""
    description: str = ""
    image: str = ""

    @property
    def is_terminal(self) -> bool:
        return self.merge_to is None


@dataclass(frozen=True)
class RoomDefinition:
    """방 정의: item_pool에서 무작위 추출"""

    room_id: str
    item_pool: tuple[str, ...]  # frozen이므로 tuple 사용, 중복 허용
    clear_target: int
    coin_reward: int
    unlock_cost: int = 0

    # 표시용
    name: str = ""
    description: str = ""
    background: str = ""
