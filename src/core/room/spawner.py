"""방 아이템 배치 생성

item_pool에서 복원 추출. 위치 값은 표시용이며 게임 규칙과 무관.
"""

from __future__ import annotations

import random
import uuid
from dataclasses import dataclass
from typing import Optional

from src.core.catalog.models import RoomDefinition

INITIAL_MIN_COUNT = 15
INITIAL_MAX_COUNT = 24
ASSIST_COUNT = 5
ASSIST_Z_OFFSET = 1000  # 초기 배치보다 항상 위에 렌더링

X_RANGE = (10.0, 90.0)  # 뷰포트 %
Y_RANGE = (10.0, 80.0)
SCALE_RANGE = (0.8, 1.2)


@dataclass(frozen=True)
class Position:
    x: float
    y: float
    z: int
    rotation: float
    scale: float


@dataclass(frozen=True)
class PlacedItem:
    """방에 놓인 아이템 1개. instance_id는 재사용되지 않는다."""

    item_id: str
    instance_id: str
    position: Position


class Spawner:
    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()

    def generate(
        self, room: RoomDefinition, count: int, z_offset: int = 0
    ) -> list[PlacedItem]:
        """count개 생성. z = z_offset + 생성 순번."""
        items: list[PlacedItem] = []
        for i in range(count):
            item_id = self._rng.choice(room.item_pool)
            items.append(
                PlacedItem(
                    item_id=item_id,
                    instance_id=uuid.uuid4().hex,
                    position=Position(
                        x=self._rng.uniform(*X_RANGE),
                        y=self._rng.uniform(*Y_RANGE),
                        z=z_offset + i,
                        rotation=self._rng.random() * 360,
                        scale=self._rng.uniform(*SCALE_RANGE),
                    ),
                )
            )
        return items

    def initial(self, room: RoomDefinition) -> list[PlacedItem]:
        count = self._rng.randint(INITIAL_MIN_COUNT, INITIAL_MAX_COUNT)
        return self.generate(room, count)

    def assist(self, room: RoomDefinition) -> list[PlacedItem]:
        return self.generate(room, ASSIST_COUNT, z_offset=ASSIST_Z_OFFSET)
