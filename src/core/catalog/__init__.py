"""카탈로그 Core: 정적 아이템/방 정의, 순수 Python"""

from .models import MAX_TIER, ItemDefinition, Rarity, RoomDefinition
from .registry import Catalog, DataIntegrityError

__all__ = [
    "MAX_TIER",
    "ItemDefinition",
    "Rarity",
    "RoomDefinition",
    "Catalog",
    "DataIntegrityError",
]
