"""수집 원장 Core: 순수 Python, DB 무관"""

from .ledger import CollectionLedger, completion_rate
from .models import PlayerData, PlayerSettings, PlayerStats

__all__ = [
    "CollectionLedger",
    "completion_rate",
    "PlayerData",
    "PlayerSettings",
    "PlayerStats",
]
