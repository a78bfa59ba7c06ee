"""Junk Room Core"""
__version__ = "0.1.0"

from src.core.catalog import Catalog, DataIntegrityError, ItemDefinition, Rarity, RoomDefinition
from src.core.collection import CollectionLedger, PlayerData, PlayerSettings, PlayerStats
from src.core.room import (
    AsyncioScheduler,
    ManualScheduler,
    PlacedItem,
    RoomSession,
    SessionState,
    SessionView,
    Spawner,
)

__all__ = [
    "Catalog",
    "DataIntegrityError",
    "ItemDefinition",
    "Rarity",
    "RoomDefinition",
    "CollectionLedger",
    "PlayerData",
    "PlayerSettings",
    "PlayerStats",
    "AsyncioScheduler",
    "ManualScheduler",
    "PlacedItem",
    "RoomSession",
    "SessionState",
    "SessionView",
    "Spawner",
]
