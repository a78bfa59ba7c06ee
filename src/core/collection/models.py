"""플레이어 데이터 모델: 불변 스냅샷

모든 변경은 새 PlayerData를 반환한다 (ledger.py 참조).
collected_items / unlocked_rooms는 제자리 수정 금지.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

DEFAULT_COINS = 100
DEFAULT_UNLOCKED_ROOMS: tuple[str, ...] = ("starter-room",)


@dataclass(frozen=True)
class PlayerStats:
    """단조 증가 카운터"""

    total_items_collected: int = 0
    total_games_played: int = 0
    total_coins_earned: int = 0


@dataclass(frozen=True)
class PlayerSettings:
    sound_enabled: bool = True
    music_enabled: bool = True


@dataclass(frozen=True)
class PlayerData:
    """저장 단위. PlayerDataStore가 load/save."""

    coins: int = DEFAULT_COINS
    unlocked_rooms: tuple[str, ...] = DEFAULT_UNLOCKED_ROOMS
    collected_items: dict[str, int] = field(default_factory=dict)  # {item_id: count}
    stats: PlayerStats = field(default_factory=PlayerStats)
    settings: PlayerSettings = field(default_factory=PlayerSettings)
    last_play_time: int = 0  # epoch ms

    def to_dict(self) -> dict[str, Any]:
        return {
            "coins": self.coins,
            "unlocked_rooms": list(self.unlocked_rooms),
            "collected_items": dict(self.collected_items),
            "stats": {
                "total_items_collected": self.stats.total_items_collected,
                "total_games_played": self.stats.total_games_played,
                "total_coins_earned": self.stats.total_coins_earned,
            },
            "settings": {
                "sound_enabled": self.settings.sound_enabled,
                "music_enabled": self.settings.music_enabled,
            },
            "last_play_time": self.last_play_time,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PlayerData":
        """저장된 값을 기본값 위에 병합. 누락 필드는 기본값 유지."""
        default = cls()
        stats = data.get("stats") or {}
        settings = data.get("settings") or {}
        return cls(
            coins=int(data.get("coins", default.coins)),
            unlocked_rooms=tuple(data.get("unlocked_rooms", default.unlocked_rooms)),
            collected_items={
                str(k): int(v) for k, v in (data.get("collected_items") or {}).items()
            },
            stats=PlayerStats(
                total_items_collected=int(stats.get("total_items_collected", 0)),
                total_games_played=int(stats.get("total_games_played", 0)),
                total_coins_earned=int(stats.get("total_coins_earned", 0)),
            ),
            settings=PlayerSettings(
                sound_enabled=bool(settings.get("sound_enabled", True)),
                music_enabled=bool(settings.get("music_enabled", True)),
            ),
            last_play_time=int(data.get("last_play_time", default.last_play_time)),
        )
