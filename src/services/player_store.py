"""플레이어 데이터 저장소: PlayerData ↔ DB

실패는 로그만 남기고 삼킨다. 세션은 항상 사용 가능한 기본값을 받는다.
"""

from dataclasses import replace

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.core.collection.models import PlayerData
from src.core.logging import get_logger
from src.db.models import PlayerDataModel

logger = get_logger(__name__)


def _model_to_player_data(model: PlayerDataModel) -> PlayerData:
    """PlayerDataModel → PlayerData (저장값을 기본값 위에 병합)"""
    return PlayerData.from_dict(
        {
            "coins": model.coins,
            "unlocked_rooms": model.unlocked_rooms or list(PlayerData().unlocked_rooms),
            "collected_items": model.collected_items or {},
            "stats": model.stats or {},
            "settings": model.settings or {},
            "last_play_time": model.last_play_time or 0,
        }
    )


def _apply_to_model(model: PlayerDataModel, data: PlayerData) -> None:
    raw = data.to_dict()
    model.coins = raw["coins"]
    model.unlocked_rooms = raw["unlocked_rooms"]
    model.collected_items = raw["collected_items"]
    model.stats = raw["stats"]
    model.settings = raw["settings"]
    model.last_play_time = raw["last_play_time"]


class PlayerDataStore:
    """load() / save() 두 연산만 제공"""

    def __init__(self, db: Session) -> None:
        self._db = db

    def load(self, player_id: str, now_ms: int = 0) -> PlayerData:
        """저장된 데이터 반환. 없거나 읽기 실패 시 기본값."""
        try:
            model = (
                self._db.query(PlayerDataModel)
                .filter(PlayerDataModel.player_id == player_id)
                .first()
            )
            if model is not None:
                return _model_to_player_data(model)
        except (SQLAlchemyError, TypeError, ValueError) as e:
            self._db.rollback()
            logger.warning("Failed to load player data: %s (%s)", player_id, e)

        logger.info("New player data: %s", player_id)
        return replace(PlayerData(), last_play_time=now_ms)

    def save(self, player_id: str, data: PlayerData) -> bool:
        """반환: 성공 여부. 실패해도 예외를 올리지 않는다."""
        try:
            model = (
                self._db.query(PlayerDataModel)
                .filter(PlayerDataModel.player_id == player_id)
                .first()
            )
            if model is None:
                model = PlayerDataModel(player_id=player_id)
                self._db.add(model)
            _apply_to_model(model, data)
            self._db.commit()
            return True
        except SQLAlchemyError as e:
            self._db.rollback()
            logger.warning("Failed to save player data: %s (%s)", player_id, e)
            return False
