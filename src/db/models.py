"""SQLAlchemy declarative base for all ORM models."""

from sqlalchemy import BigInteger, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import JSON


class Base(DeclarativeBase):
    """Base class for all database models."""


class PlayerDataModel(Base):
    """ORM model for persisted player data (PlayerData)."""

    __tablename__ = "player_data"

    player_id: Mapped[str] = mapped_column(String, primary_key=True)
    coins: Mapped[int] = mapped_column(Integer, default=100)
    unlocked_rooms: Mapped[list] = mapped_column(JSON, default=list)
    collected_items: Mapped[dict] = mapped_column(JSON, default=dict)  # {item_id: count}
    stats: Mapped[dict] = mapped_column(JSON, default=dict)
    settings: Mapped[dict] = mapped_column(JSON, default=dict)
    last_play_time: Mapped[int] = mapped_column(BigInteger, default=0)  # epoch ms
