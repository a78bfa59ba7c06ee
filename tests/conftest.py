"""Shared test fixtures."""

import random
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from src.core.catalog.models import ItemDefinition, Rarity, RoomDefinition
from src.core.catalog.registry import Catalog
from src.core.collection.ledger import CollectionLedger
from src.core.collection.models import PlayerData
from src.core.event_bus import EventBus
from src.core.room.session import RoomSession
from src.core.room.spawner import Spawner
from src.core.room.timer import ManualScheduler
from src.db.database import get_db
from src.db.models import Base
from src.main import app

CATALOG_PATH = Path("src/data/catalog.json")

TEST_ENGINE = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
Base.metadata.create_all(bind=TEST_ENGINE)
TestSession = sessionmaker(bind=TEST_ENGINE, autocommit=False, autoflush=False)


def _override_get_db():
    db = TestSession()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = _override_get_db


@pytest.fixture()
def client() -> TestClient:
    """FastAPI TestClient wired to an in-memory SQLite database."""
    return TestClient(app)


@pytest.fixture()
def db_session() -> Session:
    """인메모리 SQLite 세션. 테스트마다 테이블 초기화."""
    Base.metadata.drop_all(bind=TEST_ENGINE)
    Base.metadata.create_all(bind=TEST_ENGINE)
    session = TestSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def catalog() -> Catalog:
    """src/data/catalog.json 전체"""
    cat = Catalog()
    cat.load_from_json(CATALOG_PATH)
    cat.validate()
    return cat


@pytest.fixture()
def tiny_catalog() -> Catalog:
    """a → b → c 체인 1개.

    - tiny: pool [a], 목표 3
    - long: pool [a], 목표 100 (완료 없이 합성만 관찰)
    - terminal: pool [c], 목표 10
    """
    cat = Catalog()
    cat.register_item(ItemDefinition("a", 1, Rarity.COMMON, merge_to="b"))
    cat.register_item(ItemDefinition("b", 2, Rarity.RARE, merge_to="c"))
    cat.register_item(ItemDefinition("c", 3, Rarity.LEGENDARY))
    cat.register_room(RoomDefinition("tiny", ("a",), clear_target=3, coin_reward=50))
    cat.register_room(RoomDefinition("long", ("a",), clear_target=100, coin_reward=50))
    cat.register_room(
        RoomDefinition("terminal", ("c",), clear_target=10, coin_reward=30)
    )
    cat.validate()
    return cat


@pytest.fixture()
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture()
def ledger(tiny_catalog: Catalog) -> CollectionLedger:
    return CollectionLedger(PlayerData(), tiny_catalog.item_count())


@pytest.fixture()
def make_session(tiny_catalog, ledger, scheduler):
    """make_session(room_id, bus=None) → RoomSession (seed 고정)"""

    def _make(room_id: str = "tiny", bus: EventBus | None = None) -> RoomSession:
        return RoomSession(
            room_id,
            tiny_catalog,
            ledger,
            scheduler,
            spawner=Spawner(random.Random(7)),
            event_bus=bus,
        )

    return _make
