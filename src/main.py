"""FastAPI application entrypoint."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from src.api.game import router as game_router
from src.api.health import router as health_router
from src.config import settings
from src.core.catalog.registry import Catalog
from src.core.event_bus import EventBus
from src.core.logging import get_logger, setup_logging
from src.core.room.timer import AsyncioScheduler
from src.db.database import SessionLocal, init_db
from src.services.game_service import GameService
from src.services.player_store import PlayerDataStore

setup_logging(settings.LOG_LEVEL, sql_echo=settings.SQL_ECHO)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    # DB 테이블 생성
    logger.info("Creating database tables...")
    init_db()
    logger.info("Database tables created.")

    # 카탈로그 로드 (세션 시작 전 완료 필수)
    logger.info("Loading catalog...")
    catalog = Catalog()
    catalog.load_from_json(settings.CATALOG_PATH)
    catalog.validate()
    app.state.catalog = catalog
    logger.info(
        "Catalog loaded (%d items, %d rooms).",
        catalog.item_count(),
        len(catalog.all_rooms()),
    )

    # GameService 초기화
    logger.info("Initializing GameService...")
    event_bus = EventBus()
    db_session = SessionLocal()
    game_service = GameService(
        store=PlayerDataStore(db_session),
        catalog=catalog,
        event_bus=event_bus,
        scheduler=AsyncioScheduler(),
        merge_delay_ms=settings.MERGE_DELAY_MS,
        merge_bonus_coins=settings.MERGE_BONUS_COINS,
        assist_bonus_coins=settings.ASSIST_BONUS_COINS,
    )
    app.state.event_bus = event_bus
    app.state.game_service = game_service
    logger.info("GameService initialized.")

    yield

    # 종료 시 정리
    logger.info("Shutting down...")
    db_session.close()


app = FastAPI(title="Junk Room", lifespan=lifespan)

app.include_router(health_router)
app.include_router(game_router)
