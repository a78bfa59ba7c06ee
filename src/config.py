"""Application configuration loaded from environment variables and .env file."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Values are loaded from environment variables first,
    then from a .env file in the project root as fallback.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    DATABASE_URL: str = "sqlite:///./dev.db"
    DEBUG: bool = True
    SQL_ECHO: bool = False
    LOG_LEVEL: str = "INFO"

    # Game data
    CATALOG_PATH: str = "src/data/catalog.json"

    # Room rules
    MERGE_DELAY_MS: int = 500
    MERGE_BONUS_COINS: int = 10
    ASSIST_BONUS_COINS: int = 20


settings = Settings()
