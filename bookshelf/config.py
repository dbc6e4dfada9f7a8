from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_DB = Path(__file__).resolve().parent.parent / "bookshelf.db"


class Settings(BaseSettings):
    db_path: Path = DEFAULT_DB
    log_level: str = "INFO"
    log_format: str = "plain"

    # Seed sizes for first-run data, matching the app pages.
    shelf_seed_count: int = 20
    transaction_seed_count: int = 15

    model_config = SettingsConfigDict(
        env_prefix="BOOKSHELF_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
