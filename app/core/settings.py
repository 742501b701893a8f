"""
Service settings.

Loaded from environment variables prefixed with ``REWARDS_`` using
pydantic-settings, e.g. ``REWARDS_DATA_DIR=/srv/rewards/data``.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="REWARDS_", extra="ignore")

    data_dir: Path = DEFAULT_DATA_DIR
    customers_file: str = "customers.json"
    transactions_file: str = "transactions.json"
    transactions_per_page: int = Field(default=10, ge=1)
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unsupported log level: {value}")
        return level

    @property
    def customers_path(self) -> Path:
        return self.data_dir / self.customers_file

    @property
    def transactions_path(self) -> Path:
        return self.data_dir / self.transactions_file


@lru_cache
def get_settings() -> Settings:
    return Settings()
