"""Runtime configuration using Pydantic Settings.

Values come from ``IMS_``-prefixed environment variables or a ``.env``
file in the working directory.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):

    model_config = SettingsConfigDict(
        env_prefix="IMS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    data_dir: Path = Field(default=Path("data"))
    log_level: str = Field(default="WARNING")
    log_file: Optional[Path] = Field(default=None)

    currency: str = Field(default="INR", min_length=3, max_length=3)
    expiry_window_days: int = Field(default=30, ge=0)
    default_valuation_method: str = Field(default="fifo")

    @field_validator("default_valuation_method")
    @classmethod
    def _known_method(cls, value: str) -> str:
        value = value.lower()
        if value not in ("fifo", "lifo", "wa"):
            raise ValueError("default_valuation_method must be fifo, lifo or wa")
        return value

    @field_validator("currency")
    @classmethod
    def _upper_currency(cls, value: str) -> str:
        return value.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings()
