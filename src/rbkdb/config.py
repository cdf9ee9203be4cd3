"""
config.py — pydantic-settings Settings class.

All environment variables for rbkdb are declared here, prefixed with
RBK_DB_ (e.g. RBK_DB_DATABASE, RBK_DB_LOG_LEVEL).

Usage:
    from rbkdb.config import settings
    print(settings.rebrickable_base_url)
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _find_dotenv() -> Path | None:
    """Walk up from CWD to find the nearest .env file."""
    current = Path.cwd()
    for parent in [current, *current.parents]:
        candidate = parent / ".env"
        if candidate.is_file():
            return candidate
    return None


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="RBK_DB_",
        env_file=_find_dotenv() or ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Data source
    # -------------------------------------------------------------------------
    rebrickable_base_url: str = Field(default="https://cdn.rebrickable.com")
    download_concurrency: int = Field(default=4, ge=1)
    # None disables httpx timeouts; the CDN files are large.
    http_timeout: float | None = Field(default=None)
    chunk_size: int = Field(default=64 * 1024, ge=1)

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------
    database: Path = Field(default=Path("rebrickable.db"))

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO"
    )
    log_format: Literal["json", "console"] = Field(default="console")

    @field_validator("rebrickable_base_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/") if isinstance(v, str) else v

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


# ---------------------------------------------------------------------------
# Module-level singleton — import this everywhere
# ---------------------------------------------------------------------------
settings = Settings()
