"""
Centralised settings loader (pydantic-settings).

Every field can be overridden by the upper-case environment variable of the
same name, or from a local `.env` file.
"""

from __future__ import annotations
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# ------------------------------------------------------------------ #
#  Master settings model
# ------------------------------------------------------------------ #
class _Settings(BaseSettings):
    # ─── runtime / DB / auth ─────────────────────────────────────────
    env_name: str = "local"
    database_url: str = "sqlite+aiosqlite:///./meal_planner.db"
    jwt_secret: str = "changeme"
    jwt_ttl_minutes: int = Field(60 * 24, ge=1)
    log_level: str = "INFO"

    # ─── exports ─────────────────────────────────────────────────────
    timezone: str = "UTC"                       # "local" time for due dates
    export_locale: Literal["zh", "en"] = "zh"
    # remembered defaults for JSON list names; empty means "ask the user"
    grocery_list_name: str = ""
    schedule_list_name: str = ""

    model_config = SettingsConfigDict(
        extra="ignore", env_file=".env", env_file_encoding="utf-8"
    )


# ------------------------------------------------------------------ #
#  Cached singleton accessor
# ------------------------------------------------------------------ #
@lru_cache
def _cached() -> _Settings:  # pragma: no cover
    return _Settings()  # type: ignore[call-arg]


settings: _Settings = _cached()
