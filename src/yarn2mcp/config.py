"""Application configuration management using Pydantic Settings.

This module defines the `Settings` class, which loads configuration parameters
from environment variables and a `.env` file: where the repository is written,
where the downloaders' dumps live, which legacy MCP version feeds the mixed
export, and extra entries for the name correction table.

The `get_settings` function provides a cached, singleton instance of the
configuration, ensuring consistent settings throughout the application.
"""
from __future__ import annotations

import json
from functools import lru_cache
from typing import Any, Dict

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict as _SettingsConfigDict

from .naming import Corrections, build_corrections


class Settings(BaseSettings):
    """Defines all application configuration parameters."""

    model_config = _SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    OUTPUT_DIR: str = Field(
        default="./maven", description="Root of the Maven repository artifacts are published into"
    )
    CACHE_DIR: str = Field(
        default="./data", description="Directory holding the downloaders' mapping dumps"
    )
    MIXED_VERSION: str = Field(
        default="1.14.3",
        description="Legacy MCP version whose names fill gaps in the mixed export",
    )
    DAILY_RUN_HOUR_UTC: int = Field(
        default=0, ge=0, le=23, description="UTC hour at which the daily snapshot export runs"
    )
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")

    # Use Any type to prevent Pydantic Settings JSON decoding; validator converts to dict[str, str]
    CORRECTIONS: Any = Field(
        default_factory=dict,
        description=(
            "Extra name corrections keyed by SRG name, applied over the built-in table. "
            'Either a JSON object ({"func_1_a": "name"}) or comma-separated '
            "key=value pairs (func_1_a=name,field_2_b=other)."
        ),
    )

    @field_validator("CORRECTIONS", mode="before")
    @classmethod
    def parse_corrections(cls, v: Any) -> Dict[str, str]:
        """Accept a dict, a JSON object string or `key=value` pairs.

        Malformed pairs are skipped rather than rejected.
        """
        if v is None:
            return {}
        if isinstance(v, dict):
            return {str(k): str(val) for k, val in v.items()}
        if not isinstance(v, str) or not v.strip():
            return {}
        text = v.strip()
        if text.startswith("{"):
            parsed = json.loads(text)
            if not isinstance(parsed, dict):
                return {}
            return {str(k): str(val) for k, val in parsed.items()}
        ret: Dict[str, str] = {}
        for pair in text.split(","):
            key, sep, value = pair.partition("=")
            if sep and key.strip() and value.strip():
                ret[key.strip()] = value.strip()
        return ret

    def corrections(self) -> Corrections:
        return build_corrections(self.CORRECTIONS)


@lru_cache(maxsize=1)
def get_settings() -> Settings:  # pragma: no cover - trivial
    """Return a cached, singleton instance of the application settings."""
    return Settings()
