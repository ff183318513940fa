"""
Hauswart — Centralized configuration.

Loads all settings from .env. Every setting has a default, so a bare
checkout runs against the bundled data/ directory.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load .env from project root (one level up from hauswart/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # Task files (one VTODO per file)
    TASKS_DIR: str = "data/tasks"
    TASK_FILE_EXTENSION: str = ".ics"

    # Modifier.json — subtask symbols, delimiters, summary fields
    MODIFIER_PATH: str = "data/config/Modifier.json"

    # StammDaten.json — addresses, persons, buildings, areas
    STAMMDATEN_PATH: str = "data/config/StammDaten.json"

    # Display
    TIMEZONE: str = "Europe/Berlin"

    LOG_LEVEL: str = "INFO"

    @field_validator("TASK_FILE_EXTENSION", mode="before")
    @classmethod
    def parse_extension(cls, v: str) -> str:
        v = v.strip().lower()
        if v and not v.startswith("."):
            v = f".{v}"
        return v or ".ics"

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def parse_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown LOG_LEVEL: {v!r}")
        return level


def _load_settings() -> Settings:
    """Load settings from environment."""
    return Settings(
        TASKS_DIR=os.getenv("TASKS_DIR", "data/tasks"),
        TASK_FILE_EXTENSION=os.getenv("TASK_FILE_EXTENSION", ".ics"),
        MODIFIER_PATH=os.getenv("MODIFIER_PATH", "data/config/Modifier.json"),
        STAMMDATEN_PATH=os.getenv("STAMMDATEN_PATH", "data/config/StammDaten.json"),
        TIMEZONE=os.getenv("TIMEZONE", "Europe/Berlin"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
    )


# Singleton — imported by all other modules as:
#   from hauswart.config import settings
settings = _load_settings()
