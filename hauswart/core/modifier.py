"""
Hauswart — Modifier configuration.

Modifier.json tells the codec how a task's SUMMARY and DESCRIPTION are laid
out: which delimiter separates subtasks, which symbols mark their status, and
which named fields the summary carries. The file is validated once per load
and re-read only when its modification time changes.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


class ModifierConfig(BaseModel):
    """Typed, defaulted view of Modifier.json."""

    model_config = ConfigDict(frozen=True)

    description_delimiter: str = "\n"
    hint_separator: str = "##"
    open_locked: str = ".*"
    done_locked: str = ".✓"
    open_unlocked: str = "*"
    done_unlocked: str = "✓"
    summary_delimiter: str = "//"
    summary_fields: tuple[str, ...] = ()

    @field_validator("summary_delimiter")
    @classmethod
    def summary_delimiter_not_empty(cls, v: str) -> str:
        # str.split rejects an empty separator
        if not v:
            logger.warning("Empty summary delimiter in Modifier, using \"//\"")
            return "//"
        return v


# ---------------------------------------------------------------------------
# Raw file shape — every key optional, German names as written by users
# ---------------------------------------------------------------------------


class _StatusPair(BaseModel):
    unlocked: str | None = Field(default=None, alias="Freigegeben")
    locked: str | None = Field(default=None, alias="Gesperrt")


class _SubtaskStatus(BaseModel):
    open: _StatusPair = Field(default_factory=_StatusPair, alias="NichtBegonnen")
    done: _StatusPair = Field(default_factory=_StatusPair, alias="Erledigt")


class _DescriptionSection(BaseModel):
    delimiter: str | None = Field(default=None, alias="Trennzeichen")
    hint_separator: str | None = Field(default=None, alias="HinweisTrennzeichen")
    status: _SubtaskStatus = Field(
        default_factory=_SubtaskStatus, alias="UnterAufgabenStatus"
    )


class _SummarySection(BaseModel):
    delimiter: str | None = Field(default=None, alias="Trennzeichen")
    field_names: list[str] | None = Field(default=None, alias="Inhalt")


class _ModifierSection(BaseModel):
    description: _DescriptionSection = Field(
        default_factory=_DescriptionSection, alias="Description"
    )
    summary: _SummarySection = Field(default_factory=_SummarySection, alias="Summary")


class _ModifierFile(BaseModel):
    modifier: _ModifierSection = Field(default_factory=_ModifierSection, alias="Modifier")


def modifier_from_dict(data: dict) -> ModifierConfig:
    """Build a ModifierConfig from the parsed JSON document.

    Missing or null keys fall back to the defaults; empty strings are kept
    (an empty HinweisTrennzeichen disables hints), except for the summary
    delimiter, which falls back to "//".
    """
    section = _ModifierFile.model_validate(data).modifier
    desc = section.description
    values = {
        "description_delimiter": desc.delimiter,
        "hint_separator": desc.hint_separator,
        "open_locked": desc.status.open.locked,
        "done_locked": desc.status.done.locked,
        "open_unlocked": desc.status.open.unlocked,
        "done_unlocked": desc.status.done.unlocked,
        "summary_delimiter": section.summary.delimiter,
        "summary_fields": (
            tuple(section.summary.field_names)
            if section.summary.field_names is not None
            else None
        ),
    }
    return ModifierConfig(**{k: v for k, v in values.items() if v is not None})


def load_modifier(path: str | Path) -> ModifierConfig:
    """Read and validate a Modifier.json file."""
    content = Path(path).read_text(encoding="utf-8")
    return modifier_from_dict(json.loads(content))


class ModifierSource:
    """Owns the current ModifierConfig and reloads it when the file changes.

    A source created without a path (or via ``from_config``) never reloads.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self._path = Path(path) if path is not None else None
        self._config = ModifierConfig()
        self._mtime: int | None = None
        self.refresh_if_stale(force=True)

    @classmethod
    def from_config(cls, config: ModifierConfig) -> ModifierSource:
        source = cls(None)
        source._config = config
        return source

    @property
    def config(self) -> ModifierConfig:
        self.refresh_if_stale()
        return self._config

    def refresh_if_stale(self, force: bool = False) -> bool:
        """Reload the file if its mtime changed. Returns True on reload."""
        if self._path is None:
            return False

        try:
            mtime: int | None = os.stat(self._path).st_mtime_ns
        except FileNotFoundError:
            mtime = None

        if not force and mtime == self._mtime:
            return False

        if mtime is None:
            logger.warning("Modifier file %s not found, using defaults", self._path)
            config = ModifierConfig()
        else:
            config = load_modifier(self._path)
            logger.info("Modifier configuration loaded from %s", self._path)

        self._config = config
        self._mtime = mtime
        return True
