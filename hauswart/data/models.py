"""
Hauswart — Task Models.

One Task per calendar file. The task's DESCRIPTION carries an ordered list
of subtasks, one per line, each prefixed with a status symbol.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class Subtask:
    """A subtask decoded from one DESCRIPTION segment."""

    symbol: str             # matched status prefix, "" if none matched
    done: bool
    unlocked: bool          # False → shown but not editable
    title: str
    hint: str | None = None  # short note after the hint separator
    raw: str = ""           # the segment as found in the file

    def to_input(self) -> SubtaskInput:
        return SubtaskInput(
            title=self.title,
            done=self.done,
            unlocked=self.unlocked,
            hint=self.hint,
        )


@dataclass
class SubtaskInput:
    """Mutable subtask used when rewriting a DESCRIPTION."""

    title: str
    done: bool
    unlocked: bool = True
    hint: str | None = None


@dataclass
class ParsedSummary:
    """SUMMARY split on the configured delimiter.

    ``fields`` maps the configured field names onto ``parts`` by position;
    names beyond the available parts map to "".
    """

    raw: str
    parts: list[str] = field(default_factory=list)
    fields: dict[str, str] = field(default_factory=dict)


@dataclass
class Task:
    """A task read from one calendar file."""

    source_file: str | None
    uid: str | None
    created: str | None
    dtstamp: str | None
    due: str | None
    start: str | None
    status: str | None
    summary: ParsedSummary
    description_raw: str
    subtasks: list[Subtask] = field(default_factory=list)
    properties: dict[str, str] = field(default_factory=dict)

    @property
    def task_id(self) -> str:
        """File name without extension, the id used in URLs."""
        if not self.source_file:
            return ""
        return Path(self.source_file).stem

    @property
    def last_modified(self) -> str | None:
        return self.properties.get("LAST-MODIFIED")
