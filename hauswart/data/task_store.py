"""
Hauswart — Task Store.

Reads a directory of calendar files (one VTODO per file) and writes subtask
changes back into them. Only DESCRIPTION, DTSTAMP and LAST-MODIFIED are
rewritten; every other property keeps its content and order, but a
rewritten file is stored with all folded lines unfolded.

File I/O is blocking and runs through asyncio.to_thread so callers on an
event loop stay responsive. Parsing is pure, so a directory is parsed with
one task per file.
"""

from __future__ import annotations

import asyncio
import logging
import re
from datetime import datetime
from pathlib import Path

from hauswart.config import settings
from hauswart.core import ics_lines
from hauswart.core.modifier import ModifierConfig, ModifierSource
from hauswart.core.subtask_codec import (
    decode_description,
    encode_description,
    normalize_hint,
    parse_summary,
)
from hauswart.data.models import SubtaskInput, Task
from hauswart.ports.task_port import (
    PatchValidationError,
    SubtaskIndexError,
    TaskStructureError,
)

logger = logging.getLogger(__name__)

_VALID_UID = re.compile(r"[A-Za-z0-9-]+")


def _read_text(path: Path) -> str:
    # read_bytes, not read_text: universal newlines would hide CRLF files
    return path.read_bytes().decode("utf-8")


class TaskStore:
    """Calendar-file backed task storage.

    Concurrency: there is no locking across the read-modify-write cycle of
    ``update_subtask``/``write_subtasks``. Two concurrent updates of the
    same file race and the later write silently drops the earlier change.
    Callers that allow concurrent writers must serialize per file.
    """

    def __init__(
        self,
        tasks_dir: str | Path | None = None,
        modifier: ModifierSource | None = None,
        extension: str | None = None,
    ) -> None:
        self._tasks_dir = Path(tasks_dir if tasks_dir is not None else settings.TASKS_DIR)
        self._modifier = modifier if modifier is not None else ModifierSource(
            settings.MODIFIER_PATH
        )
        self._extension = (extension or settings.TASK_FILE_EXTENSION).lower()

    @property
    def tasks_dir(self) -> Path:
        return self._tasks_dir

    @property
    def modifier(self) -> ModifierConfig:
        return self._modifier.config

    # ---- paths ----

    def task_path(self, uid: str) -> Path:
        """Return the file path for a task id, rejecting unsafe ids."""
        if not _VALID_UID.fullmatch(uid or ""):
            raise PatchValidationError(f"Invalid task id: {uid!r}")
        return self._tasks_dir / f"{uid}{self._extension}"

    def _list_task_files(self, directory: Path) -> list[Path]:
        return sorted(
            (
                entry
                for entry in directory.iterdir()
                if entry.is_file() and entry.name.lower().endswith(self._extension)
            ),
            key=lambda entry: entry.name,
        )

    # ---- reading ----

    def parse_task(self, content: str, source_file: str | Path | None = None) -> Task:
        """Parse the text of one task file."""
        config = self.modifier
        props = ics_lines.parse_properties(content)
        description_raw = props.get("DESCRIPTION", "")

        return Task(
            source_file=str(source_file) if source_file is not None else None,
            uid=props.get("UID"),
            created=props.get("CREATED"),
            dtstamp=props.get("DTSTAMP"),
            due=props.get("DUE"),
            start=props.get("DTSTART"),
            status=props.get("STATUS"),
            summary=parse_summary(props.get("SUMMARY", ""), config),
            description_raw=description_raw,
            subtasks=decode_description(description_raw, config),
            properties=props,
        )

    async def read_task(self, path: str | Path) -> Task:
        path = Path(path)
        content = await asyncio.to_thread(_read_text, path)
        task = self.parse_task(content, path)
        logger.debug("Parsed %s: %d subtask(s)", path.name, len(task.subtasks))
        return task

    async def read_all_tasks(self, directory: str | Path | None = None) -> list[Task]:
        """Read every task file in *directory* (default: the tasks dir), by name."""
        directory = Path(directory) if directory is not None else self._tasks_dir
        files = await asyncio.to_thread(self._list_task_files, directory)
        tasks = await asyncio.gather(*(self.read_task(f) for f in files))
        logger.info("Read %d task(s) from %s", len(tasks), directory)
        return list(tasks)

    # ---- writing ----

    def normalize_hint(self, text: str) -> str:
        return normalize_hint(text, self.modifier)

    async def update_subtask_status(
        self, path: str | Path, index: int, done: bool
    ) -> Task:
        return await self.update_subtask(path, index, done=done)

    async def update_subtask_hint(self, path: str | Path, index: int, hint: str) -> Task:
        return await self.update_subtask(path, index, hint=hint)

    async def update_subtask(
        self,
        path: str | Path,
        index: int,
        done: bool | None = None,
        hint: str | None = None,
    ) -> Task:
        """Change one subtask's status and/or hint and rewrite the file.

        A hint is normalized first; a hint that normalizes to "" removes it.
        Raises SubtaskIndexError if *index* is out of range, before anything
        is written.
        """
        task = await self.read_task(path)
        items = [subtask.to_input() for subtask in task.subtasks]

        if index < 0 or index >= len(items):
            raise SubtaskIndexError(
                f"Subtask index {index} is out of range "
                f"(task has {len(items)} subtask(s))."
            )

        item = items[index]
        if done is not None:
            item.done = done
        if hint is not None:
            item.hint = self.normalize_hint(hint) or None

        return await self.write_subtasks(path, items)

    async def write_subtasks(
        self,
        path: str | Path,
        items: list[SubtaskInput],
        now: datetime | None = None,
    ) -> Task:
        """Replace the task's DESCRIPTION with *items* and stamp the file.

        Raises TaskStructureError, without writing, if the file has no
        VTODO region.
        """
        path = Path(path)
        content = await asyncio.to_thread(_read_text, path)
        updated = self.render_subtasks(content, items, now)
        await asyncio.to_thread(path.write_bytes, updated.encode("utf-8"))
        logger.info("Wrote %d subtask(s) to %s", len(items), path.name)
        return self.parse_task(updated, path)

    def render_subtasks(
        self,
        content: str,
        items: list[SubtaskInput],
        now: datetime | None = None,
    ) -> str:
        """Return *content* with DESCRIPTION, DTSTAMP and LAST-MODIFIED replaced."""
        newline = ics_lines.detect_newline(content)
        lines = ics_lines.unfold_lines(content)
        bounds = ics_lines.todo_bounds(lines)
        if bounds is None:
            raise TaskStructureError("No VTODO component found in the task file.")

        begin, end = bounds
        todo = lines[begin + 1 : end]
        stamp = ics_lines.utc_timestamp(now)
        description = encode_description(items, self.modifier)

        ics_lines.upsert_property(todo, "DESCRIPTION", ics_lines.escape_text(description))
        ics_lines.upsert_property(todo, "DTSTAMP", stamp)
        ics_lines.upsert_property(todo, "LAST-MODIFIED", stamp)

        updated = [*lines[: begin + 1], *todo, *lines[end:]]
        while updated and not updated[-1]:
            updated.pop()
        return newline.join(updated) + newline
