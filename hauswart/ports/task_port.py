"""Task port — the surface the presentation layer calls into.

Pages, routes and the CLI depend on these protocols, never on the file
format behind them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from pathlib import Path

    from hauswart.data.models import Task
    from hauswart.data.reference_models import (
        Area,
        AreaWithRelations,
        BuildingWithRelations,
    )


class TaskStoreError(Exception):
    """Raised when a task file operation is rejected."""


class SubtaskIndexError(TaskStoreError, IndexError):
    """Raised when a subtask index is outside the task's subtask list."""


class TaskStructureError(TaskStoreError):
    """Raised when a task file has no BEGIN:VTODO/END:VTODO region."""


class PatchValidationError(TaskStoreError, ValueError):
    """Raised when an update request is malformed."""


class TaskRepositoryPort(Protocol):
    """Read and edit tasks backed by calendar files."""

    async def read_all_tasks(
        self, directory: str | Path | None = None
    ) -> list[Task]: ...

    async def read_task(self, path: str | Path) -> Task: ...

    async def update_subtask_status(
        self, path: str | Path, index: int, done: bool
    ) -> Task: ...

    async def update_subtask_hint(
        self, path: str | Path, index: int, hint: str
    ) -> Task: ...

    def normalize_hint(self, text: str) -> str: ...


class ReferenceDataPort(Protocol):
    """Resolve free-text area labels against the reference dataset."""

    def area_by_label(self, text: str) -> Area | None: ...

    def resolve_area(self, area: Area) -> AreaWithRelations: ...

    def resolve_building(self, building_id: int) -> BuildingWithRelations | None: ...
