"""
Hauswart — Task View Service.

UI-agnostic helpers used by pages, routes and the CLI: validating subtask
update requests, joining a task to its area/building/tenants, and the
due-date ordering, filtering and counting shown on the task board.
"""

from __future__ import annotations

import functools
import logging
import re
from dataclasses import asdict, dataclass
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictStr,
    ValidationError,
    field_validator,
    model_validator,
)

from hauswart.config import settings
from hauswart.core.ics_lines import parse_utc_timestamp
from hauswart.ports.task_port import PatchValidationError

if TYPE_CHECKING:
    from hauswart.data.models import Task
    from hauswart.data.task_store import TaskStore
    from hauswart.ports.task_port import ReferenceDataPort

logger = logging.getLogger(__name__)

ALL_RESPONSIBLE = "Alle"
AREA_FIELD = "Bereich"
RESPONSIBLE_FIELD = "Verantwortlich"
TITLE_FIELD = "Titel"

_COMPACT_DATE = re.compile(r"^[0-9]{8}$")
_DIGITS = re.compile(r"[0-9]+")


# ---------------------------------------------------------------------------
# Subtask update requests
# ---------------------------------------------------------------------------


class SubtaskPatch(BaseModel):
    """Body of a subtask update: a new status, a new hint, or both.

    JSON example:
    {
        "status": true,
        "hinweis": "key at neighbour"
    }
    """

    model_config = ConfigDict(extra="ignore")

    status: StrictBool | None = None
    hint: StrictStr | None = Field(
        default=None, validation_alias=AliasChoices("hint", "hinweis")
    )

    @field_validator("status", "hint", mode="before")
    @classmethod
    def reject_explicit_null(cls, v: object) -> object:
        # defaults skip validation, so only a null sent by the client lands here
        if v is None:
            raise ValueError("must not be null")
        return v

    @model_validator(mode="after")
    def require_one_field(self) -> SubtaskPatch:
        if self.status is None and self.hint is None:
            raise ValueError("At least one field (status or hint) must be given.")
        return self


def parse_subtask_patch(payload: object) -> SubtaskPatch:
    """Validate a decoded request body. Raises PatchValidationError."""
    if not isinstance(payload, dict):
        raise PatchValidationError("Request body must be a JSON object.")
    try:
        return SubtaskPatch.model_validate(payload)
    except ValidationError as exc:
        messages = "; ".join(err["msg"] for err in exc.errors())
        raise PatchValidationError(f"Invalid subtask update: {messages}") from exc


def parse_subtask_index(raw: str | int) -> int:
    """Parse a subtask index from a URL segment. Raises PatchValidationError."""
    if isinstance(raw, bool):
        raise PatchValidationError(f"Invalid subtask index: {raw!r}")
    if isinstance(raw, int):
        index = raw
    elif isinstance(raw, str) and _DIGITS.fullmatch(raw.strip()):
        index = int(raw.strip())
    else:
        raise PatchValidationError(f"Invalid subtask index: {raw!r}")

    if index < 0:
        raise PatchValidationError(f"Invalid subtask index: {raw!r}")
    return index


async def apply_subtask_patch(
    store: TaskStore, uid: str, index: int, patch: SubtaskPatch
) -> Task:
    """Apply a validated patch to subtask *index* of task *uid*."""
    path = store.task_path(uid)
    task = await store.update_subtask(path, index, done=patch.status, hint=patch.hint)
    logger.info("Updated subtask %d of task %s", index, uid)
    return task


# ---------------------------------------------------------------------------
# Reference data join
# ---------------------------------------------------------------------------


def build_task_payload(
    task: Task,
    reference: ReferenceDataPort,
    area_field: str = AREA_FIELD,
    today: date | None = None,
) -> dict:
    """Serialize a task with the area, building and tenants its label names."""
    label = task.summary.fields.get(area_field, "")
    area = reference.area_by_label(label) if label else None

    reference_payload = None
    if area is not None:
        area_rel = reference.resolve_area(area)
        building_rel = reference.resolve_building(area.building_id)
        address = building_rel.address if building_rel else None
        reference_payload = {
            "category_name": area_rel.category.name if area_rel.category else None,
            "area_id": area.id,
            "building_id": area.building_id,
            "entrance": area.entrance,
            "location": area.location,
            "address": address.model_dump() if address else None,
            "tenants": [p.model_dump() for p in area_rel.tenants],
        }

    last_modified_at = parse_utc_timestamp(task.last_modified)

    return {
        "id": task.task_id,
        "uid": task.uid,
        "status": task.status,
        "summary": asdict(task.summary),
        "subtasks": [asdict(s) for s in task.subtasks],
        "due": task.due,
        "urgency": due_urgency(task, today),
        "dtstamp": task.dtstamp,
        "last_modified": task.last_modified,
        "last_modified_at": last_modified_at.isoformat() if last_modified_at else None,
        "completed": task.properties.get("COMPLETED"),
        "percent_complete": task.properties.get("PERCENT-COMPLETE"),
        "reference": reference_payload,
    }


# ---------------------------------------------------------------------------
# Board logic
# ---------------------------------------------------------------------------


def _local_zone() -> ZoneInfo:
    return ZoneInfo(settings.TIMEZONE)


def parse_due_date(value: str | None) -> date | None:
    """Parse DUE as a local calendar date (``YYYYMMDD``, stamp or ISO)."""
    if not value:
        return None

    value = value.strip()
    if _COMPACT_DATE.match(value):
        try:
            return datetime.strptime(value, "%Y%m%d").date()
        except ValueError:
            return None

    moment = parse_utc_timestamp(value)
    if moment is None:
        return None
    return moment.astimezone(_local_zone()).date()


def is_task_completed(task: Task) -> bool:
    """STATUS:COMPLETED, or every unlocked subtask done (at least one)."""
    if (task.status or "").strip().upper() == "COMPLETED":
        return True

    unlocked = [s for s in task.subtasks if s.unlocked]
    return bool(unlocked) and all(s.done for s in unlocked)


def due_urgency(task: Task, today: date | None = None) -> str:
    """Classify a task as ``completed``, ``overdue``, ``soon`` or ``normal``.

    ``soon`` means due today or tomorrow.
    """
    if is_task_completed(task):
        return "completed"

    due = parse_due_date(task.due)
    if due is None:
        return "normal"

    if today is None:
        today = datetime.now(_local_zone()).date()

    if due < today:
        return "overdue"
    if due <= today + timedelta(days=1):
        return "soon"
    return "normal"


def _compare_by_due(a: Task, b: Task) -> int:
    due_a = parse_due_date(a.due)
    due_b = parse_due_date(b.due)

    if due_a and due_b:
        return (due_a > due_b) - (due_a < due_b)
    if due_a:
        return -1
    if due_b:
        return 1

    title_a = (a.summary.fields.get(TITLE_FIELD) or "").casefold()
    title_b = (b.summary.fields.get(TITLE_FIELD) or "").casefold()
    return (title_a > title_b) - (title_a < title_b)


def sort_by_due(tasks: list[Task]) -> list[Task]:
    """Dated tasks first by due date, then undated tasks by title."""
    return sorted(tasks, key=functools.cmp_to_key(_compare_by_due))


def _responsible(task: Task, field: str) -> str:
    return (task.summary.fields.get(field) or "").strip()


def responsible_options(tasks: list[Task], field: str = RESPONSIBLE_FIELD) -> list[str]:
    """Filter choices: "Alle" followed by every responsible person, sorted."""
    names = {_responsible(t, field) for t in tasks} - {""}
    return [ALL_RESPONSIBLE, *sorted(names, key=str.casefold)]


def filter_open_tasks(
    tasks: list[Task],
    responsible: str = ALL_RESPONSIBLE,
    field: str = RESPONSIBLE_FIELD,
) -> list[Task]:
    """Open tasks, optionally for one responsible person, ordered by due date."""
    open_tasks = [t for t in tasks if not is_task_completed(t)]
    if responsible != ALL_RESPONSIBLE:
        open_tasks = [t for t in open_tasks if _responsible(t, field) == responsible]
    return sort_by_due(open_tasks)


def completed_tasks(tasks: list[Task]) -> list[Task]:
    return sort_by_due([t for t in tasks if is_task_completed(t)])


@dataclass
class TaskCounters:
    """Header numbers of the task board."""

    open_subtasks: int       # unlocked and not done
    open_tasks: int
    unlocked_subtasks: int
    done_subtasks: int       # unlocked and done


def task_counters(tasks: list[Task]) -> TaskCounters:
    unlocked = [s for t in tasks for s in t.subtasks if s.unlocked]
    return TaskCounters(
        open_subtasks=sum(1 for s in unlocked if not s.done),
        open_tasks=sum(1 for t in tasks if not is_task_completed(t)),
        unlocked_subtasks=len(unlocked),
        done_subtasks=sum(1 for s in unlocked if s.done),
    )
