"""
Hauswart — Command line interface.

A thin surface over the task store and reference data, mirroring what the
task board does: list open (or completed) tasks, tick a subtask, set a hint.
Output is JSON on stdout.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from hauswart.core.task_view import (
    ALL_RESPONSIBLE,
    SubtaskPatch,
    apply_subtask_patch,
    build_task_payload,
    completed_tasks,
    filter_open_tasks,
    parse_subtask_index,
    responsible_options,
    task_counters,
)
from hauswart.data.reference_repository import ReferenceRepository
from hauswart.data.task_store import TaskStore
from hauswart.ports.task_port import TaskStoreError

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hauswart", description="Household task board")
    sub = parser.add_subparsers(dest="command", required=True)

    list_cmd = sub.add_parser("list", help="List tasks with their reference data")
    list_cmd.add_argument("--responsible", default=ALL_RESPONSIBLE)
    list_cmd.add_argument(
        "--done", action="store_true", help="Show completed tasks instead of open ones"
    )

    toggle_cmd = sub.add_parser("toggle", help="Mark a subtask done or open")
    toggle_cmd.add_argument("uid")
    toggle_cmd.add_argument("index")
    state = toggle_cmd.add_mutually_exclusive_group(required=True)
    state.add_argument("--done", dest="done", action="store_true")
    state.add_argument("--open", dest="done", action="store_false")

    hint_cmd = sub.add_parser("hint", help="Set (or clear with '') a subtask hint")
    hint_cmd.add_argument("uid")
    hint_cmd.add_argument("index")
    hint_cmd.add_argument("text")

    return parser


async def _run(args: argparse.Namespace) -> dict:
    store = TaskStore()
    reference = ReferenceRepository()

    if args.command == "list":
        tasks = await store.read_all_tasks()
        shown = (
            completed_tasks(tasks)
            if args.done
            else filter_open_tasks(tasks, responsible=args.responsible)
        )
        return {
            "counters": vars(task_counters(tasks)),
            "responsible_options": responsible_options(tasks),
            "tasks": [build_task_payload(t, reference) for t in shown],
        }

    index = parse_subtask_index(args.index)
    if args.command == "toggle":
        patch = SubtaskPatch(status=args.done)
    else:
        patch = SubtaskPatch(hint=args.text)

    task = await apply_subtask_patch(store, args.uid, index, patch)
    return {"task": build_task_payload(task, reference)}


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    try:
        result = asyncio.run(_run(args))
    except (TaskStoreError, OSError) as exc:
        logger.error("hauswart %s failed: %s", args.command, exc)
        return 1

    json.dump(result, sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")
    return 0
