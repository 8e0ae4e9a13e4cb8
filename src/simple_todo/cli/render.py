# src/simple_todo/cli/render.py

"""Text and JSON renderings shared by the CLI commands and the console board."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from ..tasks.task_models import ExportData, Task, TaskFilter, to_iso


def to_json(payload: Any) -> str:
    if isinstance(payload, list):
        payload = [p.to_dict() if hasattr(p, "to_dict") else p for p in payload]
    elif hasattr(payload, "to_dict"):
        payload = payload.to_dict()
    return json.dumps(payload, ensure_ascii=False, indent=2)


def local_date(ts: datetime) -> str:
    return ts.astimezone().strftime("%Y-%m-%d")


def status_box(task: Task) -> str:
    return "[x]" if task.completed else "[ ]"


def render_task_list(tasks: list[Task], task_filter: TaskFilter = TaskFilter.ALL) -> str:
    if not tasks:
        return "No tasks found"

    scope = "total" if task_filter is TaskFilter.ALL else task_filter.value
    lines = [f"Tasks ({len(tasks)} {scope}):", ""]
    for i, task in enumerate(tasks, start=1):
        suffix = " (completed)" if task.completed else ""
        lines.append(f"{i}. {status_box(task)} {task.description}{suffix}")
        lines.append(f"   ID: {task.id}")
        lines.append(f"   Created: {local_date(task.created_at)}")
        if task.completed_at is not None:
            lines.append(f"   Completed: {local_date(task.completed_at)}")
        lines.append("")
    return "\n".join(lines).rstrip("\n")


def render_export_text(data: ExportData) -> str:
    lines = [
        "# ToDo App Export",
        f"Exported: {to_iso(data.exported_at)}",
        f"Version: {data.version}",
        f"Total tasks: {len(data.tasks)}",
        "",
    ]
    for i, task in enumerate(data.tasks, start=1):
        lines.append(f"{i}. {status_box(task)} {task.description}")
        lines.append(f"   Created: {to_iso(task.created_at)}")
        if task.completed_at is not None:
            lines.append(f"   Completed: {to_iso(task.completed_at)}")
        lines.append("")
    return "\n".join(lines)
