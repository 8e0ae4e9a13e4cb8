# src/simple_todo/cli/commands.py

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from ..core.errors import StorageError, TodoError
from ..core.state import AppState
from ..tasks.task_models import TaskFilter, to_iso
from .render import render_export_text, render_task_list, to_json

logger = logging.getLogger(__name__)

# Options that take a value either as "--file=x" or "--file x".
VALUE_OPTIONS = frozenset({"file", "format"})


class UsageError(TodoError):
    """Bad invocation: unknown command or missing argument."""

    def __init__(self, message: str, usage: str | None = None) -> None:
        super().__init__(message)
        self.usage = usage


@dataclass(slots=True)
class Invocation:
    """A command name plus its positionals, boolean flags and --key=value options."""

    name: str
    args: list[str] = field(default_factory=list)
    flags: set[str] = field(default_factory=set)
    options: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_tokens(cls, tokens: list[str]) -> Invocation:
        if not tokens:
            raise UsageError("Empty command.")

        inv = cls(name=tokens[0].lower())
        rest = iter(tokens[1:])
        for tok in rest:
            if not tok.startswith("--"):
                inv.args.append(tok)
                continue
            key, sep, value = tok[2:].partition("=")
            if sep:
                inv.options[key] = value
            elif key in VALUE_OPTIONS:
                nxt = next(rest, None)
                if nxt is None:
                    raise UsageError(f"Option --{key} needs a value.")
                inv.options[key] = nxt
            else:
                inv.flags.add(key)
        return inv

    @property
    def as_json(self) -> bool:
        return "json" in self.flags


CommandHandler = Callable[[AppState, Invocation], str]


class CommandRegistry:
    """Command registry shared by the CLI and the console board (/toggle, /delete, ...)."""

    def __init__(self, prefix: str = "") -> None:
        self._prefix = prefix
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def __contains__(self, name: str) -> bool:
        return name.lower() in self._handlers

    def dispatch(self, state: AppState, inv: Invocation) -> str:
        handler = self._handlers.get(inv.name)
        if not handler:
            raise UsageError(
                f"Unknown command '{self._prefix}{inv.name}'",
                f"Use {self._prefix}help to list available commands.",
            )
        logger.debug("Dispatch %s args=%s flags=%s", inv.name, inv.args, sorted(inv.flags))
        return handler(state, inv)

    def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            raise UsageError(f"Empty command. Use {self._prefix}help to list available commands.")
        return self.dispatch(state, Invocation.from_tokens(parts))

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  {self._prefix}{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def cmd_create(state: AppState, inv: Invocation) -> str:
    if not inv.args:
        raise UsageError("Task description is required", "Usage: todo create <description>")

    task = state.service.create_task(" ".join(inv.args))
    if inv.as_json:
        return to_json(task)
    return (
        f"Created task: {task.description}\n"
        f"   ID: {task.id}\n"
        f"   Created: {to_iso(task.created_at)}"
    )


def cmd_list(state: AppState, inv: Invocation) -> str:
    task_filter = TaskFilter.ALL
    if "completed" in inv.flags:
        task_filter = TaskFilter.COMPLETED
    if "incomplete" in inv.flags:
        task_filter = TaskFilter.INCOMPLETE

    tasks = state.service.list_tasks(task_filter)
    if inv.as_json:
        return to_json(tasks)
    return render_task_list(tasks, task_filter)


def cmd_complete(state: AppState, inv: Invocation) -> str:
    """
    complete <id>           -> mark completed (re-stamps completedAt)
    complete <id> --toggle  -> flip current state
    """
    if not inv.args:
        raise UsageError("Task ID is required", "Usage: todo complete <task-id> [--toggle]")

    task_id = inv.args[0]
    if "toggle" in inv.flags:
        task = state.service.toggle_task(task_id)
    else:
        task = state.service.update_task(task_id, completed=True)

    if inv.as_json:
        return to_json(task)
    if task.completed and task.completed_at is not None:
        return f"Marked task as completed: {task.description}\n   Completed at: {to_iso(task.completed_at)}"
    return f"Marked task as incomplete: {task.description}"


def cmd_delete(state: AppState, inv: Invocation) -> str:
    if not inv.args:
        raise UsageError("Task ID is required", "Usage: todo delete <task-id>")

    task_id = inv.args[0]
    removed = state.service.delete_task(task_id)
    if inv.as_json:
        return to_json({"deleted": True, "taskId": task_id, "description": removed.description})
    return f"Deleted task: {removed.description}\n   ID: {task_id}"


def cmd_export(state: AppState, inv: Invocation) -> str:
    fmt = inv.options.get("format", "json").lower()
    if fmt not in ("json", "text"):
        fmt = "json"

    data = state.service.export_tasks()
    output = to_json(data) if fmt == "json" else render_export_text(data)

    target = inv.options.get("file")
    if not target:
        return output

    path = Path(target)
    try:
        path.write_text(output, encoding="utf-8")
    except OSError as e:
        raise StorageError(f"Cannot write export file {path}: {e.strerror}") from e
    logger.info("Exported %d tasks to %s (%s)", len(data.tasks), path, fmt)
    return f"Exported {len(data.tasks)} tasks to {path}"


def cmd_import(state: AppState, inv: Invocation) -> str:
    if not inv.args:
        raise UsageError("Import file is required", "Usage: todo import <file> [--merge]")

    path = Path(inv.args[0])
    if not path.is_file():
        raise TodoError(f"File not found: {path}")
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except ValueError as e:
        raise StorageError("Invalid JSON format in import file") from e

    merge = "merge" in inv.flags
    result = state.service.import_tasks(payload, merge=merge)
    if inv.as_json:
        return to_json(result)

    mode = "Merge (added to existing tasks)" if merge else "Replace (replaced all existing tasks)"
    return (
        "Import completed:\n"
        f"   Imported: {result.imported} tasks\n"
        f"   Skipped: {result.skipped} tasks (duplicates)\n"
        f"   Mode: {mode}"
    )


def cmd_board(state: AppState, inv: Invocation) -> str:
    from ..connectors.console_connector import run_console_loop

    run_console_loop(state)
    return ""


registry.register("create", cmd_create, help_text="Create a new task: create <description>")
registry.register("list", cmd_list, help_text="List tasks: list [--completed | --incomplete]")
registry.register("complete", cmd_complete, help_text="Mark a task completed: complete <id> [--toggle]")
registry.register("delete", cmd_delete, help_text="Delete a task: delete <id>")
registry.register(
    "export", cmd_export, help_text="Export tasks: export [--file=path] [--format=json|text]"
)
registry.register("import", cmd_import, help_text="Import tasks from a JSON export: import <file> [--merge]")
registry.register("board", cmd_board, help_text="Open the interactive task board.")
