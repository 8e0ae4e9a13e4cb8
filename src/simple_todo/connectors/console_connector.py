# src/simple_todo/connectors/console_connector.py

"""
Interactive task board for the terminal.

Renders the current view, reads one line at a time and re-renders after every
change. Plain text creates a task; slash commands act on the numbered entries of
the view. Service errors are shown inline and never end the loop.
"""

from __future__ import annotations

import logging
from datetime import datetime

from ..cli.commands import CommandRegistry, Invocation, UsageError
from ..core.errors import TodoError
from ..core.state import AppState
from ..tasks.task_models import Task, TaskFilter

logger = logging.getLogger(__name__)

EMPTY_STATE = "No tasks yet. Type a description to add one."

board_registry = CommandRegistry(prefix="/")


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _visible_tasks(state: AppState) -> list[Task]:
    return state.service.list_tasks(state.board_filter)


def _pick(state: AppState, inv: Invocation) -> Task:
    """Resolve the 1-based position argument against the current view."""
    usage = f"Usage: /{inv.name} <number>"
    if not inv.args:
        raise UsageError("Task number is required", usage)
    try:
        pos = int(inv.args[0])
    except ValueError:
        raise UsageError(f"Not a task number: {inv.args[0]}", usage) from None

    tasks = _visible_tasks(state)
    if not 1 <= pos <= len(tasks):
        raise UsageError(f"No task #{pos} in the current view ({len(tasks)} shown)")
    return tasks[pos - 1]


def render_board(state: AppState) -> str:
    tasks = _visible_tasks(state)
    header = f"Tasks [{state.board_filter.value}]"
    if not tasks:
        return f"{header}\n  {EMPTY_STATE}"

    lines = [header]
    for i, task in enumerate(tasks, start=1):
        mark = "x" if task.completed else " "
        lines.append(f"  {i:>2}. [{mark}] {task.description}")
    return "\n".join(lines)


def cmd_toggle(state: AppState, inv: Invocation) -> str:
    task = state.service.toggle_task(_pick(state, inv).id)
    return f"{'Completed' if task.completed else 'Reopened'}: {task.description}"


def cmd_delete(state: AppState, inv: Invocation) -> str:
    removed = state.service.delete_task(_pick(state, inv).id)
    return f"Deleted: {removed.description}"


def cmd_filter(state: AppState, inv: Invocation) -> str:
    if not inv.args:
        return f"Current filter: {state.board_filter.value}. Use /filter all|completed|incomplete."
    try:
        state.board_filter = TaskFilter.parse(inv.args[0])
    except ValueError as e:
        raise UsageError(str(e)) from None
    return f"Showing {state.board_filter.value} tasks."


def cmd_help(state: AppState, inv: Invocation) -> str:
    return "Type a description to add a task.\n" + board_registry.build_help() + "\n  /exit - Leave the board."


board_registry.register("toggle", cmd_toggle, help_text="Flip a task between done and not done: /toggle <n>", aliases=["t", "done"])
board_registry.register("delete", cmd_delete, help_text="Delete a task: /delete <n>", aliases=["rm"])
board_registry.register("filter", cmd_filter, help_text="Change the view: /filter all | completed | incomplete")
board_registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])


def run_console_loop(state: AppState) -> None:
    app_name = str(getattr(state.settings, "app_name", "simple-todo"))
    logger.info("Console board started.")
    print(f"[{_ts_local()}] [{app_name}] Type a task to add it. Use /help for commands, /exit to quit.\n")
    print(render_board(state))

    while True:
        try:
            line = input("> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not line:
            continue

        if line.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            reply = board_registry.handle(state, line)
            if reply is None:
                task = state.service.create_task(line)
                reply = f"Added: {task.description}"
        except TodoError as e:
            print(f"[!] {e}")
            if isinstance(e, UsageError) and e.usage:
                print(e.usage)
            continue
        except Exception:
            logger.exception("Console board handler crashed.")
            print("[!] Internal error while handling that line.")
            continue

        print(reply)
        print(render_board(state))

    logger.info("Console board finished.")
