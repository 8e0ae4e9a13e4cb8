# src/simple_todo/cli/main.py

"""
CLI entrypoint.

Handles --help/--version before anything else, then initializes logging, builds
AppState once and dispatches a single command. Exit status: 0 on success, 1 on
any usage error or failed operation.
"""

from __future__ import annotations

import logging
import sys

from .. import __version__
from ..cli.bootstrap import create_initial_state
from ..cli.commands import Invocation, UsageError, registry
from ..config import get_settings
from ..core.errors import TodoError
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def build_help(app_name: str = "simple-todo") -> str:
    return (
        f"{app_name} - v{__version__}\n"
        "\n"
        "Usage:\n"
        "  todo <command> [options]\n"
        "\n"
        f"{registry.build_help()}\n"
        "\n"
        "Global options:\n"
        "  --json          Output in JSON format\n"
        "  --help, -h      Show help\n"
        "  --version, -v   Show version\n"
        "\n"
        "Examples:\n"
        '  todo create "Buy groceries"\n'
        "  todo list --completed --json\n"
        "  todo complete <id> --toggle\n"
        "  todo export --file=backup.json\n"
        "  todo import backup.json --merge"
    )


def _fail(message: str, usage: str | None = None) -> int:
    print(f"Error: {message}", file=sys.stderr)
    if usage:
        print(usage)
    return 1


def main(argv: list[str] | None = None, *, settings=None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if settings is None:
        settings = get_settings()
    app_name = str(getattr(settings, "app_name", "simple-todo"))

    if not args or "--help" in args or "-h" in args:
        print(build_help(app_name))
        return 0

    if "--version" in args or "-v" in args:
        print(f"{app_name} v{__version__}")
        return 0

    level_name = str(getattr(settings, "log_level", "WARNING")).upper()
    console_level = getattr(logging, level_name, logging.WARNING)
    setup_logging(
        log_dir=getattr(settings, "data_dir", ".local/todo"),
        console_level=console_level,
        log_to_file=bool(getattr(settings, "log_to_file", True)),
    )

    try:
        inv = Invocation.from_tokens(args)
        if inv.name not in registry:
            return _fail(f"Unknown command '{inv.name}'", 'Run "todo --help" for usage information')

        # Built once here and handed to the command; no module-level service instance.
        state = create_initial_state(settings=settings)
        output = registry.dispatch(state, inv)
    except UsageError as e:
        return _fail(str(e), e.usage)
    except TodoError as e:
        logger.info("Command failed: %s", e)
        return _fail(str(e))
    except Exception as e:
        logger.exception("Unexpected failure in command %r", args[0])
        return _fail(f"Unexpected error: {e}")

    if output:
        print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
