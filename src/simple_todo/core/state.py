# src/simple_todo/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..tasks.task_models import TaskFilter
from ..tasks.task_service import TaskService


@dataclass
class AppState:
    # Settings are kept on the state so surfaces can read app_name etc.
    settings: object
    service: TaskService

    # Interactive board view.
    board_filter: TaskFilter = TaskFilter.ALL
