"""Minimal local task tracker: create, list, complete, delete, export and import tasks."""

__version__ = "1.0.0"
