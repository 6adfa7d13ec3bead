"""Core build logic: settings, operations and the task graph."""

from litdoc.core.build_settings import BuildSettings
from litdoc.core.tasks import Task, TaskGraph, default_task_graph, run_task

__all__ = [
    "BuildSettings",
    "Task",
    "TaskGraph",
    "default_task_graph",
    "run_task",
]
