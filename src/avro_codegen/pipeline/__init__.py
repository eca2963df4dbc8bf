"""Build pipeline exports."""

from .build_tasks import (
    IDL_TO_SCHEMA_TASK,
    SCHEMA_TO_SOURCES_TASK,
    TaskGraphError,
    default_tasks,
    execution_order,
    run_idl_to_schema,
    run_schema_to_sources,
    run_task,
)
from .task_contracts import BuildTask, TaskAction, TaskRole

__all__ = [
    "IDL_TO_SCHEMA_TASK",
    "SCHEMA_TO_SOURCES_TASK",
    "TaskGraphError",
    "default_tasks",
    "execution_order",
    "run_idl_to_schema",
    "run_schema_to_sources",
    "run_task",
    "BuildTask",
    "TaskAction",
    "TaskRole",
]
