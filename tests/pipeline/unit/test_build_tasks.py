"""Build task graph tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from avro_codegen.configuration import BuildConfiguration, default_configuration
from avro_codegen.pipeline import (
    IDL_TO_SCHEMA_TASK,
    SCHEMA_TO_SOURCES_TASK,
    BuildTask,
    TaskGraphError,
    TaskRole,
    default_tasks,
    execution_order,
    run_task,
)


def _task(name: str, calls: list[str], *depends_on: str) -> BuildTask:
    def _action(configuration: BuildConfiguration) -> list[Path]:
        calls.append(name)
        return [configuration.layout.resource_directory / name]

    return BuildTask(
        name=name,
        description=name,
        role=TaskRole.RESOURCE_GENERATOR,
        action=_action,
        depends_on=depends_on,
    )


def test_default_tasks_register_both_stages() -> None:
    tasks = default_tasks()

    assert tasks[IDL_TO_SCHEMA_TASK].role is TaskRole.RESOURCE_GENERATOR
    assert tasks[SCHEMA_TO_SOURCES_TASK].role is TaskRole.SOURCE_GENERATOR
    assert tasks[SCHEMA_TO_SOURCES_TASK].depends_on == (IDL_TO_SCHEMA_TASK,)


def test_execution_order_runs_dependencies_first_once() -> None:
    calls: list[str] = []
    tasks = {
        "base": _task("base", calls),
        "left": _task("left", calls, "base"),
        "right": _task("right", calls, "base"),
        "top": _task("top", calls, "left", "right"),
    }

    assert execution_order("top", tasks) == ["base", "left", "right", "top"]


def test_execution_order_reports_cycles() -> None:
    calls: list[str] = []
    tasks = {"a": _task("a", calls, "b"), "b": _task("b", calls, "a")}

    with pytest.raises(TaskGraphError, match="Task dependency cycle: a -> b -> a"):
        execution_order("a", tasks)


def test_execution_order_reports_unknown_tasks() -> None:
    calls: list[str] = []

    with pytest.raises(TaskGraphError, match="Unknown task: missing"):
        execution_order("a", {"a": _task("a", calls, "missing")})


def test_run_task_returns_outputs_of_every_executed_task(tmp_path: Path) -> None:
    calls: list[str] = []
    tasks = {"first": _task("first", calls), "second": _task("second", calls, "first")}
    configuration = default_configuration(tmp_path)

    outputs = run_task("second", configuration, tasks)

    resources = configuration.layout.resource_directory
    assert calls == ["first", "second"]
    assert outputs == {"first": [resources / "first"], "second": [resources / "second"]}
