"""Build task registration and dependency-ordered execution."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

from avro_codegen.configuration.runtime_settings import BuildConfiguration
from avro_codegen.file_discovery.file_filters import discover_files
from avro_codegen.idl_compilation.idl_compiler import compile_idl
from avro_codegen.source_generation.source_generator import generate_sources

from .task_contracts import BuildTask, TaskRole

LOGGER = logging.getLogger(__name__)

IDL_TO_SCHEMA_TASK = "avro-idl-to-schema"
SCHEMA_TO_SOURCES_TASK = "avro-to-sources"


class TaskGraphError(Exception):
    """Raised for unknown tasks or dependency cycles."""


def run_idl_to_schema(configuration: BuildConfiguration) -> list[Path]:
    """Compile IDL files from the resource directory into managed schema files."""
    LOGGER.info("[avro-codegen] Generating schemas from [%s]", configuration.idl_directory)
    idl_files = discover_files(configuration.idl_directory, configuration.idl_filter)
    return compile_idl(
        idl_files,
        configuration.schema_output_directory,
        configuration.avro.schema_file_extension,
    )


def run_schema_to_sources(configuration: BuildConfiguration) -> list[Path]:
    """Generate sources from managed and hand-authored schema files."""
    LOGGER.info(
        "[avro-codegen] Generating sources from [%s, %s]",
        configuration.schema_directory,
        configuration.schema_output_directory,
    )
    managed_files = discover_files(
        configuration.schema_output_directory, configuration.schema_filter
    )
    unmanaged_files = discover_files(configuration.schema_directory, configuration.schema_filter)
    return generate_sources(
        managed_files,
        unmanaged_files,
        configuration.source_output_directory,
        configuration.generation_mode,
    )


def default_tasks() -> dict[str, BuildTask]:
    """Return the built-in tasks keyed by name."""
    tasks = (
        BuildTask(
            name=IDL_TO_SCHEMA_TASK,
            description="Generate Avro schema files from Avro IDL; is a resource generator",
            role=TaskRole.RESOURCE_GENERATOR,
            action=run_idl_to_schema,
        ),
        BuildTask(
            name=SCHEMA_TO_SOURCES_TASK,
            description="Generate Python sources from Avro schema files; is a source generator",
            role=TaskRole.SOURCE_GENERATOR,
            action=run_schema_to_sources,
            depends_on=(IDL_TO_SCHEMA_TASK,),
        ),
    )
    return {task.name: task for task in tasks}


def execution_order(name: str, tasks: Mapping[str, BuildTask]) -> list[str]:
    """Return `name` and its dependencies, dependencies first, each once."""
    order: list[str] = []
    visiting: list[str] = []

    def _visit(task_name: str) -> None:
        if task_name in order:
            return
        if task_name in visiting:
            cycle = " -> ".join([*visiting[visiting.index(task_name) :], task_name])
            raise TaskGraphError(f"Task dependency cycle: {cycle}")
        task = tasks.get(task_name)
        if task is None:
            raise TaskGraphError(f"Unknown task: {task_name}")
        visiting.append(task_name)
        for dependency in task.depends_on:
            _visit(dependency)
        visiting.pop()
        order.append(task_name)

    _visit(name)
    return order


def run_task(
    name: str,
    configuration: BuildConfiguration,
    tasks: Mapping[str, BuildTask] | None = None,
) -> dict[str, list[Path]]:
    """Run a task after its dependencies and return every executed task's outputs."""
    registry = tasks if tasks is not None else default_tasks()
    outputs: dict[str, list[Path]] = {}
    for task_name in execution_order(name, registry):
        outputs[task_name] = registry[task_name].action(configuration)
    return outputs
