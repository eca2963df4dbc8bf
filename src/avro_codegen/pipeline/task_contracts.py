"""Build task entities."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from avro_codegen.configuration.runtime_settings import BuildConfiguration

TaskAction = Callable[[BuildConfiguration], list[Path]]


class TaskRole(str, Enum):
    """How the host build consumes a task's output files."""

    RESOURCE_GENERATOR = "resource_generator"
    SOURCE_GENERATOR = "source_generator"


@dataclass(frozen=True)
class BuildTask:
    """A named unit of work and the tasks that must run before it."""

    name: str
    description: str
    role: TaskRole
    action: TaskAction
    depends_on: tuple[str, ...] = ()
