"""Grouping of definitions into generated Python modules."""

from __future__ import annotations

import keyword
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import PurePosixPath

from avro_codegen.schema_management.schema_models import RecordDefinition, TypeDefinition

DEFAULT_MODULE_NAME = "schemas"


class SourceRenderError(Exception):
    """Raised when definitions cannot be turned into source files."""


@dataclass(frozen=True)
class ModuleDefinition:
    """One generated module and the definitions it declares, in render order."""

    namespace: str | None
    definitions: tuple[TypeDefinition, ...]

    @property
    def name(self) -> str:
        return module_name(self.namespace)

    @property
    def path(self) -> PurePosixPath:
        if self.namespace is None:
            return PurePosixPath(f"{DEFAULT_MODULE_NAME}.py")
        return PurePosixPath(*self.name.split("."), "__init__.py")


def python_identifier(name: str) -> str:
    """Return `name` with a trailing underscore when it is a Python keyword."""
    return f"{name}_" if keyword.iskeyword(name) else name


def module_name(namespace: str | None) -> str:
    if namespace is None:
        return DEFAULT_MODULE_NAME
    return ".".join(python_identifier(part) for part in namespace.split("."))


def build_modules(definitions: Iterable[TypeDefinition]) -> list[ModuleDefinition]:
    """Group definitions by namespace, enums and fixed types ahead of records."""
    by_namespace: dict[str | None, list[TypeDefinition]] = {}
    for definition in definitions:
        by_namespace.setdefault(definition.namespace, []).append(definition)

    modules = [
        ModuleDefinition(namespace=namespace, definitions=tuple(sorted(members, key=_render_key)))
        for namespace, members in by_namespace.items()
    ]
    modules.sort(key=lambda module: module.name)

    seen: dict[str, str | None] = {}
    for module in modules:
        if module.name in seen:
            raise SourceRenderError(
                f"Namespaces {seen[module.name]!r} and {module.namespace!r}"
                f" map to the same module {module.name}"
            )
        seen[module.name] = module.namespace
    return modules


def _render_key(definition: TypeDefinition) -> tuple[int, str]:
    return (1 if isinstance(definition, RecordDefinition) else 0, definition.name)
