"""Deduplication of type definitions gathered from several IDL files."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from avro_codegen.schema_management.schema_models import TypeDefinition


class SchemaConflictError(Exception):
    """Raised when definitions sharing a full name differ structurally."""

    def __init__(self, full_name: str, sources: Iterable[Path | None] = ()) -> None:
        self.full_name = full_name
        self.sources = tuple(sorted({source for source in sources if source is not None}))
        message = f"Different schemata with name {full_name} found"
        if self.sources:
            message += f" in: {', '.join(str(source) for source in self.sources)}"
        super().__init__(message)


def deduplicate_definitions(
    definitions: Iterable[TypeDefinition],
) -> dict[str, TypeDefinition]:
    """Group definitions by full name and keep one representative per group.

    Every member of a group must be structurally equal to the first one.
    """
    groups: dict[str, list[TypeDefinition]] = {}
    for definition in definitions:
        groups.setdefault(definition.full_name, []).append(definition)

    unique: dict[str, TypeDefinition] = {}
    for full_name, group in groups.items():
        representative = group[0]
        conflicting = [member for member in group[1:] if member != representative]
        if conflicting:
            raise SchemaConflictError(
                full_name, [representative.source, *(member.source for member in conflicting)]
            )
        unique[full_name] = representative
    return unique
