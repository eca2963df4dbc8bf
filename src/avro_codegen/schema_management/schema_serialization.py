"""Canonical schema text rendering."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from .schema_models import (
    ArrayType,
    EnumDefinition,
    FieldDefinition,
    FixedDefinition,
    MapType,
    NamedType,
    PrimitiveType,
    RecordDefinition,
    TypeDefinition,
    TypeReference,
    UnionType,
)


class SchemaSerializationError(Exception):
    """Raised when a definition references a type that is not available."""


def render_schema_text(
    definition: TypeDefinition, definitions: Mapping[str, TypeDefinition]
) -> str:
    """Render one definition as pretty-printed canonical schema JSON.

    Nested named types are written in full at their first occurrence and by
    full name afterwards, so recursive and repeated references stay valid.
    """
    document = schema_to_json(definition, definitions)
    return json.dumps(document, indent=2, ensure_ascii=False) + "\n"


def schema_to_json(
    definition: TypeDefinition, definitions: Mapping[str, TypeDefinition]
) -> dict[str, Any]:
    """Return the JSON document of one definition with nested types expanded."""
    return _JsonSchemaWriter(definitions).named(definition, enclosing_namespace=None)


class _JsonSchemaWriter:
    def __init__(self, definitions: Mapping[str, TypeDefinition]) -> None:
        self._definitions = definitions
        self._written: set[str] = set()

    def named(self, definition: TypeDefinition, *, enclosing_namespace: str | None) -> dict:
        self._written.add(definition.full_name)
        if isinstance(definition, RecordDefinition):
            document = self._header(
                "error" if definition.is_error else "record", definition, enclosing_namespace
            )
            document["fields"] = [
                self._field(item, namespace=definition.namespace) for item in definition.fields
            ]
        elif isinstance(definition, EnumDefinition):
            document = self._header("enum", definition, enclosing_namespace)
            document["symbols"] = list(definition.symbols)
            if definition.default is not None:
                document["default"] = definition.default
        elif isinstance(definition, FixedDefinition):
            document = self._header("fixed", definition, enclosing_namespace)
            document["size"] = definition.size
        else:  # pragma: no cover - exhaustive over TypeDefinition
            raise SchemaSerializationError(f"Unsupported definition: {definition!r}")
        document.update(definition.properties)
        return document

    def reference(self, reference: TypeReference, *, namespace: str | None) -> Any:
        if isinstance(reference, PrimitiveType):
            return _primitive(reference)
        if isinstance(reference, NamedType):
            if reference.full_name in self._written:
                return reference.full_name
            definition = self._definitions.get(reference.full_name)
            if definition is None:
                raise SchemaSerializationError(f"Undefined name: {reference.full_name}")
            return self.named(definition, enclosing_namespace=namespace)
        if isinstance(reference, ArrayType):
            return {
                "type": "array",
                "items": self.reference(reference.items, namespace=namespace),
                **reference.properties,
            }
        if isinstance(reference, MapType):
            return {
                "type": "map",
                "values": self.reference(reference.values, namespace=namespace),
                **reference.properties,
            }
        if isinstance(reference, UnionType):
            return [self.reference(branch, namespace=namespace) for branch in reference.branches]
        raise SchemaSerializationError(f"Unsupported type reference: {reference!r}")

    def _header(
        self, type_name: str, definition: TypeDefinition, enclosing_namespace: str | None
    ) -> dict[str, Any]:
        document: dict[str, Any] = {"type": type_name, "name": definition.name}
        if definition.namespace != enclosing_namespace:
            document["namespace"] = definition.namespace or ""
        if definition.doc:
            document["doc"] = definition.doc
        if definition.aliases:
            document["aliases"] = list(definition.aliases)
        return document

    def _field(self, item: FieldDefinition, *, namespace: str | None) -> dict[str, Any]:
        document: dict[str, Any] = {
            "name": item.name,
            "type": self.reference(item.type, namespace=namespace),
        }
        if item.doc:
            document["doc"] = item.doc
        if item.has_default:
            document["default"] = item.default
        if item.order:
            document["order"] = item.order
        if item.aliases:
            document["aliases"] = list(item.aliases)
        document.update(item.properties)
        return document


def _primitive(reference: PrimitiveType) -> Any:
    if reference.logical_type is None and not reference.properties:
        return reference.name
    document: dict[str, Any] = {"type": reference.name}
    if reference.logical_type is not None:
        document["logicalType"] = reference.logical_type
    if reference.precision is not None:
        document["precision"] = reference.precision
    if reference.scale is not None:
        document["scale"] = reference.scale
    document.update(reference.properties)
    return document
