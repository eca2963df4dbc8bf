"""Schema file parsing into the intermediate definition model."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any

from .schema_models import (
    PRIMITIVE_TYPE_NAMES,
    ArrayType,
    EnumDefinition,
    FieldDefinition,
    FixedDefinition,
    GenerationMode,
    MapType,
    NamedType,
    PrimitiveType,
    RecordDefinition,
    TypeDefinition,
    TypeReference,
    UnionType,
    qualify_name,
)

_NAMED_RESERVED_KEYS = frozenset({"type", "name", "namespace", "doc", "aliases"})
_RECORD_RESERVED_KEYS = _NAMED_RESERVED_KEYS | {"fields"}
_ENUM_RESERVED_KEYS = _NAMED_RESERVED_KEYS | {"symbols", "default"}
_FIXED_RESERVED_KEYS = _NAMED_RESERVED_KEYS | {"size"}
_FIELD_RESERVED_KEYS = frozenset({"name", "type", "doc", "default", "order", "aliases"})
_PRIMITIVE_RESERVED_KEYS = frozenset({"type", "logicalType", "precision", "scale"})
_VALID_FIELD_ORDERS = frozenset({"ascending", "descending", "ignore"})


class SchemaParseError(Exception):
    """Raised for malformed schema text or invalid schema structure."""


class UnresolvedReferenceError(SchemaParseError):
    """Raised when a schema references a named type that is not defined."""

    def __init__(self, name: str, source: Path | None = None) -> None:
        location = f" in {source}" if source is not None else ""
        super().__init__(f"Undefined name: {name}{location}")
        self.name = name
        self.source = source


def parse_schema_text(
    text: str,
    *,
    source: Path | None = None,
    known: Mapping[str, TypeDefinition] | None = None,
) -> list[TypeDefinition]:
    """Parse one schema document and return the named types it defines.

    `known` holds definitions from other documents that references may
    resolve against. A name that is already known may be defined again only
    with an identical structure.
    """
    try:
        document = json.loads(text)
    except json.JSONDecodeError as exc:
        location = f" {source}" if source is not None else ""
        raise SchemaParseError(f"Invalid schema JSON{location}: {exc}") from exc
    return parse_schema_document(document, source=source, known=known)


def parse_schema_document(
    document: Any,
    *,
    source: Path | None = None,
    known: Mapping[str, TypeDefinition] | None = None,
    namespace: str | None = None,
) -> list[TypeDefinition]:
    """Parse an already decoded schema document."""
    reader = _SchemaReader(known or {}, source)
    reader.read(document, namespace=namespace)
    return reader.definitions


def parse_schema_files(
    files: Iterable[Path], mode: GenerationMode
) -> list[TypeDefinition]:
    """Parse schema files with the reference resolution of `mode`."""
    texts = {path: path.read_text(encoding="utf-8") for path in files}
    if mode is GenerationMode.SINGLE_PASS:
        definitions: list[TypeDefinition] = []
        for path, text in texts.items():
            definitions.extend(parse_schema_text(text, source=path))
        return merge_definitions(definitions)
    return _parse_multi_pass(texts)


def merge_definitions(definitions: Iterable[TypeDefinition]) -> list[TypeDefinition]:
    """Collapse identical definitions of the same name, keeping first-seen order."""
    merged: dict[str, TypeDefinition] = {}
    for definition in definitions:
        existing = merged.setdefault(definition.full_name, definition)
        if existing != definition:
            raise SchemaParseError(_redefinition_message(existing, definition))
    return list(merged.values())


def _parse_multi_pass(texts: Mapping[Path, str]) -> list[TypeDefinition]:
    registry: dict[str, TypeDefinition] = {}
    definitions: list[TypeDefinition] = []
    pending = list(texts)
    while pending:
        deferred: list[Path] = []
        unresolved: UnresolvedReferenceError | None = None
        for path in pending:
            try:
                parsed = parse_schema_text(texts[path], source=path, known=registry)
            except UnresolvedReferenceError as exc:
                deferred.append(path)
                unresolved = exc
                continue
            for definition in parsed:
                registry.setdefault(definition.full_name, definition)
            definitions.extend(parsed)
        if unresolved is not None and len(deferred) == len(pending):
            raise unresolved
        pending = deferred
    return merge_definitions(definitions)


def _redefinition_message(existing: TypeDefinition, duplicate: TypeDefinition) -> str:
    sources = sorted({str(item.source) for item in (existing, duplicate) if item.source})
    suffix = f" ({', '.join(sources)})" if sources else ""
    return f"Can't redefine: {duplicate.full_name}{suffix}"


class _SchemaReader:
    def __init__(self, known: Mapping[str, TypeDefinition], source: Path | None) -> None:
        self._known = known
        self._source = source
        self._defined: dict[str, TypeDefinition] = {}
        self._in_progress: set[str] = set()
        self.definitions: list[TypeDefinition] = []

    def read(self, node: Any, *, namespace: str | None) -> TypeReference:
        if isinstance(node, str):
            if node in PRIMITIVE_TYPE_NAMES:
                return PrimitiveType(node)
            return NamedType(self._resolve(node, namespace))
        if isinstance(node, list):
            if not node:
                raise self._error("Union must contain at least one branch.")
            return UnionType(tuple(self.read(branch, namespace=namespace) for branch in node))
        if isinstance(node, Mapping):
            return self._read_mapping(node, namespace)
        raise self._error(f"Unsupported schema segment: {node!r}")

    def _read_mapping(self, node: Mapping[str, Any], namespace: str | None) -> TypeReference:
        type_value = node.get("type")
        if type_value in ("record", "error"):
            return self._read_record(node, namespace)
        if type_value == "enum":
            return self._read_enum(node, namespace)
        if type_value == "fixed":
            return self._read_fixed(node, namespace)
        if type_value == "array":
            if "items" not in node:
                raise self._error("Array schema requires items.")
            return ArrayType(
                self.read(node["items"], namespace=namespace),
                properties=_extra_properties(node, {"type", "items"}),
            )
        if type_value == "map":
            if "values" not in node:
                raise self._error("Map schema requires values.")
            return MapType(
                self.read(node["values"], namespace=namespace),
                properties=_extra_properties(node, {"type", "values"}),
            )
        if isinstance(type_value, str) and type_value in PRIMITIVE_TYPE_NAMES:
            return PrimitiveType(
                type_value,
                logical_type=node.get("logicalType"),
                precision=node.get("precision"),
                scale=node.get("scale"),
                properties=_extra_properties(node, _PRIMITIVE_RESERVED_KEYS),
            )
        if isinstance(type_value, (str, list, Mapping)):
            return self.read(type_value, namespace=namespace)
        raise self._error(f"Schema type is missing or invalid: {node!r}")

    def _read_record(self, node: Mapping[str, Any], namespace: str | None) -> NamedType:
        full_name = self._declared_name(node, namespace)
        fields_node = node.get("fields")
        if not isinstance(fields_node, Sequence) or isinstance(fields_node, str):
            raise self._error(f"Record {full_name} requires a fields list.")
        self._in_progress.add(full_name)
        inner_namespace = full_name.rpartition(".")[0] or None
        fields = tuple(self._read_field(item, full_name, inner_namespace) for item in fields_node)
        self._in_progress.discard(full_name)
        self._define(
            RecordDefinition(
                full_name=full_name,
                fields=fields,
                is_error=node.get("type") == "error",
                aliases=_string_tuple(node.get("aliases")),
                properties=_extra_properties(node, _RECORD_RESERVED_KEYS),
                doc=node.get("doc"),
                source=self._source,
            )
        )
        return NamedType(full_name)

    def _read_field(
        self, node: Any, record_name: str, namespace: str | None
    ) -> FieldDefinition:
        if not isinstance(node, Mapping) or not isinstance(node.get("name"), str):
            raise self._error(f"Fields of {record_name} must be objects with a name.")
        if "type" not in node:
            raise self._error(f"Field {record_name}.{node['name']} requires a type.")
        order = node.get("order")
        if order is not None and order not in _VALID_FIELD_ORDERS:
            raise self._error(f"Field {record_name}.{node['name']} has invalid order: {order}")
        return FieldDefinition(
            name=node["name"],
            type=self.read(node["type"], namespace=namespace),
            default=node.get("default"),
            has_default="default" in node,
            order=order,
            aliases=_string_tuple(node.get("aliases")),
            properties=_extra_properties(node, _FIELD_RESERVED_KEYS),
            doc=node.get("doc"),
        )

    def _read_enum(self, node: Mapping[str, Any], namespace: str | None) -> NamedType:
        full_name = self._declared_name(node, namespace)
        symbols = node.get("symbols")
        if not isinstance(symbols, Sequence) or isinstance(symbols, str):
            raise self._error(f"Enum {full_name} requires a symbols list.")
        if len(set(symbols)) != len(symbols):
            raise self._error(f"Enum {full_name} has duplicate symbols.")
        default = node.get("default")
        if default is not None and default not in symbols:
            raise self._error(f"Enum {full_name} default {default} is not a symbol.")
        self._define(
            EnumDefinition(
                full_name=full_name,
                symbols=tuple(symbols),
                default=default,
                aliases=_string_tuple(node.get("aliases")),
                properties=_extra_properties(node, _ENUM_RESERVED_KEYS),
                doc=node.get("doc"),
                source=self._source,
            )
        )
        return NamedType(full_name)

    def _read_fixed(self, node: Mapping[str, Any], namespace: str | None) -> NamedType:
        full_name = self._declared_name(node, namespace)
        size = node.get("size")
        if isinstance(size, bool) or not isinstance(size, int) or size < 0:
            raise self._error(f"Fixed {full_name} requires a non-negative integer size.")
        self._define(
            FixedDefinition(
                full_name=full_name,
                size=size,
                aliases=_string_tuple(node.get("aliases")),
                properties=_extra_properties(node, _FIXED_RESERVED_KEYS),
                doc=node.get("doc"),
                source=self._source,
            )
        )
        return NamedType(full_name)

    def _declared_name(self, node: Mapping[str, Any], namespace: str | None) -> str:
        name = node.get("name")
        if not isinstance(name, str) or not name:
            raise self._error(f"Named schema requires a name: {node.get('type')}")
        declared_namespace = node.get("namespace", namespace)
        if declared_namespace is not None and not isinstance(declared_namespace, str):
            raise self._error(f"Namespace of {name} must be a string.")
        return qualify_name(name, declared_namespace)

    def _define(self, definition: TypeDefinition) -> None:
        existing = self._defined.get(definition.full_name) or self._known.get(
            definition.full_name
        )
        if existing is not None and existing != definition:
            raise self._error(_redefinition_message(existing, definition))
        if definition.full_name not in self._defined:
            self._defined[definition.full_name] = definition
            self.definitions.append(definition)

    def _resolve(self, name: str, namespace: str | None) -> str:
        for candidate in (qualify_name(name, namespace), name):
            if (
                candidate in self._defined
                or candidate in self._in_progress
                or candidate in self._known
            ):
                return candidate
        raise UnresolvedReferenceError(name, self._source)

    def _error(self, message: str) -> SchemaParseError:
        if self._source is not None:
            return SchemaParseError(f"{message} ({self._source})")
        return SchemaParseError(message)


def _extra_properties(node: Mapping[str, Any], reserved: Iterable[str]) -> dict[str, Any]:
    reserved_keys = set(reserved)
    return {key: value for key, value in node.items() if key not in reserved_keys}


def _string_tuple(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(str(item) for item in value)
