"""Resolution of parsed IDL protocols into named type definitions."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from avro_codegen.schema_management.schema_models import (
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
    qualify_name,
)
from avro_codegen.schema_management.schema_parsing import (
    SchemaParseError,
    parse_schema_document,
    parse_schema_text,
)

from .idl_grammar import (
    EnumDeclaration,
    FieldDeclaration,
    FixedDeclaration,
    IdlSyntaxError,
    ImportDeclaration,
    OptionalType,
    RecordDeclaration,
    parse_idl_text,
)

_NAMED_ANNOTATIONS = frozenset({"namespace", "aliases"})
_FIELD_ANNOTATIONS = frozenset({"order", "aliases"})
_VALID_FIELD_ORDERS = frozenset({"ascending", "descending", "ignore"})


class IdlParseError(Exception):
    """Raised when an IDL file cannot be compiled into type definitions."""


@dataclass(frozen=True)
class ProtocolDefinition:
    """Named types declared by one IDL protocol, in declaration order."""

    name: str
    namespace: str | None
    types: tuple[TypeDefinition, ...]
    source: Path


def parse_idl_file(path: Path | str) -> ProtocolDefinition:
    """Parse one IDL file, including the files it imports."""
    return _parse_protocol(Path(path).resolve(), importing=frozenset())


def _parse_protocol(path: Path, *, importing: frozenset[Path]) -> ProtocolDefinition:
    text = path.read_text(encoding="utf-8")
    try:
        declaration = parse_idl_text(text)
    except IdlSyntaxError as exc:
        raise IdlParseError(f"Invalid IDL {path}: {exc}") from exc

    resolver = _ProtocolResolver(path, declaration.namespace)
    for item in declaration.items:
        if isinstance(item, ImportDeclaration):
            resolver.add_all(_load_import(path, item, importing | {path}, resolver.types))
        elif isinstance(item, RecordDeclaration):
            resolver.add(resolver.record(item))
        elif isinstance(item, EnumDeclaration):
            resolver.add(resolver.enum(item))
        elif isinstance(item, FixedDeclaration):
            resolver.add(resolver.fixed(item))

    return ProtocolDefinition(
        name=qualify_name(declaration.name, declaration.namespace),
        namespace=declaration.namespace,
        types=tuple(resolver.types.values()),
        source=path,
    )


def _load_import(
    path: Path,
    item: ImportDeclaration,
    importing: frozenset[Path],
    known: Mapping[str, TypeDefinition],
) -> list[TypeDefinition]:
    target = (path.parent / item.location).resolve()
    if not target.is_file():
        raise IdlParseError(f"Imported file not found: {target} (imported by {path})")
    if item.kind == "idl":
        if target in importing:
            raise IdlParseError(f"Circular IDL import of {target} (imported by {path})")
        return list(_parse_protocol(target, importing=importing).types)
    try:
        if item.kind == "schema":
            return parse_schema_text(target.read_text(encoding="utf-8"), source=target, known=known)
        return _parse_protocol_json(target, known)
    except SchemaParseError as exc:
        raise IdlParseError(f"Invalid import in {path}: {exc}") from exc


def _parse_protocol_json(
    path: Path, known: Mapping[str, TypeDefinition]
) -> list[TypeDefinition]:
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise SchemaParseError(f"Invalid protocol JSON {path}: {exc}") from exc
    if not isinstance(document, Mapping):
        raise SchemaParseError(f"Protocol {path} must be a JSON object.")
    visible = dict(known)
    definitions: list[TypeDefinition] = []
    for node in document.get("types") or ():
        parsed = parse_schema_document(
            node, source=path, known=visible, namespace=document.get("namespace")
        )
        for definition in parsed:
            visible.setdefault(definition.full_name, definition)
        definitions.extend(parsed)
    return definitions


class _ProtocolResolver:
    def __init__(self, source: Path, namespace: str | None) -> None:
        self._source = source
        self._namespace = namespace
        self.types: dict[str, TypeDefinition] = {}

    def add(self, definition: TypeDefinition) -> None:
        existing = self.types.setdefault(definition.full_name, definition)
        if existing != definition:
            raise IdlParseError(f"Can't redefine: {definition.full_name} in {self._source}")

    def add_all(self, definitions: list[TypeDefinition]) -> None:
        for definition in definitions:
            self.add(definition)

    def record(self, item: RecordDeclaration) -> RecordDefinition:
        full_name = self._full_name(item.name, item.annotations)
        namespace = full_name.rpartition(".")[0] or None
        fields = tuple(
            resolved
            for declaration in item.fields
            for resolved in self._fields(declaration, full_name, namespace)
        )
        return RecordDefinition(
            full_name=full_name,
            fields=fields,
            is_error=item.is_error,
            aliases=self._aliases(item.annotations, namespace),
            properties=_without(item.annotations, _NAMED_ANNOTATIONS),
            doc=item.doc,
            source=self._source,
        )

    def enum(self, item: EnumDeclaration) -> EnumDefinition:
        full_name = self._full_name(item.name, item.annotations)
        if len(set(item.symbols)) != len(item.symbols):
            raise IdlParseError(f"Enum {full_name} has duplicate symbols in {self._source}")
        if item.default is not None and item.default not in item.symbols:
            raise IdlParseError(
                f"Enum {full_name} default {item.default} is not a symbol in {self._source}"
            )
        return EnumDefinition(
            full_name=full_name,
            symbols=item.symbols,
            default=item.default,
            aliases=self._aliases(item.annotations, full_name.rpartition(".")[0] or None),
            properties=_without(item.annotations, _NAMED_ANNOTATIONS),
            doc=item.doc,
            source=self._source,
        )

    def fixed(self, item: FixedDeclaration) -> FixedDefinition:
        full_name = self._full_name(item.name, item.annotations)
        return FixedDefinition(
            full_name=full_name,
            size=item.size,
            aliases=self._aliases(item.annotations, full_name.rpartition(".")[0] or None),
            properties=_without(item.annotations, _NAMED_ANNOTATIONS),
            doc=item.doc,
            source=self._source,
        )

    def _fields(
        self, declaration: FieldDeclaration, record_name: str, namespace: str | None
    ) -> list[FieldDefinition]:
        fields = []
        for variable in declaration.variables:
            order = variable.annotations.get("order")
            if order is not None and order not in _VALID_FIELD_ORDERS:
                raise IdlParseError(
                    f"Field {record_name}.{variable.name} has invalid order {order!r}"
                    f" in {self._source}"
                )
            field_type = self._field_type(
                declaration, record_name, namespace, variable.has_default, variable.default
            )
            fields.append(
                FieldDefinition(
                    name=variable.name,
                    type=field_type,
                    default=variable.default,
                    has_default=variable.has_default,
                    order=order,
                    aliases=_string_tuple(variable.annotations.get("aliases")),
                    properties=_without(variable.annotations, _FIELD_ANNOTATIONS),
                    doc=variable.doc or declaration.doc,
                )
            )
        return fields

    def _field_type(
        self,
        declaration: FieldDeclaration,
        record_name: str,
        namespace: str | None,
        has_default: bool,
        default: Any,
    ) -> TypeReference:
        raw = declaration.type
        if isinstance(raw, OptionalType):
            inner = self._reference(raw.inner, record_name, namespace)
            null = PrimitiveType("null")
            branches = (inner, null) if has_default and default is not None else (null, inner)
            resolved: TypeReference = UnionType(branches)
        else:
            resolved = self._reference(raw, record_name, namespace)
        if not declaration.type_annotations:
            return resolved
        if isinstance(resolved, (PrimitiveType, ArrayType, MapType)):
            properties = {**resolved.properties, **declaration.type_annotations}
            return replace(resolved, properties=properties)
        raise IdlParseError(
            f"Annotations on named or union types are not supported"
            f" ({record_name}, {self._source})"
        )

    def _reference(
        self, reference: TypeReference, current: str, namespace: str | None
    ) -> TypeReference:
        if isinstance(reference, NamedType):
            return NamedType(self._resolve(reference.full_name, current, namespace))
        if isinstance(reference, ArrayType):
            return replace(reference, items=self._reference(reference.items, current, namespace))
        if isinstance(reference, MapType):
            return replace(
                reference, values=self._reference(reference.values, current, namespace)
            )
        if isinstance(reference, UnionType):
            return UnionType(
                tuple(self._reference(branch, current, namespace) for branch in reference.branches)
            )
        return reference

    def _resolve(self, name: str, current: str, namespace: str | None) -> str:
        for candidate in (qualify_name(name, namespace), qualify_name(name, self._namespace), name):
            if candidate == current or candidate in self.types:
                return candidate
        raise IdlParseError(f"Undefined name: {name} (referenced by {current} in {self._source})")

    def _full_name(self, name: str, annotations: Mapping[str, Any]) -> str:
        namespace = annotations.get("namespace", self._namespace)
        if namespace is not None and not isinstance(namespace, str):
            raise IdlParseError(f"@namespace of {name} must be a string in {self._source}")
        return qualify_name(name, namespace or None)

    def _aliases(self, annotations: Mapping[str, Any], namespace: str | None) -> tuple[str, ...]:
        return tuple(
            qualify_name(alias, namespace) for alias in _string_tuple(annotations.get("aliases"))
        )


def _without(annotations: Mapping[str, Any], reserved: frozenset[str]) -> dict[str, Any]:
    return {key: value for key, value in annotations.items() if key not in reserved}


def _string_tuple(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(str(item) for item in value)
