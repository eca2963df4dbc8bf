"""Schema management entities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Union

PRIMITIVE_TYPE_NAMES = frozenset(
    {"null", "boolean", "int", "long", "float", "double", "bytes", "string"}
)


class TypeKind(str, Enum):
    """Kinds of named Avro type definitions."""

    RECORD = "record"
    ERROR = "error"
    ENUM = "enum"
    FIXED = "fixed"


class GenerationMode(str, Enum):
    """Reference resolution strategy used while parsing schema files."""

    SINGLE_PASS = "single_pass"
    MULTI_PASS = "multi_pass"

    @classmethod
    def from_type_repetition(cls, use_type_repetition: bool) -> GenerationMode:
        return cls.SINGLE_PASS if use_type_repetition else cls.MULTI_PASS


@dataclass(frozen=True)
class PrimitiveType:
    """Primitive type, optionally annotated with a logical type."""

    name: str
    logical_type: str | None = None
    precision: int | None = None
    scale: int | None = None
    properties: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class NamedType:
    """Reference to a named type by its full name."""

    full_name: str


@dataclass(frozen=True)
class ArrayType:
    items: TypeReference
    properties: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class MapType:
    values: TypeReference
    properties: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class UnionType:
    branches: tuple[TypeReference, ...]


TypeReference = Union[PrimitiveType, NamedType, ArrayType, MapType, UnionType]


@dataclass(frozen=True)
class FieldDefinition:  # pylint: disable=too-many-instance-attributes
    """Record field definition."""

    name: str
    type: TypeReference
    default: Any = None
    has_default: bool = False
    order: str | None = None
    aliases: tuple[str, ...] = ()
    properties: Mapping[str, Any] = field(default_factory=dict)
    doc: str | None = field(default=None, compare=False)


@dataclass(frozen=True)
class _NamedDefinition:
    full_name: str

    @property
    def name(self) -> str:
        return self.full_name.rpartition(".")[2]

    @property
    def namespace(self) -> str | None:
        namespace = self.full_name.rpartition(".")[0]
        return namespace or None


@dataclass(frozen=True)
class RecordDefinition(_NamedDefinition):
    """Record (or error) type definition."""

    fields: tuple[FieldDefinition, ...] = ()
    is_error: bool = False
    aliases: tuple[str, ...] = ()
    properties: Mapping[str, Any] = field(default_factory=dict)
    doc: str | None = field(default=None, compare=False)
    source: Path | None = field(default=None, compare=False)

    @property
    def kind(self) -> TypeKind:
        return TypeKind.ERROR if self.is_error else TypeKind.RECORD


@dataclass(frozen=True)
class EnumDefinition(_NamedDefinition):
    """Enum type definition."""

    symbols: tuple[str, ...] = ()
    default: str | None = None
    aliases: tuple[str, ...] = ()
    properties: Mapping[str, Any] = field(default_factory=dict)
    doc: str | None = field(default=None, compare=False)
    source: Path | None = field(default=None, compare=False)

    @property
    def kind(self) -> TypeKind:
        return TypeKind.ENUM


@dataclass(frozen=True)
class FixedDefinition(_NamedDefinition):
    """Fixed-size binary type definition."""

    size: int = 0
    aliases: tuple[str, ...] = ()
    properties: Mapping[str, Any] = field(default_factory=dict)
    doc: str | None = field(default=None, compare=False)
    source: Path | None = field(default=None, compare=False)

    @property
    def kind(self) -> TypeKind:
        return TypeKind.FIXED


TypeDefinition = Union[RecordDefinition, EnumDefinition, FixedDefinition]


def is_record(definition: TypeDefinition) -> bool:
    """Return True for definitions persisted as standalone schema files."""
    return isinstance(definition, RecordDefinition)


def qualify_name(name: str, namespace: str | None) -> str:
    """Return the full name of `name` declared inside `namespace`."""
    if "." in name or not namespace:
        return name
    return f"{namespace}.{name}"
