"""Schema management exports."""

from .schema_models import (
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
    TypeKind,
    TypeReference,
    UnionType,
    is_record,
)
from .schema_parsing import (
    SchemaParseError,
    UnresolvedReferenceError,
    merge_definitions,
    parse_schema_document,
    parse_schema_files,
    parse_schema_text,
)
from .schema_serialization import SchemaSerializationError, render_schema_text, schema_to_json

__all__ = [
    "ArrayType",
    "EnumDefinition",
    "FieldDefinition",
    "FixedDefinition",
    "GenerationMode",
    "MapType",
    "NamedType",
    "PrimitiveType",
    "RecordDefinition",
    "TypeDefinition",
    "TypeKind",
    "TypeReference",
    "UnionType",
    "is_record",
    "SchemaParseError",
    "UnresolvedReferenceError",
    "merge_definitions",
    "parse_schema_document",
    "parse_schema_files",
    "parse_schema_text",
    "SchemaSerializationError",
    "render_schema_text",
    "schema_to_json",
]
