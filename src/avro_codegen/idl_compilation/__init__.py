"""IDL compilation exports."""

from .idl_compiler import compile_idl
from .idl_grammar import IdlSyntaxError, parse_idl_text
from .idl_protocols import IdlParseError, ProtocolDefinition, parse_idl_file
from .schema_deduplication import SchemaConflictError, deduplicate_definitions

__all__ = [
    "compile_idl",
    "IdlSyntaxError",
    "parse_idl_text",
    "IdlParseError",
    "ProtocolDefinition",
    "parse_idl_file",
    "SchemaConflictError",
    "deduplicate_definitions",
]
