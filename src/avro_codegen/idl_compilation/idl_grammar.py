"""Avro IDL grammar and syntax tree transformation."""

from __future__ import annotations

import bisect
import json
import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any

from lark import Lark, Token, Transformer, v_args
from lark.exceptions import LarkError, UnexpectedInput, VisitError

from avro_codegen.schema_management.schema_models import (
    ArrayType,
    MapType,
    NamedType,
    PrimitiveType,
    TypeReference,
    UnionType,
)

IDL_GRAMMAR = r"""
start: annotations "protocol" identifier "{" _protocol_item* "}"

_protocol_item: import_decl
              | record_decl
              | enum_decl
              | fixed_decl
              | message_decl

annotations: annotation*
annotation: "@" ANNOTATION_NAME "(" json_value ")"

import_decl: "import" import_kind STRING ";"
!import_kind: "idl" | "protocol" | "schema"

record_decl: annotations record_kind identifier "{" field_decl* "}"
!record_kind: "record" | "error"
enum_decl: annotations "enum" identifier "{" (identifier ("," identifier)*)? "}" enum_default?
enum_default: "=" identifier ";"
fixed_decl: annotations "fixed" identifier "(" INT ")" ";"

message_decl: annotations message_result identifier _parameters message_tail? ";"
_parameters: "(" (parameter ("," parameter)*)? ")"
message_result: field_type
              | "void" -> void_result
parameter: annotations field_type variable
message_tail: "oneway" -> oneway
            | "throws" identifier ("," identifier)* -> throws

field_decl: annotations field_type variable ("," variable)* ";"
variable: annotations identifier ("=" json_value)?

field_type: _type_body OPTIONAL?
_type_body: primitive_type
          | logical_type
          | decimal_type
          | array_type
          | map_type
          | union_type
          | reference_type
!primitive_type: "boolean" | "int" | "long" | "float" | "double" | "bytes" | "string" | "null"
!logical_type: "date" | "time_ms" | "timestamp_ms" | "local_timestamp_ms" | "uuid"
decimal_type: "decimal" "(" INT ("," INT)? ")"
array_type: "array" "<" field_type ">"
map_type: "map" "<" field_type ">"
union_type: "union" "{" field_type ("," field_type)* "}"
reference_type: identifier

identifier: NAME | QUOTED_NAME

?json_value: json_object
           | json_array
           | STRING -> json_string
           | SIGNED_NUMBER -> json_number
           | "true" -> json_true
           | "false" -> json_false
           | "null" -> json_null
json_object: "{" (json_pair ("," json_pair)*)? "}"
json_pair: STRING ":" json_value
json_array: "[" (json_value ("," json_value)*)? "]"

OPTIONAL: "?"
NAME: /[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*/
QUOTED_NAME: /`[A-Za-z_][A-Za-z0-9_.]*`/
ANNOTATION_NAME: /[A-Za-z_][A-Za-z0-9_.\-]*/
DOC_COMMENT: /\/\*\*(?!\/)[\s\S]*?\*\//
BLOCK_COMMENT: /\/\*(?:\*\/|(?!\*)[\s\S]*?\*\/)/
LINE_COMMENT: /\/\/[^\n]*/

%import common.ESCAPED_STRING -> STRING
%import common.SIGNED_NUMBER
%import common.INT
%import common.WS
%ignore WS
%ignore DOC_COMMENT
%ignore BLOCK_COMMENT
%ignore LINE_COMMENT
"""

_LOGICAL_TYPES = {
    "date": ("int", "date"),
    "time_ms": ("int", "time-millis"),
    "timestamp_ms": ("long", "timestamp-millis"),
    "local_timestamp_ms": ("long", "local-timestamp-millis"),
    "uuid": ("string", "uuid"),
}
_INTEGER_PATTERN = re.compile(r"-?\d+")
_DOC_LINE_PREFIX = re.compile(r"^\s*\*\s?")


class IdlSyntaxError(Exception):
    """Raised when IDL text does not match the grammar."""


@dataclass(frozen=True)
class OptionalType:
    """Type written as `T?`; becomes a union with null once its default is known."""

    inner: TypeReference


@dataclass(frozen=True)
class ImportDeclaration:
    kind: str
    location: str


@dataclass(frozen=True)
class VariableDeclaration:
    name: str
    annotations: dict[str, Any]
    default: Any = None
    has_default: bool = False
    doc: str | None = None


@dataclass(frozen=True)
class FieldDeclaration:
    type: TypeReference | OptionalType
    type_annotations: dict[str, Any]
    variables: tuple[VariableDeclaration, ...]
    doc: str | None = None


@dataclass(frozen=True)
class RecordDeclaration:
    name: str
    is_error: bool
    annotations: dict[str, Any]
    fields: tuple[FieldDeclaration, ...]
    doc: str | None = None


@dataclass(frozen=True)
class EnumDeclaration:
    name: str
    annotations: dict[str, Any]
    symbols: tuple[str, ...]
    default: str | None = None
    doc: str | None = None


@dataclass(frozen=True)
class FixedDeclaration:
    name: str
    annotations: dict[str, Any]
    size: int
    doc: str | None = None


Declaration = ImportDeclaration | RecordDeclaration | EnumDeclaration | FixedDeclaration


@dataclass(frozen=True)
class ProtocolDeclaration:
    name: str
    annotations: dict[str, Any]
    items: tuple[Declaration, ...] = field(default_factory=tuple)

    @property
    def namespace(self) -> str | None:
        return self.annotations.get("namespace") or None


@dataclass(frozen=True)
class _EnumDefault:
    symbol: str


class _IdlTextParser:  # pylint: disable=too-few-public-methods
    def __init__(self) -> None:
        self._doc_comments: list[Token] = []
        self._lark = Lark(
            IDL_GRAMMAR,
            parser="lalr",
            propagate_positions=True,
            lexer_callbacks={"DOC_COMMENT": self._doc_comments.append},
        )

    def parse(self, text: str) -> ProtocolDeclaration:
        self._doc_comments.clear()
        tree = self._lark.parse(text)
        return _DeclarationBuilder(text, list(self._doc_comments)).transform(tree)


@lru_cache(maxsize=1)
def _text_parser() -> _IdlTextParser:
    return _IdlTextParser()


def parse_idl_text(text: str) -> ProtocolDeclaration:
    """Parse IDL protocol text into unresolved declarations."""
    try:
        return _text_parser().parse(text)
    except UnexpectedInput as exc:
        raise IdlSyntaxError(
            f"line {exc.line}, column {exc.column}: {str(exc).splitlines()[0]}"
        ) from exc
    except VisitError as exc:
        raise IdlSyntaxError(str(exc.orig_exc)) from exc
    except LarkError as exc:
        raise IdlSyntaxError(str(exc)) from exc


class _DeclarationBuilder(Transformer):  # pylint: disable=too-many-public-methods
    def __init__(self, text: str, doc_comments: list[Token]) -> None:
        super().__init__()
        self._text = text
        self._doc_comments = sorted(doc_comments, key=lambda token: token.end_pos)
        self._doc_ends = [token.end_pos for token in self._doc_comments]

    def start(self, children: list[Any]) -> ProtocolDeclaration:
        annotations, name, *items = children
        return ProtocolDeclaration(
            name=name,
            annotations=annotations,
            items=tuple(item for item in items if item is not None),
        )

    def annotations(self, children: list[tuple[str, Any]]) -> dict[str, Any]:
        return dict(children)

    def annotation(self, children: list[Any]) -> tuple[str, Any]:
        name, value = children
        return str(name), value

    def import_decl(self, children: list[Any]) -> ImportDeclaration:
        kind, location = children
        return ImportDeclaration(kind=kind, location=json.loads(location))

    def import_kind(self, children: list[Token]) -> str:
        return str(children[0])

    def record_kind(self, children: list[Token]) -> str:
        return str(children[0])

    @v_args(meta=True)
    def record_decl(self, meta: Any, children: list[Any]) -> RecordDeclaration:
        annotations, kind, name, *fields = children
        return RecordDeclaration(
            name=name,
            is_error=kind == "error",
            annotations=annotations,
            fields=tuple(fields),
            doc=self._doc_before(meta),
        )

    @v_args(meta=True)
    def enum_decl(self, meta: Any, children: list[Any]) -> EnumDeclaration:
        annotations, name, *rest = children
        default = None
        if rest and isinstance(rest[-1], _EnumDefault):
            default = rest.pop().symbol
        return EnumDeclaration(
            name=name,
            annotations=annotations,
            symbols=tuple(rest),
            default=default,
            doc=self._doc_before(meta),
        )

    def enum_default(self, children: list[str]) -> _EnumDefault:
        return _EnumDefault(children[0])

    @v_args(meta=True)
    def fixed_decl(self, meta: Any, children: list[Any]) -> FixedDeclaration:
        annotations, name, size = children
        return FixedDeclaration(
            name=name, annotations=annotations, size=int(size), doc=self._doc_before(meta)
        )

    def message_decl(self, children: list[Any]) -> None:
        return None

    @v_args(meta=True)
    def field_decl(self, meta: Any, children: list[Any]) -> FieldDeclaration:
        type_annotations, field_type, *variables = children
        return FieldDeclaration(
            type=field_type,
            type_annotations=type_annotations,
            variables=tuple(variables),
            doc=self._doc_before(meta),
        )

    @v_args(meta=True)
    def variable(self, meta: Any, children: list[Any]) -> VariableDeclaration:
        annotations, name, *default = children
        return VariableDeclaration(
            name=name,
            annotations=annotations,
            default=default[0] if default else None,
            has_default=bool(default),
            doc=self._doc_before(meta),
        )

    def field_type(self, children: list[Any]) -> TypeReference | OptionalType:
        if len(children) == 2:
            if isinstance(children[0], UnionType):
                raise IdlSyntaxError("A union cannot be marked optional with '?'.")
            return OptionalType(children[0])
        return children[0]

    def primitive_type(self, children: list[Token]) -> PrimitiveType:
        return PrimitiveType(str(children[0]))

    def logical_type(self, children: list[Token]) -> PrimitiveType:
        base, logical = _LOGICAL_TYPES[str(children[0])]
        return PrimitiveType(base, logical_type=logical)

    def decimal_type(self, children: list[Token]) -> PrimitiveType:
        precision = int(children[0])
        scale = int(children[1]) if len(children) > 1 else 0
        return PrimitiveType("bytes", logical_type="decimal", precision=precision, scale=scale)

    def array_type(self, children: list[Any]) -> ArrayType:
        return ArrayType(_required(children[0]))

    def map_type(self, children: list[Any]) -> MapType:
        return MapType(_required(children[0]))

    def union_type(self, children: list[Any]) -> UnionType:
        return UnionType(tuple(_required(child) for child in children))

    def reference_type(self, children: list[str]) -> NamedType:
        return NamedType(children[0])

    def identifier(self, children: list[Token]) -> str:
        return str(children[0]).strip("`")

    def json_object(self, children: list[tuple[str, Any]]) -> dict[str, Any]:
        return dict(children)

    def json_pair(self, children: list[Any]) -> tuple[str, Any]:
        key, value = children
        return json.loads(key), value

    def json_array(self, children: list[Any]) -> list[Any]:
        return list(children)

    def json_string(self, children: list[Token]) -> str:
        return json.loads(children[0])

    def json_number(self, children: list[Token]) -> int | float:
        text = str(children[0])
        return int(text) if _INTEGER_PATTERN.fullmatch(text) else float(text)

    def json_true(self, _children: list[Any]) -> bool:
        return True

    def json_false(self, _children: list[Any]) -> bool:
        return False

    def json_null(self, _children: list[Any]) -> None:
        return None

    def _doc_before(self, meta: Any) -> str | None:
        if getattr(meta, "empty", True):
            return None
        index = bisect.bisect_right(self._doc_ends, meta.start_pos) - 1
        if index < 0:
            return None
        token = self._doc_comments[index]
        if self._text[token.end_pos : meta.start_pos].strip():
            return None
        return _clean_doc(str(token))


def _required(reference: TypeReference | OptionalType) -> TypeReference:
    if isinstance(reference, OptionalType):
        return UnionType((PrimitiveType("null"), reference.inner))
    return reference


def _clean_doc(comment: str) -> str | None:
    body = comment[3:-2]
    lines = [_DOC_LINE_PREFIX.sub("", line).rstrip() for line in body.splitlines()]
    text = "\n".join(lines).strip()
    return text or None
