"""IDL grammar tests."""

from __future__ import annotations

import pytest
from avro_codegen.idl_compilation import IdlSyntaxError, parse_idl_text
from avro_codegen.idl_compilation.idl_grammar import (
    EnumDeclaration,
    FixedDeclaration,
    ImportDeclaration,
    OptionalType,
    RecordDeclaration,
)
from avro_codegen.schema_management import (
    ArrayType,
    MapType,
    NamedType,
    PrimitiveType,
    UnionType,
)

CARDS_IDL = """
/** Card games. */
@namespace("games")
protocol Cards {
  import schema "money.avsc";

  /** Card suits. */
  enum Suit { SPADES, HEARTS } = SPADES;

  fixed Digest(16);

  /**
   * A playing card.
   * Printed on paper.
   */
  @aliases(["games.OldCard"])
  record Card {
    /** Face value. */
    int rank = 1;
    string? nickname = null;
    array<string> tags = [];
    map<long> counters = {};
    long @order("descending") weight;
    timestamp_ms printed;
    decimal(9, 2) price;
    union { null, Digest } digest = null;
    int `record`, second;
  }

  error Oops { string message; }

  string play(Card card) throws Oops;
  void ping() oneway;
}
"""


def _items_by_name(text: str) -> dict[str, object]:
    protocol = parse_idl_text(text)
    return {
        item.name: item
        for item in protocol.items
        if isinstance(item, (RecordDeclaration, EnumDeclaration, FixedDeclaration))
    }


def test_parse_idl_text_reads_protocol_header_and_imports() -> None:
    protocol = parse_idl_text(CARDS_IDL)

    assert protocol.name == "Cards"
    assert protocol.namespace == "games"
    assert protocol.items[0] == ImportDeclaration(kind="schema", location="money.avsc")


def test_parse_idl_text_ignores_messages() -> None:
    protocol = parse_idl_text(CARDS_IDL)

    assert [getattr(item, "name", None) for item in protocol.items[1:]] == [
        "Suit",
        "Digest",
        "Card",
        "Oops",
    ]


def test_parse_idl_text_reads_enum_and_fixed_declarations() -> None:
    items = _items_by_name(CARDS_IDL)

    assert items["Suit"] == EnumDeclaration(
        name="Suit",
        annotations={},
        symbols=("SPADES", "HEARTS"),
        default="SPADES",
        doc="Card suits.",
    )
    assert items["Digest"] == FixedDeclaration(name="Digest", annotations={}, size=16)


def test_parse_idl_text_attaches_doc_comments() -> None:
    card = _items_by_name(CARDS_IDL)["Card"]

    assert isinstance(card, RecordDeclaration)
    assert card.doc == "A playing card.\nPrinted on paper."
    assert card.fields[0].doc == "Face value."
    assert card.fields[1].doc is None


def test_parse_idl_text_reads_field_types() -> None:
    card = _items_by_name(CARDS_IDL)["Card"]
    types = [field.type for field in card.fields]

    assert types == [
        PrimitiveType("int"),
        OptionalType(PrimitiveType("string")),
        ArrayType(PrimitiveType("string")),
        MapType(PrimitiveType("long")),
        PrimitiveType("long"),
        PrimitiveType("long", logical_type="timestamp-millis"),
        PrimitiveType("bytes", logical_type="decimal", precision=9, scale=2),
        UnionType((PrimitiveType("null"), NamedType("Digest"))),
        PrimitiveType("int"),
    ]


def test_parse_idl_text_reads_variables_defaults_and_annotations() -> None:
    card = _items_by_name(CARDS_IDL)["Card"]
    variables = {variable.name: variable for field in card.fields for variable in field.variables}

    assert card.annotations == {"aliases": ["games.OldCard"]}
    assert variables["rank"].default == 1
    assert variables["nickname"].has_default is True
    assert variables["nickname"].default is None
    assert variables["tags"].default == []
    assert variables["counters"].default == {}
    assert variables["weight"].annotations == {"order": "descending"}
    assert variables["printed"].has_default is False
    assert set(variables) >= {"record", "second"}


def test_parse_idl_text_marks_error_records() -> None:
    oops = _items_by_name(CARDS_IDL)["Oops"]

    assert isinstance(oops, RecordDeclaration)
    assert oops.is_error is True


def test_parse_idl_text_reports_position_of_syntax_errors() -> None:
    with pytest.raises(IdlSyntaxError, match="line 1"):
        parse_idl_text("protocol Broken { record { } }")


def test_parse_idl_text_rejects_optional_unions() -> None:
    with pytest.raises(IdlSyntaxError, match="union cannot be marked optional"):
        parse_idl_text("protocol P { record R { union { null, int }? value; } }")
