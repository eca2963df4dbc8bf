"""IDL compilation integration tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from avro_codegen.idl_compilation import IdlParseError, SchemaConflictError, compile_idl
from avro_codegen.schema_management import GenerationMode, parse_schema_files

SHARED_IDL = """
@namespace("ns")
protocol Shared {
  record A { string name; }
}
"""

EXTENDED_IDL = """
@namespace("ns")
protocol Extended {
  record A { string name; }
  record B { ns.A a; }
}
"""


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_compile_idl_writes_one_file_per_unique_record(tmp_path: Path) -> None:
    sources = [
        _write(tmp_path / "idl" / "shared.avdl", SHARED_IDL),
        _write(tmp_path / "idl" / "extended.avdl", EXTENDED_IDL),
    ]
    out_dir = tmp_path / "out"

    written = compile_idl(sources, out_dir, "avsc")

    assert sorted(path.name for path in written) == ["ns.A.avsc", "ns.B.avsc"]
    assert sorted(path.name for path in out_dir.iterdir()) == ["ns.A.avsc", "ns.B.avsc"]
    assert json.loads((out_dir / "ns.A.avsc").read_text(encoding="utf-8")) == {
        "type": "record",
        "name": "A",
        "namespace": "ns",
        "fields": [{"name": "name", "type": "string"}],
    }
    assert json.loads((out_dir / "ns.B.avsc").read_text(encoding="utf-8")) == {
        "type": "record",
        "name": "B",
        "namespace": "ns",
        "fields": [
            {
                "name": "a",
                "type": {
                    "type": "record",
                    "name": "A",
                    "fields": [{"name": "name", "type": "string"}],
                },
            }
        ],
    }


def test_compile_idl_output_is_byte_identical_across_runs(tmp_path: Path) -> None:
    sources = [
        _write(tmp_path / "extended.avdl", EXTENDED_IDL),
        _write(tmp_path / "shared.avdl", SHARED_IDL),
    ]
    out_dir = tmp_path / "out"

    compile_idl(sources, out_dir, ".avsc")
    first_run = {path.name: path.read_bytes() for path in out_dir.iterdir()}
    compile_idl(list(reversed(sources)), out_dir, ".avsc")
    second_run = {path.name: path.read_bytes() for path in out_dir.iterdir()}

    assert first_run == second_run


def test_conflicting_definitions_abort_before_writing(tmp_path: Path) -> None:
    one = '@namespace("ns") protocol One { record Foo { string name; } }'
    two = '@namespace("ns") protocol Two { record Foo { int name; } }'
    sources = [_write(tmp_path / "one.avdl", one), _write(tmp_path / "two.avdl", two)]
    out_dir = tmp_path / "out"

    with pytest.raises(SchemaConflictError, match="ns.Foo") as exc_info:
        compile_idl(sources, out_dir, "avsc")

    assert [path.name for path in exc_info.value.sources] == ["one.avdl", "two.avdl"]
    assert not out_dir.exists()


def test_enums_and_fixed_types_do_not_get_their_own_files(tmp_path: Path) -> None:
    source = _write(
        tmp_path / "types.avdl",
        '@namespace("ns") protocol Types { enum Suit { SPADES } fixed Digest(4); }',
    )
    out_dir = tmp_path / "out"

    written = compile_idl([source], out_dir, "avsc")

    assert written == []
    assert list(out_dir.iterdir()) == []


def test_nested_enum_is_inlined_into_the_record_schema(tmp_path: Path) -> None:
    source = _write(
        tmp_path / "cards.avdl",
        '@namespace("ns") protocol Cards { enum Suit { SPADES } record Card { Suit suit; } }',
    )
    out_dir = tmp_path / "out"

    (written,) = compile_idl([source], out_dir, "avsc")

    assert written.name == "ns.Card.avsc"
    document = json.loads(written.read_text(encoding="utf-8"))
    assert document["fields"][0]["type"] == {"type": "enum", "name": "Suit", "symbols": ["SPADES"]}


def test_invalid_idl_aborts_before_writing(tmp_path: Path) -> None:
    sources = [
        _write(tmp_path / "good.avdl", SHARED_IDL),
        _write(tmp_path / "bad.avdl", "protocol Bad { record { } }"),
    ]
    out_dir = tmp_path / "out"

    with pytest.raises(IdlParseError):
        compile_idl(sources, out_dir, "avsc")

    assert not out_dir.exists()


def test_type_without_namespace_keeps_its_name_when_nested_in_a_namespaced_record(
    tmp_path: Path,
) -> None:
    source = _write(
        tmp_path / "nested.avdl",
        '@namespace("ns") protocol P {'
        ' @namespace("") record Inner { int x; }'
        " record Outer { Inner inner; } }",
    )
    out_dir = tmp_path / "out"

    written = compile_idl([source], out_dir, "avsc")

    assert sorted(path.name for path in written) == ["Inner.avsc", "ns.Outer.avsc"]
    outer = json.loads((out_dir / "ns.Outer.avsc").read_text(encoding="utf-8"))
    assert outer["fields"][0]["type"]["namespace"] == ""
    reparsed = parse_schema_files(sorted(out_dir.iterdir()), GenerationMode.MULTI_PASS)
    assert {definition.full_name for definition in reparsed} == {"Inner", "ns.Outer"}
