"""File listing and filtering tests."""

from __future__ import annotations

from pathlib import Path

from avro_codegen.file_discovery import (
    FilterSpec,
    apply_filter,
    discover_files,
    glob_filter,
    list_recursively,
)


def _touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("", encoding="utf-8")
    return path


def test_discover_files_skips_hidden_and_underscore_files(tmp_path: Path) -> None:
    visible = _touch(tmp_path / "a.avdl")
    _touch(tmp_path / ".hidden.avdl")
    _touch(tmp_path / "_skip.avdl")
    nested = _touch(tmp_path / "sub" / "b.avdl")

    assert discover_files(tmp_path, FilterSpec.for_extension("avdl")) == [visible, nested]


def test_discover_files_excludes_directories_matching_the_include_glob(tmp_path: Path) -> None:
    (tmp_path / "folder.avdl").mkdir()
    inner = _touch(tmp_path / "folder.avdl" / "inner.avdl")

    assert discover_files(tmp_path, FilterSpec.for_extension(".avdl")) == [inner]


def test_discover_files_applies_extra_excludes(tmp_path: Path) -> None:
    kept = _touch(tmp_path / "kept.avsc")
    _touch(tmp_path / "draft-1.avsc")
    _touch(tmp_path / "notes.txt")
    spec = FilterSpec(include=("*.avsc",), exclude=("draft-*",))

    assert discover_files(tmp_path, spec) == [kept]


def test_list_recursively_returns_empty_list_for_missing_directory(tmp_path: Path) -> None:
    assert list_recursively(tmp_path / "missing") == []


def test_list_recursively_returns_single_file_root(tmp_path: Path) -> None:
    path = _touch(tmp_path / "one.avsc")

    assert list_recursively(path) == [path]


def test_list_recursively_includes_directories(tmp_path: Path) -> None:
    nested = _touch(tmp_path / "sub" / "b.avdl")

    assert list_recursively(tmp_path) == [tmp_path / "sub", nested]


def test_apply_filter_keeps_input_order(tmp_path: Path) -> None:
    first = _touch(tmp_path / "z.avsc")
    second = _touch(tmp_path / "a.avsc")

    assert apply_filter([first, second], FilterSpec.for_extension("avsc")) == [first, second]


def test_glob_filter_matches_file_names_case_sensitively() -> None:
    accept = glob_filter(["*.avsc", "*.json"])

    assert accept(Path("dir/schema.avsc"))
    assert accept(Path("schema.json"))
    assert not accept(Path("schema.AVSC"))
