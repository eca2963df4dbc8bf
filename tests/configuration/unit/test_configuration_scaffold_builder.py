"""Configuration scaffold builder tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from avro_codegen.configuration.config_scaffold_builder import (
    build_placeholder_configuration,
    write_placeholder_configuration,
)
from avro_codegen.configuration.loader import load_configuration


def test_build_placeholder_configuration_contains_all_supported_sections() -> None:
    scaffold = build_placeholder_configuration()

    assert "avro:" in scaffold
    assert "paths:" in scaffold
    assert "use_type_repetition: false" in scaffold
    assert 'resource_managed_directory: "target/resource_managed"' in scaffold


def test_written_scaffold_loads_as_default_configuration(tmp_path: Path) -> None:
    output_path = tmp_path / "avro-codegen.yaml"

    written_path = write_placeholder_configuration(output_path)
    configuration = load_configuration(written_path)

    assert written_path == output_path.resolve()
    assert configuration.avro.use_type_repetition is False
    assert configuration.source_output_directory == (
        tmp_path.resolve() / "target" / "src_managed" / "avro"
    )


def test_write_placeholder_configuration_fails_when_file_exists(tmp_path: Path) -> None:
    output_path = tmp_path / "avro-codegen.yaml"
    output_path.write_text("existing", encoding="utf-8")

    with pytest.raises(FileExistsError):
        write_placeholder_configuration(output_path)
