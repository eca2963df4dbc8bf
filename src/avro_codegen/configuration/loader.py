"""Configuration loader service."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from .runtime_settings import AvroSettings, BuildConfiguration, ProjectLayout

DEFAULT_RESOURCE_DIRECTORY = "src/main/resources"
DEFAULT_RESOURCE_MANAGED_DIRECTORY = "target/resource_managed"
DEFAULT_SOURCE_MANAGED_DIRECTORY = "target/src_managed"


class ConfigurationError(Exception):
    """Raised when the configuration file is invalid."""


def load_configuration(config_path: Path | str) -> BuildConfiguration:
    """Load and validate the configuration file."""
    path = Path(config_path)
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    text = path.read_text(encoding="utf-8")
    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse configuration file: {exc}") from exc

    if parsed is None:
        parsed = {}

    if not isinstance(parsed, Mapping):
        raise ConfigurationError("Configuration root must be a mapping.")

    base_path = path.resolve().parent
    return BuildConfiguration(
        path=path,
        avro=_parse_avro_section(parsed.get("avro")),
        layout=_parse_paths_section(parsed.get("paths"), base_path),
    )


def default_configuration(project_dir: Path | str = ".") -> BuildConfiguration:
    """Return the default configuration rooted at `project_dir`."""
    return BuildConfiguration(
        path=None,
        avro=AvroSettings(),
        layout=_parse_paths_section(None, Path(project_dir).resolve()),
    )


def _parse_avro_section(value: Any) -> AvroSettings:
    section = _optional_mapping(value, "avro")
    defaults = AvroSettings()
    return AvroSettings(
        directory_name=_require_non_empty_string(
            section.get("directory_name", defaults.directory_name), "avro.directory_name"
        ),
        schema_file_extension=_require_extension(
            section.get("schema_file_extension", defaults.schema_file_extension),
            "avro.schema_file_extension",
        ),
        idl_file_extension=_require_extension(
            section.get("idl_file_extension", defaults.idl_file_extension),
            "avro.idl_file_extension",
        ),
        use_type_repetition=_require_bool(
            section.get("use_type_repetition", defaults.use_type_repetition),
            "avro.use_type_repetition",
        ),
    )


def _parse_paths_section(value: Any, base_path: Path) -> ProjectLayout:
    section = _optional_mapping(value, "paths")
    return ProjectLayout(
        resource_directory=_resolve_path(
            base_path,
            _require_non_empty_string(
                section.get("resource_directory", DEFAULT_RESOURCE_DIRECTORY),
                "paths.resource_directory",
            ),
        ),
        resource_managed_directory=_resolve_path(
            base_path,
            _require_non_empty_string(
                section.get("resource_managed_directory", DEFAULT_RESOURCE_MANAGED_DIRECTORY),
                "paths.resource_managed_directory",
            ),
        ),
        source_managed_directory=_resolve_path(
            base_path,
            _require_non_empty_string(
                section.get("source_managed_directory", DEFAULT_SOURCE_MANAGED_DIRECTORY),
                "paths.source_managed_directory",
            ),
        ),
    )


def _resolve_path(base_path: Path, raw_path: str) -> Path:
    candidate = Path(raw_path)
    if not candidate.is_absolute():
        return (base_path / candidate).resolve()
    return candidate


def _optional_mapping(value: Any, section_name: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Configuration section '{section_name}' must be a mapping.")
    return value


def _require_non_empty_string(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    if not stripped:
        raise ConfigurationError(f"{field_name} must not be empty.")
    return stripped


def _require_extension(value: Any, field_name: str) -> str:
    extension = _require_non_empty_string(value, field_name).lstrip(".")
    if not extension:
        raise ConfigurationError(f"{field_name} must not be empty.")
    return extension


def _require_bool(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigurationError(f"{field_name} must be a boolean.")
    return value
