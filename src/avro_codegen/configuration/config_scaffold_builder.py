"""Configuration scaffold generation helpers."""

from __future__ import annotations

from pathlib import Path

DEFAULT_CONFIG_FILENAME = "avro-codegen.yaml"

_CONFIG_SCAFFOLD_TEMPLATE = """# Build configuration for avro-codegen.
# Every setting is optional; the values below are the defaults.
# Relative paths resolve against the directory of this file.

avro:
  # Subfolder used below every directory in `paths` for lookup and output.
  directory_name: "avro"
  # File ending of Avro schema files, used for lookup and output.
  schema_file_extension: "avsc"
  # File ending of Avro IDL files, used for lookup.
  idl_file_extension: "avdl"
  # false: schema files may reference types from sibling schema files by name.
  # true: referenced types must be repeated in full inside every schema file.
  use_type_repetition: false

paths:
  # Hand-authored IDL and schema files live in <resource_directory>/<directory_name>.
  resource_directory: "src/main/resources"
  # Schemas compiled from IDL are written to <resource_managed_directory>/<directory_name>.
  resource_managed_directory: "target/resource_managed"
  # Generated Python sources are written to <source_managed_directory>/<directory_name>.
  source_managed_directory: "target/src_managed"
"""


def build_placeholder_configuration() -> str:
    """Build a YAML build configuration with defaults and inline guidance."""
    return _CONFIG_SCAFFOLD_TEMPLATE


def write_placeholder_configuration(output_path: Path | str) -> Path:
    """Write the build configuration scaffold to the requested output path.

    Args:
      output_path: Destination file path for the scaffold.

    Returns:
      The resolved destination path.

    Raises:
      FileExistsError: If the destination file already exists.
      OSError: If writing the scaffold fails.
    """
    destination = Path(output_path)
    if destination.exists():
        raise FileExistsError(f"Build configuration file already exists: {destination.resolve()}")
    destination.write_text(build_placeholder_configuration(), encoding="utf-8")
    return destination.resolve()
