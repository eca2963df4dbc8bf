"""IDL to canonical schema compilation service."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from avro_codegen.schema_management.schema_models import TypeDefinition, is_record
from avro_codegen.schema_management.schema_serialization import render_schema_text

from .idl_protocols import parse_idl_file
from .schema_deduplication import deduplicate_definitions

LOGGER = logging.getLogger(__name__)


def compile_idl(
    idl_files: Iterable[Path], output_directory: Path | str, file_extension: str
) -> list[Path]:
    """Compile IDL files into one canonical schema file per unique record.

    Parsing, conflict detection and rendering complete before the first
    write, so a failing run leaves the output directory untouched.
    """
    sources = sorted(Path(path) for path in idl_files)
    LOGGER.info("[avro-codegen] Found %d IDLs", len(sources))

    definitions: list[TypeDefinition] = []
    for source in sources:
        definitions.extend(parse_idl_file(source).types)
    unique = deduplicate_definitions(definitions)
    LOGGER.info("[avro-codegen] Generated %d unique schema(-ta)", len(unique))

    out_dir = Path(output_directory)
    extension = file_extension if file_extension.startswith(".") else f".{file_extension}"
    rendered = {
        out_dir / f"{full_name}{extension}": render_schema_text(definition, unique)
        for full_name, definition in unique.items()
        if is_record(definition)
    }

    out_dir.mkdir(parents=True, exist_ok=True)
    for path, text in rendered.items():
        path.write_text(text, encoding="utf-8")
    LOGGER.info("[avro-codegen] Wrote schema(-ta) to [%s]", out_dir)
    return list(rendered)
