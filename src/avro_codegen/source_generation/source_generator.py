"""Schema to Python source generation service."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path, PurePosixPath

from avro_codegen.schema_management.schema_models import GenerationMode, TypeDefinition
from avro_codegen.schema_management.schema_parsing import merge_definitions, parse_schema_files

from .module_builder import build_modules
from .source_rendering import render_module

LOGGER = logging.getLogger(__name__)


def render_sources(definitions: Sequence[TypeDefinition]) -> dict[PurePosixPath, str]:
    """Render source file contents keyed by path relative to the output directory."""
    by_name = {definition.full_name: definition for definition in definitions}
    return {module.path: render_module(module, by_name) for module in build_modules(definitions)}


def generate_sources(
    managed_files: Iterable[Path],
    unmanaged_files: Iterable[Path],
    output_directory: Path | str,
    mode: GenerationMode,
) -> list[Path]:
    """Generate Python sources from managed and unmanaged schema files.

    Managed files always resolve references across the whole managed set;
    unmanaged files use `mode`. Nothing is written unless every file parses
    and every module renders.
    """
    managed = sorted(managed_files)
    unmanaged = sorted(unmanaged_files)
    LOGGER.info("[avro-codegen] Found %d schemas", len(managed) + len(unmanaged))

    definitions = merge_definitions(
        [
            *parse_schema_files(managed, GenerationMode.MULTI_PASS),
            *parse_schema_files(unmanaged, mode),
        ]
    )
    LOGGER.info("[avro-codegen] Generated %d classes", len(definitions))

    rendered = render_sources(definitions)
    out_dir = Path(output_directory)
    written: list[Path] = []
    for relative_path, text in rendered.items():
        target = out_dir.joinpath(*relative_path.parts)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")
        written.append(target)
    LOGGER.info("[avro-codegen] Wrote class files to [%s]", out_dir)
    return written
