"""Configuration domain entities."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from avro_codegen.file_discovery.file_filters import FilterSpec
from avro_codegen.schema_management.schema_models import GenerationMode


@dataclass(frozen=True)
class AvroSettings:
    """Lookup and output conventions for Avro files."""

    directory_name: str = "avro"
    schema_file_extension: str = "avsc"
    idl_file_extension: str = "avdl"
    use_type_repetition: bool = False

    @property
    def generation_mode(self) -> GenerationMode:
        return GenerationMode.from_type_repetition(self.use_type_repetition)


@dataclass(frozen=True)
class ProjectLayout:
    """Project directories the pipeline reads from and writes to."""

    resource_directory: Path
    resource_managed_directory: Path
    source_managed_directory: Path


@dataclass(frozen=True)
class BuildConfiguration:
    """Top-level configuration aggregate."""

    path: Path | None
    avro: AvroSettings
    layout: ProjectLayout

    @property
    def idl_directory(self) -> Path:
        return self.layout.resource_directory / self.avro.directory_name

    @property
    def schema_directory(self) -> Path:
        return self.layout.resource_directory / self.avro.directory_name

    @property
    def schema_output_directory(self) -> Path:
        return self.layout.resource_managed_directory / self.avro.directory_name

    @property
    def source_output_directory(self) -> Path:
        return self.layout.source_managed_directory / self.avro.directory_name

    @property
    def idl_filter(self) -> FilterSpec:
        return FilterSpec.for_extension(self.avro.idl_file_extension)

    @property
    def schema_filter(self) -> FilterSpec:
        return FilterSpec.for_extension(self.avro.schema_file_extension)

    @property
    def generation_mode(self) -> GenerationMode:
        return self.avro.generation_mode
