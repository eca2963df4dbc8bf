"""Source generation exports."""

from .module_builder import ModuleDefinition, SourceRenderError, build_modules
from .source_generator import generate_sources, render_sources
from .source_rendering import GENERATED_HEADER, render_module

__all__ = [
    "ModuleDefinition",
    "SourceRenderError",
    "build_modules",
    "generate_sources",
    "render_sources",
    "GENERATED_HEADER",
    "render_module",
]
