"""File discovery exports."""

from .file_filters import (
    FileFilter,
    FilterSpec,
    apply_filter,
    build_file_filter,
    discover_files,
    glob_filter,
    list_recursively,
)

__all__ = [
    "FileFilter",
    "FilterSpec",
    "apply_filter",
    "build_file_filter",
    "discover_files",
    "glob_filter",
    "list_recursively",
]
