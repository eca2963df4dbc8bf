"""Recursive file listing and include/exclude filtering."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path

FileFilter = Callable[[Path], bool]

HIDDEN_FILE_GLOB = ".*"
UNDERSCORE_FILE_GLOB = "_*"


@dataclass(frozen=True)
class FilterSpec:
    """Include globs minus exclude globs, matched against file names."""

    include: tuple[str, ...]
    exclude: tuple[str, ...] = (HIDDEN_FILE_GLOB, UNDERSCORE_FILE_GLOB)

    @classmethod
    def for_extension(cls, extension: str) -> FilterSpec:
        return cls(include=(f"*.{extension.lstrip('.')}",))


def glob_filter(patterns: str | Sequence[str]) -> FileFilter:
    """Accept paths whose file name matches any of the glob patterns."""
    globs = (patterns,) if isinstance(patterns, str) else tuple(patterns)
    return lambda path: any(fnmatchcase(path.name, glob) for glob in globs)


def directory_filter(path: Path) -> bool:
    return path.is_dir()


def build_file_filter(spec: FilterSpec) -> FileFilter:
    """Combine a filter spec into one predicate.

    Directories, hidden files and names starting with `_` are always
    rejected, whatever the include globs say.
    """
    include = glob_filter(spec.include)
    exclude = glob_filter((*spec.exclude, HIDDEN_FILE_GLOB, UNDERSCORE_FILE_GLOB))

    def _accept(path: Path) -> bool:
        return include(path) and not exclude(path) and not directory_filter(path)

    return _accept


def list_recursively(root: Path | str) -> list[Path]:
    """Return every entry below `root`, or `[root]` when it is a file.

    A missing or empty directory yields an empty list.
    """
    root_path = Path(root)
    if root_path.is_file():
        return [root_path]
    if not root_path.is_dir():
        return []
    entries: list[Path] = []
    for child in sorted(root_path.iterdir()):
        entries.append(child)
        if child.is_dir():
            entries.extend(list_recursively(child))
    return entries


def apply_filter(files: Iterable[Path], spec: FilterSpec) -> list[Path]:
    accept = build_file_filter(spec)
    return [path for path in files if accept(path)]


def discover_files(root: Path | str, spec: FilterSpec) -> list[Path]:
    """List and filter files below `root` in a stable order."""
    return sorted(apply_filter(list_recursively(root), spec))
