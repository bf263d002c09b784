"""Directory enumeration for the package tree checks."""

import os
from collections.abc import Callable
from pathlib import Path

PathPredicate = Callable[[Path], bool]


def get_files_recursive(directory: Path, predicate: PathPredicate | None = None) -> list[Path]:
    """List every file and directory below ``directory``.

    Args:
        directory: Root of the walk
        predicate: Optional filter applied to each path

    Returns:
        Sorted list of paths; empty when ``directory`` does not exist
    """
    directory = Path(directory)
    if not directory.is_dir():
        return []

    found = []
    for root, dirs, files in os.walk(directory):
        for name in dirs + files:
            found.append(Path(root) / name)
    return _filtered(found, predicate)


def get_files_non_recursive(directory: Path, predicate: PathPredicate | None = None) -> list[Path]:
    """List the immediate children of ``directory``; empty when it does not exist."""
    directory = Path(directory)
    if not directory.is_dir():
        return []
    return _filtered(list(directory.iterdir()), predicate)


def _filtered(paths: list[Path], predicate: PathPredicate | None) -> list[Path]:
    if predicate is not None:
        paths = [path for path in paths if predicate(path)]
    return sorted(paths, key=lambda p: p.as_posix())


def has_extension(extension: str) -> PathPredicate:
    """Predicate matching regular files with the given extension (case-insensitive)."""
    extension = extension.lower()
    return lambda path: path.is_file() and path.suffix.lower() == extension


def is_directory(path: Path) -> bool:
    return path.is_dir()


def is_regular_file(path: Path) -> bool:
    return not path.is_dir()


def is_empty(path: Path) -> bool:
    """True for an empty directory or a zero-length file."""
    if path.is_dir():
        return not any(path.iterdir())
    return path.stat().st_size == 0


def is_empty_directory(path: Path) -> bool:
    return path.is_dir() and not any(path.iterdir())
