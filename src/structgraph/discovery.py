"""Turn a target path into the ordered list of files to analyze."""

from __future__ import annotations

import logging
from fnmatch import fnmatch
from pathlib import Path

logger = logging.getLogger(__name__)

# Directory names never descended into.
_SKIP_DIRS = {"__pycache__", "node_modules"}


def get_files(
    target_path: Path, recursive: bool, exclude: list[str] | None = None
) -> list[Path]:
    """Return the files under *target_path*, sorted by path.

    A missing target is reported and yields no files.  A single file is
    returned as-is; directories are walked one level deep unless
    *recursive* is set.
    """
    if not target_path.exists():
        logger.warning("'%s' does not exist", target_path)
        return []

    if not target_path.is_dir():
        return [target_path]

    files = sorted(_walk(target_path, recursive))
    if exclude:
        files = [
            f for f in files if not _is_excluded(f.relative_to(target_path), exclude)
        ]
    return files


def _walk(directory: Path, recursive: bool) -> list[Path]:
    results: list[Path] = []
    for entry in sorted(directory.iterdir()):
        if entry.name.startswith("."):
            continue
        if entry.is_dir():
            if recursive and entry.name not in _SKIP_DIRS:
                results.extend(_walk(entry, recursive))
        elif entry.is_file():
            results.append(entry)
    return results


def _is_excluded(relative: Path, patterns: list[str]) -> bool:
    posix = relative.as_posix()
    return any(
        fnmatch(posix, pattern) or fnmatch(relative.name, pattern)
        for pattern in patterns
    )
