"""Front-end collaborator: parse source files into units for the collectors."""

from __future__ import annotations

import logging
from pathlib import Path

from structgraph.frontend import python as pyfront
from structgraph.frontend.base import (
    FrontEndFailure,
    Program,
    SourceUnit,
    working_directory,
)

logger = logging.getLogger(__name__)

__all__ = [
    "FrontEndFailure",
    "Program",
    "SourceUnit",
    "is_declaration_file",
    "language_of",
    "load_program",
    "working_directory",
]

_TS_SUFFIXES = {".ts", ".tsx", ".mts", ".cts"}
_TS_DECLARATION_SUFFIXES = (".d.ts", ".d.mts", ".d.cts")


def is_declaration_file(path: Path) -> bool:
    """Return True for declaration-only files (``.pyi`` stubs, ``.d.ts``)."""
    return path.suffix in pyfront.DECLARATION_SUFFIXES or path.name.endswith(
        _TS_DECLARATION_SUFFIXES
    )


def language_of(path: Path) -> str | None:
    if path.suffix in pyfront.SUFFIXES or path.suffix in pyfront.DECLARATION_SUFFIXES:
        return "python"
    if path.suffix in _TS_SUFFIXES:
        return "typescript"
    return None


def load_program(paths: list[Path], root: Path) -> Program:
    """Parse *paths* (relative to *root*, the current directory) into a Program.

    Declaration-only files are indexed by name but never become units.
    Files in languages without an available front-end are skipped.
    """
    program = Program()
    prefix = pyfront.package_prefix(root)
    tsfront = None
    ts_missing = False

    for path in paths:
        language = language_of(path)
        if language is None:
            logger.debug("Skipping %s: unsupported file type", path)
            continue

        if language == "typescript" and tsfront is None:
            if ts_missing:
                continue
            try:
                from structgraph.frontend import typescript as tsfront
            except ImportError:
                logger.warning(
                    "tree-sitter / tree-sitter-typescript not installed — "
                    "skipping TypeScript sources. "
                    "Install with: pip install structgraph[typescript]"
                )
                ts_missing = True
                continue

        if is_declaration_file(path):
            program.declaration_files.append(path)
            if language == "typescript":
                program.kinds.setdefault(tsfront.module_name(path), {})
            continue

        if language == "python":
            tree, source = pyfront.parse(path)
            name = pyfront.module_name(path, prefix)
            kinds = pyfront.declared_kinds(tree)
        else:
            tree, source = tsfront.parse(path)
            name = tsfront.module_name(path)
            kinds = tsfront.declared_kinds(tree)

        program.units.append(SourceUnit(path, name, language, tree, source))
        program.kinds.setdefault(name, {}).update(kinds)

    logger.debug(
        "Parsed %d unit(s), %d declaration file(s)",
        len(program.units),
        len(program.declaration_files),
    )
    return program
