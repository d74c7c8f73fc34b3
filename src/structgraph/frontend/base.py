"""Shared front-end types: parsed units, the program index and failures."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class FrontEndFailure(Exception):
    """A source file could not be parsed."""


@dataclass
class SourceUnit:
    """One parsed, non-declaration source file."""

    path: Path  # relative to the analysis root
    module_name: str
    language: str  # "python", "typescript"
    tree: Any
    source: bytes

    @property
    def is_package(self) -> bool:
        return self.path.name == "__init__.py"


@dataclass
class Program:
    """All units of one analysis run plus a name index across them."""

    units: list[SourceUnit] = field(default_factory=list)
    declaration_files: list[Path] = field(default_factory=list)
    # module name -> type name -> "class" / "interface" / "enum"
    kinds: dict[str, dict[str, str]] = field(default_factory=dict)

    def module_names(self) -> set[str]:
        return {unit.module_name for unit in self.units} | set(self.kinds)

    def kind_of(self, module: str | None, type_name: str) -> str | None:
        if module is None:
            return None
        return self.kinds.get(module, {}).get(type_name)


@contextmanager
def working_directory(path: Path) -> Iterator[Path]:
    """Change into *path* for the duration of the block, always restoring."""
    original = Path.cwd()
    os.chdir(path)
    logger.debug("Entered %s", path)
    try:
        yield path
    finally:
        os.chdir(original)
        logger.debug("Restored %s", original)
