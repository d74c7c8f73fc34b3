"""Collector protocol — all language collectors conform to this interface."""

from __future__ import annotations

from typing import Protocol

from structgraph.frontend.base import Program, SourceUnit
from structgraph.model import Module


class Collector(Protocol):
    """Protocol for per-unit structure collectors."""

    def collect(self, unit: SourceUnit, program: Program) -> Module:
        """Return the Module declared by *unit*."""
        ...
