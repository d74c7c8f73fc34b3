"""Collectors: turn one parsed source unit into one Module."""

from __future__ import annotations

from structgraph.collectors.base import Collector
from structgraph.collectors.python import PythonCollector
from structgraph.config import Settings
from structgraph.frontend.base import Program, SourceUnit
from structgraph.model import Module

__all__ = ["Collector", "PythonCollector", "collector_for", "collect"]


def collector_for(language: str, settings: Settings | None = None) -> Collector:
    """Return the collector handling units of *language*."""
    if language == "python":
        return PythonCollector(settings)
    if language == "typescript":
        from structgraph.collectors.typescript import TypeScriptCollector

        return TypeScriptCollector(settings)
    raise ValueError(f"No collector for language {language!r}")


def collect(unit: SourceUnit, program: Program, settings: Settings | None = None) -> Module:
    """Collect the Module declared by *unit*."""
    return collector_for(unit.language, settings).collect(unit, program)
