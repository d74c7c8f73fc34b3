"""Orchestrator: discover → parse → collect → assemble → render."""

from __future__ import annotations

import logging
from pathlib import Path

from structgraph.assembler import assemble
from structgraph.collectors import collector_for
from structgraph.config import Settings, load_settings
from structgraph.discovery import get_files
from structgraph.frontend import load_program, working_directory
from structgraph.model import Module, OutputModule
from structgraph.renderer.dot import render_dot
from structgraph.renderer.plantuml import render_plantuml
from structgraph.resolver import output_modules

logger = logging.getLogger(__name__)


def get_modules(
    target_path: Path | str, recursive: bool = False, settings: Settings | None = None
) -> list[Module]:
    """Collect one Module per non-declaration source file under *target_path*."""
    target_path = Path(target_path)
    if settings is None:
        settings = load_settings(target_path)

    files = get_files(target_path, recursive, settings.exclude)
    if not files:
        logger.info("Found 0 module(s)")
        return []

    root = (target_path if target_path.is_dir() else target_path.parent).resolve()
    relative = [f.resolve().relative_to(root) for f in files]

    with working_directory(root):
        program = load_program(relative, root)
        collectors = {}
        modules: list[Module] = []
        for unit in program.units:
            if unit.language not in collectors:
                collectors[unit.language] = collector_for(unit.language, settings)
            modules.append(collectors[unit.language].collect(unit, program))

    logger.info("Found %d module(s)", len(modules))
    return modules


def create_graph(
    target_path: Path | str,
    output_filename: Path | str,
    dependencies_only: bool = False,
    recursive: bool = False,
    merge: bool = False,
    no_methods: bool = False,
    no_properties: bool = False,
    no_types: bool = False,
    svg_output: bool = False,
    dot_output: bool = False,
    plant_output: bool = False,
    settings: Settings | None = None,
) -> list[Path]:
    """Write a diagram of *target_path* and return the written files.

    ``plant_output`` selects the PlantUML class diagram; otherwise the
    Graphviz dependency graph is rendered.
    """
    target_path = Path(target_path)
    output_path = Path(output_filename)
    if settings is None:
        settings = load_settings(target_path)

    modules = assemble(get_modules(target_path, recursive, settings), merge=merge)

    if plant_output:
        return [
            render_plantuml(
                modules,
                output_path,
                no_methods=no_methods,
                no_properties=no_properties,
                no_types=no_types,
            )
        ]
    return render_dot(
        modules,
        output_path,
        dependencies_only=dependencies_only,
        no_methods=no_methods,
        no_properties=no_properties,
        svg_output=svg_output,
        dot_output=dot_output,
        member_types=settings.member_type_dependencies,
    )


def get_modules_dependencies(
    target_path: Path | str, recursive: bool = False, settings: Settings | None = None
) -> list[OutputModule]:
    """Return every collected module, sorted by name, with its dependency names."""
    target_path = Path(target_path)
    if settings is None:
        settings = load_settings(target_path)
    modules = get_modules(target_path, recursive, settings)
    return output_modules(modules, settings.member_type_dependencies)
