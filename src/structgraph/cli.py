"""Command-line interface for structgraph."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from structgraph.frontend import FrontEndFailure
from structgraph.pipeline import create_graph, get_modules_dependencies

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="structgraph",
        description="Dependency graphs and UML class diagrams from Python and TypeScript sources.",
    )
    parser.add_argument(
        "target",
        type=Path,
        help="Source file or directory to analyze",
    )
    parser.add_argument(
        "output",
        type=Path,
        nargs="?",
        default=Path("diagram"),
        help="Output file (default: diagram.dot / diagram.puml)",
    )
    parser.add_argument(
        "-d",
        "--dependencies-only",
        action="store_true",
        help="Only show module dependencies, without types and members",
    )
    parser.add_argument(
        "-r",
        "--recursive",
        action="store_true",
        help="Descend into subdirectories",
    )
    parser.add_argument(
        "-m",
        "--merge",
        action="store_true",
        help="Flatten nested modules into top-level modules",
    )
    parser.add_argument("--no-methods", action="store_true", help="Hide methods")
    parser.add_argument("--no-properties", action="store_true", help="Hide properties")
    parser.add_argument(
        "--no-types", action="store_true", help="Hide type annotations (PlantUML only)"
    )
    parser.add_argument("--svg", action="store_true", help="Also render an SVG image")
    parser.add_argument(
        "--dot", action="store_true", help="Only write DOT text, no default PNG image"
    )
    parser.add_argument(
        "--plantuml",
        action="store_true",
        help="Write a PlantUML class diagram instead of a dependency graph",
    )
    parser.add_argument(
        "--list-dependencies",
        action="store_true",
        help="Print module dependencies as JSON instead of writing a diagram",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose (debug) output",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.WARNING, format="%(message)s")
    if args.verbose:
        logging.getLogger("structgraph").setLevel(logging.DEBUG)

    try:
        if args.list_dependencies:
            modules = get_modules_dependencies(args.target, recursive=args.recursive)
            json.dump([m.to_dict() for m in modules], sys.stdout, indent=2)
            sys.stdout.write("\n")
            return

        create_graph(
            args.target,
            args.output,
            dependencies_only=args.dependencies_only,
            recursive=args.recursive,
            merge=args.merge,
            no_methods=args.no_methods,
            no_properties=args.no_properties,
            no_types=args.no_types,
            svg_output=args.svg,
            dot_output=args.dot,
            plant_output=args.plantuml,
        )
    except FrontEndFailure as e:
        logger.error("%s", e)
        sys.exit(1)
