"""Render a module set as a PlantUML class diagram."""

from __future__ import annotations

import logging
from pathlib import Path

from structgraph.model import Class, Interface, Member, Module, TypeRef
from structgraph.renderer.text import (
    IMAGE_SUFFIXES,
    VISIBILITY_MARKERS,
    Identifiers,
    signature,
    visible_members,
    with_extension,
)
from structgraph.resolver import sort_modules

logger = logging.getLogger(__name__)

PLANTUML_SUFFIXES = {".puml", ".plantuml", ".pu", ".txt"}

_INDENT = "  "


def build_plantuml(
    modules: list[Module],
    *,
    no_methods: bool = False,
    no_properties: bool = False,
    no_types: bool = False,
) -> str:
    """Return PlantUML text for *modules*; modules become packages."""
    ordered = sort_modules(modules)
    aliases = _aliases(ordered)

    lines = ["@startuml", "set namespaceSeparator none", "hide empty members"]
    for module in ordered:
        _package(lines, module, 0, aliases, no_methods, no_properties, no_types)
    lines.extend(_relations(ordered, aliases))
    lines.append("@enduml")
    return "\n".join(lines) + "\n"


def render_plantuml(
    modules: list[Module],
    output_path: Path,
    *,
    no_methods: bool = False,
    no_properties: bool = False,
    no_types: bool = False,
) -> Path:
    """Write the PlantUML diagram for *modules* and return its path."""
    text = build_plantuml(
        modules, no_methods=no_methods, no_properties=no_properties, no_types=no_types
    )
    if output_path.suffix in PLANTUML_SUFFIXES:
        path = output_path
    elif output_path.suffix in IMAGE_SUFFIXES:
        path = output_path.with_suffix(".puml")
    else:
        path = with_extension(output_path, "puml")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    logger.info("Generated %s", path)
    return path


def _aliases(modules: list[Module]) -> Identifiers:
    """Element aliases keyed by (module name, type name), assigned in output order."""
    aliases = Identifiers()
    for module in modules:
        for nested in module.walk():
            for decl in nested.types:
                aliases(nested.name, decl.name)
    return aliases


def _package(
    lines: list[str],
    module: Module,
    depth: int,
    aliases: Identifiers,
    no_methods: bool,
    no_properties: bool,
    no_types: bool,
) -> None:
    pad = _INDENT * depth
    lines.append(f'{pad}package "{module.name}" {{')
    for decl in module.types:
        keyword = decl.kind
        if isinstance(decl, Class) and decl.is_abstract:
            keyword = "abstract class"
        alias = aliases(module.name, decl.name)
        header = f'{pad}{_INDENT}{keyword} "{decl.name}" as {alias}'

        properties, methods = visible_members(decl, no_methods, no_properties)
        body = [_member_line(m, decl.kind, no_types) for m in [*properties, *methods]]
        if body:
            lines.append(f"{header} {{")
            lines.extend(f"{pad}{_INDENT * 2}{line}" for line in body)
            lines.append(f"{pad}{_INDENT}}}")
        else:
            lines.append(header)
    for nested in module.modules:
        _package(lines, nested, depth + 1, aliases, no_methods, no_properties, no_types)
    lines.append(f"{pad}}}")


def _member_line(member: Member, kind: str, no_types: bool) -> str:
    if kind == "enum" and not member.is_method:
        return member.name
    marker = VISIBILITY_MARKERS.get(member.visibility, "")
    prefix = ""
    if member.is_static:
        prefix = "{static} "
    elif member.is_abstract:
        prefix = "{abstract} "
    return f"{marker}{prefix}{signature(member, not no_types, ' : ')}"


def _known(ref: TypeRef, aliases: Identifiers) -> bool:
    return ref.module is not None and (ref.module, ref.name) in aliases


def _target(ref: TypeRef, aliases: Identifiers) -> str:
    return aliases(ref.module, ref.name) if _known(ref, aliases) else f'"{ref.name}"'


def _relations(modules: list[Module], aliases: Identifiers) -> list[str]:
    """Inheritance, implementation and usage edges, in declaration order."""
    lines: list[str] = []
    for module in modules:
        for nested in module.walk():
            for decl in nested.types:
                source = aliases(nested.name, decl.name)
                linked = {source}

                if isinstance(decl, Class):
                    parents = [(decl.base, "--|>")] if decl.base else []
                    parents += [(ref, "..|>") for ref in decl.interfaces]
                elif isinstance(decl, Interface):
                    parents = [(ref, "--|>") for ref in decl.extends]
                else:
                    parents = []
                for ref, arrow in parents:
                    target = _target(ref, aliases)
                    if target not in linked:
                        linked.add(target)
                        lines.append(f"{source} {arrow} {target}")

                for member in decl.members:
                    for ref in member.references:
                        if not _known(ref, aliases):
                            continue
                        target = aliases(ref.module, ref.name)
                        if target not in linked:
                            linked.add(target)
                            lines.append(f"{source} ..> {target}")
    return lines
