"""Render a module set as a Graphviz dependency graph."""

from __future__ import annotations

import logging
from pathlib import Path

import graphviz

from structgraph.analysis import cyclic_edges
from structgraph.model import Class, Interface, Member, Module, TypeDeclaration
from structgraph.renderer.text import (
    VISIBILITY_MARKERS,
    Identifiers,
    base_path,
    signature,
    visible_members,
    with_extension,
)
from structgraph.resolver import resolve, sort_modules

logger = logging.getLogger(__name__)

_RECORD_SPECIALS = str.maketrans({c: f"\\{c}" for c in "{}|<>"})


def build_graph(
    modules: list[Module],
    *,
    dependencies_only: bool = False,
    no_methods: bool = False,
    no_properties: bool = False,
    member_types: bool = True,
) -> graphviz.Digraph:
    """Project *modules* onto a directed graph without touching the model.

    Node ids are sanitized (``m_`` for modules, ``t_`` for types); the real
    names only appear in labels, so names holding ``:`` or ``.`` never turn
    into ports or clash with each other.
    """
    graph = graphviz.Digraph(
        "G",
        graph_attr={"rankdir": "LR", "compound": "true"},
        node_attr={"fontname": "Helvetica", "fontsize": "10"},
        edge_attr={"fontname": "Helvetica", "fontsize": "9"},
    )
    ordered = sort_modules(modules)
    module_ids = Identifiers("m_")
    type_ids = Identifiers("t_")
    for module in ordered:
        for nested in module.walk():
            module_ids(nested.name)

    if dependencies_only:
        for module in ordered:
            for nested in module.walk():
                graph.node(module_ids(nested.name), label=nested.name, shape="folder")
    else:
        for module in ordered:
            _add_cluster(graph, module, module_ids, type_ids, no_methods, no_properties)

    dependencies: dict[str, list[str]] = {}
    for module in ordered:
        for nested in module.walk():
            targets = dependencies.setdefault(nested.name, [])
            for name in resolve(nested, member_types):
                if name != nested.name and name not in targets:
                    targets.append(name)

    # Dependencies outside the analyzed modules get a dashed node of their own.
    for targets in dependencies.values():
        for target in targets:
            if (target,) not in module_ids:
                graph.node(module_ids(target), label=target, shape="folder", style="dashed")

    cyclic = cyclic_edges(dependencies)
    for source, targets in dependencies.items():
        for target in targets:
            if (source, target) in cyclic:
                graph.edge(module_ids(source), module_ids(target), color="red")
            else:
                graph.edge(module_ids(source), module_ids(target))

    if not dependencies_only:
        _add_inheritance_edges(graph, ordered, type_ids)

    return graph


def render_dot(
    modules: list[Module],
    output_path: Path,
    *,
    dependencies_only: bool = False,
    no_methods: bool = False,
    no_properties: bool = False,
    svg_output: bool = False,
    dot_output: bool = False,
    member_types: bool = True,
) -> list[Path]:
    """Write the DOT text for *modules*, plus any requested image.

    The DOT file is always written.  ``svg_output`` adds an SVG image; with
    neither ``svg_output`` nor ``dot_output`` a PNG image is added.  A
    missing or failing Graphviz executable only skips the image.
    """
    graph = build_graph(
        modules,
        dependencies_only=dependencies_only,
        no_methods=no_methods,
        no_properties=no_properties,
        member_types=member_types,
    )
    base = base_path(output_path)
    base.parent.mkdir(parents=True, exist_ok=True)

    text_path = with_extension(base, "dot")
    text_path.write_text(graph.source)
    written = [text_path]
    logger.info("Generated %s", text_path)

    formats: list[str] = []
    if svg_output:
        formats.append("svg")
    if not svg_output and not dot_output:
        formats.append("png")
    for fmt in formats:
        image_path = _render_image(graph, base, fmt)
        if image_path is not None:
            written.append(image_path)

    return written


def _render_image(graph: graphviz.Digraph, base: Path, fmt: str) -> Path | None:
    try:
        data = graph.pipe(format=fmt)
    except graphviz.ExecutableNotFound:
        logger.warning(
            "Graphviz 'dot' executable not found on PATH — skipping %s output", fmt
        )
        return None
    except graphviz.CalledProcessError as e:
        logger.warning("Graphviz could not render %s output: %s", fmt, e)
        return None
    image_path = with_extension(base, fmt)
    image_path.write_bytes(data)
    logger.info("Generated %s", image_path)
    return image_path


def _add_cluster(
    graph: graphviz.Digraph,
    module: Module,
    module_ids: Identifiers,
    type_ids: Identifiers,
    no_methods: bool,
    no_properties: bool,
) -> None:
    node_id = module_ids(module.name)
    with graph.subgraph(name=f"cluster_{node_id}") as cluster:
        cluster.attr(label="", style="rounded", color="gray")
        cluster.node(node_id, label=module.name, shape="folder")
        for decl in module.types:
            cluster.node(
                type_ids(module.name, decl.name),
                label=_record_label(decl, no_methods, no_properties),
                shape="record",
            )
        for nested in module.modules:
            _add_cluster(cluster, nested, module_ids, type_ids, no_methods, no_properties)


def _record_label(decl: TypeDeclaration, no_methods: bool, no_properties: bool) -> str:
    title = decl.name.translate(_RECORD_SPECIALS)
    if decl.kind != "class":
        title = f"\\<\\<{decl.kind}\\>\\>\\n{title}"
    elif decl.is_abstract:
        title = f"\\<\\<abstract\\>\\>\\n{title}"

    fields = [title]
    properties, methods = visible_members(decl, no_methods, no_properties)
    for group in (properties, methods):
        if group:
            fields.append("".join(_member_line(m) + "\\l" for m in group))
    return "{" + "|".join(fields) + "}"


def _member_line(member: Member) -> str:
    marker = VISIBILITY_MARKERS.get(member.visibility, "")
    return f"{marker} {signature(member)}".strip().translate(_RECORD_SPECIALS)


def _add_inheritance_edges(
    graph: graphviz.Digraph, modules: list[Module], type_ids: Identifiers
) -> None:
    for module in modules:
        for nested in module.walk():
            for decl in nested.types:
                source = type_ids(nested.name, decl.name)
                if isinstance(decl, Class):
                    parents = [(decl.base, "solid")] if decl.base else []
                    parents += [(ref, "dashed") for ref in decl.interfaces]
                elif isinstance(decl, Interface):
                    parents = [(ref, "solid") for ref in decl.extends]
                else:
                    parents = []
                for ref, style in parents:
                    if ref.module is None or (ref.module, ref.name) not in type_ids:
                        continue
                    target = type_ids(ref.module, ref.name)
                    if target != source:
                        graph.edge(source, target, arrowhead="empty", style=style)
