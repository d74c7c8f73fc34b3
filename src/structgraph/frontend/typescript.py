"""TypeScript front-end using tree-sitter.

Requires the optional ``typescript`` extra
(``pip install structgraph[typescript]``).
"""

from __future__ import annotations

import posixpath
from pathlib import Path

import tree_sitter
import tree_sitter_typescript

from structgraph.frontend.base import FrontEndFailure

_TS_LANGUAGE = tree_sitter.Language(tree_sitter_typescript.language_typescript())
_TSX_LANGUAGE = tree_sitter.Language(tree_sitter_typescript.language_tsx())

# tree-sitter node types that declare a type.
TYPE_DECL_TYPES = {
    "class_declaration": "class",
    "abstract_class_declaration": "class",
    "interface_declaration": "interface",
    "enum_declaration": "enum",
}


def parse(path: Path) -> tuple[tree_sitter.Tree, bytes]:
    """Parse *path*, raising FrontEndFailure if the tree contains errors."""
    source = path.read_bytes()
    language = _TSX_LANGUAGE if path.suffix == ".tsx" else _TS_LANGUAGE
    parser = tree_sitter.Parser(language)
    tree = parser.parse(source)
    if tree.root_node.has_error:
        error = _first_error(tree.root_node)
        line = error.start_point[0] + 1 if error is not None else 0
        raise FrontEndFailure(f"{path}:{line}: syntax error")
    return tree, source


def _first_error(node: tree_sitter.Node) -> tree_sitter.Node | None:
    if node.type == "ERROR" or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = _first_error(child)
            if found is not None:
                return found
    return None


def strip_suffix(name: str) -> str:
    """Drop a TypeScript/JavaScript source suffix, declaration suffixes included."""
    for suffix in (".d.ts", ".d.mts", ".d.cts", ".tsx", ".ts", ".mts", ".cts", ".jsx", ".js"):
        if name.endswith(suffix):
            return name[: -len(suffix)]
    return name


def module_name(path: Path) -> str:
    """Module name for *path* (relative to the analysis root): ``sub/file``."""
    return strip_suffix(path.as_posix())


def resolve_specifier(importer: str, specifier: str, known: set[str]) -> str:
    """Module name targeted by *specifier* written in module *importer*.

    Relative specifiers resolve against the importer's directory; a
    directory import resolves to its ``index`` module when that exists.
    Bare package specifiers are returned unchanged.
    """
    if not specifier.startswith("."):
        return specifier
    joined = posixpath.normpath(posixpath.join(posixpath.dirname(importer), specifier))
    target = strip_suffix(joined)
    if target not in known and f"{target}/index" in known:
        return f"{target}/index"
    return target


def unquote(node: tree_sitter.Node) -> str:
    """Text of a string literal node without its quotes."""
    return node.text.decode("utf-8")[1:-1]


def declarations(root: tree_sitter.Node) -> list[tree_sitter.Node]:
    """Top-level declaration nodes, unwrapping export and ambient statements."""
    results: list[tree_sitter.Node] = []
    for node in root.named_children:
        results.append(unwrap(node))
    return results


def unwrap(node: tree_sitter.Node) -> tree_sitter.Node:
    """Return the declaration wrapped by export/declare/expression statements."""
    while node.type in ("export_statement", "ambient_declaration", "expression_statement"):
        inner = node.child_by_field_name("declaration")
        if inner is None:
            inner = next(
                (
                    c
                    for c in node.named_children
                    if c.type in TYPE_DECL_TYPES
                    or c.type in ("module", "internal_module", "ambient_declaration")
                ),
                None,
            )
        if inner is None:
            return node
        node = inner
    return node


def declared_kinds(tree: tree_sitter.Tree) -> dict[str, str]:
    """Top-level type names of a unit and their kinds."""
    kinds: dict[str, str] = {}
    for node in declarations(tree.root_node):
        kind = TYPE_DECL_TYPES.get(node.type)
        name = node.child_by_field_name("name")
        if kind and name is not None:
            kinds.setdefault(name.text.decode("utf-8"), kind)
    return kinds
