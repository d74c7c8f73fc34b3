"""Python front-end: parse modules with ``ast`` and resolve import targets."""

from __future__ import annotations

import ast
import sys
import warnings
from pathlib import Path

from structgraph.frontend.base import FrontEndFailure

SUFFIXES = {".py"}
DECLARATION_SUFFIXES = {".pyi"}

# Base classes that turn a class into an enum or an interface.
ENUM_BASES = {"Enum", "IntEnum", "StrEnum", "Flag", "IntFlag"}
INTERFACE_BASES = {"Protocol"}


def parse(path: Path) -> tuple[ast.Module, bytes]:
    """Parse *path*, raising FrontEndFailure on invalid syntax."""
    source = path.read_bytes()
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", SyntaxWarning)
            tree = ast.parse(source, filename=str(path))
    except SyntaxError as e:
        raise FrontEndFailure(f"{path}:{e.lineno}: {e.msg}") from e
    return tree, source


def package_prefix(root: Path) -> list[str]:
    """Return the dotted package path enclosing *root*, outermost first.

    Analyzing ``src/pkg/sub`` where both ``pkg`` and ``sub`` hold an
    ``__init__.py`` yields ``["pkg", "sub"]`` so module names match the
    names used in import statements.
    """
    parts: list[str] = []
    directory = root.resolve()
    while (directory / "__init__.py").exists():
        parts.insert(0, directory.name)
        if directory.parent == directory:
            break
        directory = directory.parent
    return parts


def module_name(path: Path, prefix: list[str]) -> str:
    """Dotted module name for *path* (relative to the analysis root)."""
    parts = [*prefix, *path.with_suffix("").parts]
    if parts and parts[-1] == "__init__":
        parts.pop()
    return ".".join(parts) or path.parent.resolve().name


def is_stdlib(name: str) -> bool:
    return name.split(".")[0] in sys.stdlib_module_names


def resolve_relative(module: str, is_package: bool, level: int, target: str | None) -> str:
    """Absolute module name for ``from <level dots><target> import ...``."""
    parts = module.split(".")
    if not is_package:
        parts = parts[:-1]
    if level > 1:
        parts = parts[: len(parts) - (level - 1)]
    if target:
        parts.append(target)
    return ".".join(parts)


def base_name(node: ast.expr) -> str | None:
    """Last dotted component of a base-class expression, without subscripts."""
    if isinstance(node, ast.Subscript):
        node = node.value
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return node.attr
    return None


def declared_kinds(tree: ast.Module) -> dict[str, str]:
    """Classify top-level classes by their bases, without resolving imports."""
    kinds: dict[str, str] = {}
    for node in tree.body:
        if not isinstance(node, ast.ClassDef):
            continue
        names = {base_name(b) for b in node.bases}
        if names & ENUM_BASES or names & {n for n, k in kinds.items() if k == "enum"}:
            kinds[node.name] = "enum"
        elif names & INTERFACE_BASES:
            kinds[node.name] = "interface"
        else:
            kinds[node.name] = "class"
    return kinds
