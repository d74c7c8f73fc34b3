"""Collapse raw module dependencies into sorted unique names."""

from __future__ import annotations

from structgraph.model import Module, OutputModule


def resolve(module: Module, member_types: bool = True) -> list[str]:
    """Sorted unique dependency names of *module*.

    With *member_types* unset, dependencies that only come from member type
    annotations are ignored.
    """
    unique: dict[str, None] = {}
    for dependency in module.dependencies:
        if not member_types and dependency.kind == "member":
            continue
        unique.setdefault(dependency.name, None)
    return sorted(unique)


def sort_modules(modules: list[Module]) -> list[Module]:
    return sorted(modules, key=lambda m: m.name)


def output_modules(modules: list[Module], member_types: bool = True) -> list[OutputModule]:
    """External projection of *modules*, sorted by name."""
    return [
        OutputModule(module.name, resolve(module, member_types))
        for module in sort_modules(modules)
    ]
