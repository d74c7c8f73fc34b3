"""Combine per-unit Modules into the module set handed to a renderer."""

from __future__ import annotations

import dataclasses

from structgraph.model import Module


def assemble(modules: list[Module], merge: bool = False) -> list[Module]:
    """Return the module set, flattened when *merge* is set."""
    return merge_modules(modules) if merge else list(modules)


def merge_modules(modules: list[Module]) -> list[Module]:
    """Flatten nested modules into one top-level list.

    Modules appear in pre-order (each module before its nested modules,
    siblings in input order).  Flattened copies keep their declarations and
    dependencies but no nested modules; the input modules are left untouched.
    Merging an already merged list returns an equal list.
    """
    merged: list[Module] = []
    stack: list[Module] = list(reversed(modules))
    while stack:
        module = stack.pop()
        merged.append(dataclasses.replace(module, modules=[]))
        stack.extend(reversed(module.modules))
    return merged
