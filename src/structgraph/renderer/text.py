"""Member formatting shared by the renderers."""

from __future__ import annotations

import re
from pathlib import Path

from structgraph.model import Member, TypeDeclaration

VISIBILITY_MARKERS = {"public": "+", "protected": "#", "private": "-"}

# Suffixes replaced (rather than extended) when deriving output file names.
IMAGE_SUFFIXES = {".dot", ".gv", ".svg", ".png"}


def visible_members(
    decl: TypeDeclaration, no_methods: bool, no_properties: bool
) -> tuple[list[Member], list[Member]]:
    """Properties and methods of *decl* left after suppression, in declaration order."""
    properties = [] if no_properties else [m for m in decl.members if not m.is_method]
    methods = [] if no_methods else [m for m in decl.members if m.is_method]
    return properties, methods


def signature(member: Member, with_types: bool = True, separator: str = ": ") -> str:
    """``name(a: int): str`` for methods, ``name: str`` for properties."""
    text = member.name
    if member.is_method:
        params = ", ".join(
            f"{p.name}{separator}{p.type}" if with_types and p.type else p.name
            for p in member.parameters
        )
        text = f"{text}({params})"
    if with_types and member.type:
        text = f"{text}{separator}{member.type}"
    return text


def base_path(output_path: Path) -> Path:
    """*output_path* without a graph or image suffix."""
    if output_path.suffix in IMAGE_SUFFIXES:
        return output_path.with_suffix("")
    return output_path


def with_extension(base: Path, extension: str) -> Path:
    return base.with_name(f"{base.name}.{extension}")


class Identifiers:
    """Collision-free renderer identifiers for dotted names.

    Each distinct key gets ``prefix`` plus the key with non-word characters
    replaced by ``_``; a key whose sanitized form is already taken gets a
    numeric suffix.  Ids depend only on the order keys are first seen.
    """

    def __init__(self, prefix: str = ""):
        self._prefix = prefix
        self._ids: dict[tuple[str, ...], str] = {}
        self._used: set[str] = set()

    def __call__(self, *key: str) -> str:
        if key not in self._ids:
            base = self._prefix + re.sub(r"\W", "_", ".".join(key))
            ident, n = base, 2
            while ident in self._used:
                ident = f"{base}_{n}"
                n += 1
            self._used.add(ident)
            self._ids[key] = ident
        return self._ids[key]

    def __contains__(self, key: tuple[str, ...]) -> bool:
        return key in self._ids
