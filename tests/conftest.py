"""Shared fixtures: source trees on disk and a hand-built module model."""

from __future__ import annotations

from pathlib import Path
from textwrap import dedent

import pytest

from structgraph.model import (
    Class,
    Dependency,
    Enum,
    Interface,
    Member,
    Module,
    Parameter,
    TypeRef,
)


@pytest.fixture
def write_sources(tmp_path):
    """Write ``{relative path: source}`` under *tmp_path* and return the root."""

    def _write(files: dict[str, str], root: Path | None = None) -> Path:
        base = root or tmp_path
        for name, text in files.items():
            path = base / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(dedent(text))
        return base

    return _write


@pytest.fixture
def shop_modules() -> list[Module]:
    """Two modules: ``shop`` depends on ``catalog``; ``catalog`` has a nested module."""
    product = Class(
        "Product",
        members=[
            Member("sku", "property", type="str"),
            Member("_price", "property", visibility="private", type="float"),
            Member(
                "discount",
                "method",
                parameters=[Parameter("rate", "float")],
                type="float",
            ),
        ],
        base=TypeRef("Item", "catalog"),
    )
    item = Class("Item", members=[Member("name", "property", type="str")])
    color = Enum("Color", members=[Member("RED", "property"), Member("BLUE", "property")])
    priced = Interface("Priced", members=[Member("total", "method", type="float")])
    catalog = Module(
        "catalog",
        classes=[item, product],
        enums=[color],
        modules=[
            Module(
                "catalog.legacy",
                classes=[Class("OldProduct", base=TypeRef("Product", "catalog"))],
                dependencies=[Dependency("catalog", "base")],
            )
        ],
    )
    cart = Class(
        "Cart",
        members=[
            Member(
                "items",
                "property",
                type="list[Product]",
                references=[TypeRef("Product", "catalog")],
            ),
            Member(
                "add",
                "method",
                modifiers=["static"],
                parameters=[Parameter("product", "Product")],
                type="None",
                references=[TypeRef("Product", "catalog")],
            ),
        ],
        interfaces=[TypeRef("Priced", "shop")],
    )
    shop = Module(
        "shop",
        classes=[cart],
        interfaces=[priced],
        dependencies=[
            Dependency("catalog", "import"),
            Dependency("catalog", "member"),
            Dependency("json", "import"),
        ],
    )
    return [shop, catalog]
