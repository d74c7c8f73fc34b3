import logging

import graphviz

from structgraph.model import Class, Dependency, Member, Module, TypeRef
from structgraph.renderer.dot import build_graph, render_dot


def test_full_graph_has_clusters_and_records(shop_modules):
    source = build_graph(shop_modules).source
    assert "subgraph cluster_m_catalog {" in source
    assert "subgraph cluster_m_shop {" in source
    assert "subgraph cluster_m_catalog_legacy {" in source
    assert '\tm_catalog_legacy [label="catalog.legacy" shape=folder]' in source
    assert "shape=record" in source
    assert "+ sku: str" in source
    assert "- _price: float" in source
    assert "+ discount(rate: float): float" in source
    assert "\\<\\<interface\\>\\>" in source
    assert "\\<\\<enum\\>\\>" in source


def test_dependency_edges(shop_modules):
    source = build_graph(shop_modules).source
    assert "\tm_shop -> m_catalog\n" in source
    assert "\tm_shop -> m_json\n" in source
    assert "\tm_catalog_legacy -> m_catalog\n" in source
    assert "\tm_json [label=json shape=folder style=dashed]\n" in source


def test_inheritance_edges(shop_modules):
    source = build_graph(shop_modules).source
    assert "t_catalog_Product -> t_catalog_Item [arrowhead=empty style=solid]" in source
    assert "t_shop_Cart -> t_shop_Priced [arrowhead=empty style=dashed]" in source
    assert (
        "t_catalog_legacy_OldProduct -> t_catalog_Product [arrowhead=empty style=solid]"
        in source
    )


def test_dependencies_only_has_no_member_nodes(shop_modules):
    for no_methods in (False, True):
        for no_properties in (False, True):
            source = build_graph(
                shop_modules,
                dependencies_only=True,
                no_methods=no_methods,
                no_properties=no_properties,
            ).source
            assert "record" not in source
            assert "cluster_" not in source
            assert "sku" not in source
            assert "\tm_shop -> m_catalog\n" in source
            assert '\tm_catalog_legacy [label="catalog.legacy" shape=folder]' in source


def test_member_suppression(shop_modules):
    source = build_graph(shop_modules, no_methods=True).source
    assert "sku: str" in source
    assert "discount" not in source

    source = build_graph(shop_modules, no_properties=True).source
    assert "sku" not in source
    assert "discount" in source


def test_cycle_edges_are_red():
    modules = [
        Module("a", dependencies=[Dependency("b")]),
        Module("b", dependencies=[Dependency("a")]),
        Module("c", dependencies=[Dependency("a")]),
    ]
    source = build_graph(modules, dependencies_only=True).source
    assert "\tm_a -> m_b [color=red]\n" in source
    assert "\tm_b -> m_a [color=red]\n" in source
    assert "\tm_c -> m_a\n" in source


def test_self_edges_are_omitted():
    modules = [Module("a", dependencies=[Dependency("a", "member")])]
    assert "->" not in build_graph(modules).source


def test_member_types_toggle():
    modules = [Module("a", dependencies=[Dependency("b", "member")]), Module("b")]
    assert "\tm_a -> m_b\n" in build_graph(modules).source
    assert "->" not in build_graph(modules, member_types=False).source


def test_graph_does_not_touch_model(shop_modules):
    before = [m.name for m in shop_modules]
    build_graph(shop_modules)
    assert [m.name for m in shop_modules] == before
    assert shop_modules[1].modules[0].name == "catalog.legacy"


def test_empty_model():
    source = build_graph([]).source
    assert source.startswith("digraph G {")
    assert "->" not in source


def test_record_label_escapes_specials():
    modules = [
        Module(
            "m",
            classes=[
                Class(
                    "Box",
                    members=[Member("items", "property", type="dict[str, int] | None")],
                    base=TypeRef("Base"),
                )
            ],
        )
    ]
    source = build_graph(modules).source
    assert "dict[str, int] \\| None" in source


def test_render_dot_text_only(shop_modules, tmp_path):
    written = render_dot(shop_modules, tmp_path / "graph.svg", dot_output=True)
    assert written == [tmp_path / "graph.dot"]
    assert (tmp_path / "graph.dot").read_text().startswith("digraph G {")


def test_render_dot_default_adds_png(shop_modules, tmp_path, monkeypatch):
    calls = []

    def fake_pipe(self, format=None, **kwargs):
        calls.append(format)
        return b"image"

    monkeypatch.setattr(graphviz.Digraph, "pipe", fake_pipe)
    written = render_dot(shop_modules, tmp_path / "out")
    assert written == [tmp_path / "out.dot", tmp_path / "out.png"]
    assert calls == ["png"]
    assert (tmp_path / "out.png").read_bytes() == b"image"


def test_render_dot_svg(shop_modules, tmp_path, monkeypatch):
    monkeypatch.setattr(graphviz.Digraph, "pipe", lambda self, format=None, **kw: b"<svg/>")
    written = render_dot(shop_modules, tmp_path / "out.dot", svg_output=True)
    assert written == [tmp_path / "out.dot", tmp_path / "out.svg"]


def test_missing_graphviz_keeps_text(shop_modules, tmp_path, monkeypatch, caplog):
    def missing(self, format=None, **kwargs):
        raise graphviz.ExecutableNotFound(["dot"])

    monkeypatch.setattr(graphviz.Digraph, "pipe", missing)
    with caplog.at_level(logging.WARNING):
        written = render_dot(shop_modules, tmp_path / "out.png")
    assert written == [tmp_path / "out.dot"]
    assert (tmp_path / "out.dot").exists()
    assert not (tmp_path / "out.png").exists()
    assert "skipping png output" in caplog.text


def test_colon_in_dependency_name_is_not_a_port():
    modules = [Module("app", dependencies=[Dependency("node:fs")])]
    source = build_graph(modules, dependencies_only=True).source
    assert "\tm_app -> m_node_fs\n" in source
    assert '\tm_node_fs [label="node:fs" shape=folder style=dashed]\n' in source
    assert '"node":fs' not in source


def test_type_and_module_with_the_same_dotted_name():
    modules = [
        Module("pkg", classes=[Class("util")]),
        Module("pkg.util", dependencies=[Dependency("pkg")]),
    ]
    source = build_graph(modules).source
    assert source.count("\tm_pkg_util [") == 1
    assert source.count("\tt_pkg_util [") == 1
    assert "\tm_pkg_util -> m_pkg\n" in source


def test_sanitized_names_do_not_collide():
    modules = [
        Module("a-b", dependencies=[Dependency("a_b")]),
        Module("a_b"),
    ]
    source = build_graph(modules, dependencies_only=True).source
    assert '\tm_a_b [label="a-b" shape=folder]\n' in source
    assert "\tm_a_b_2 [label=a_b shape=folder]\n" in source
    assert "\tm_a_b -> m_a_b_2\n" in source


def test_failing_graphviz_keeps_text(shop_modules, tmp_path, monkeypatch, caplog):
    def failing(self, format=None, **kwargs):
        raise graphviz.CalledProcessError(1, ["dot", "-Tsvg"], stderr=b"syntax error")

    monkeypatch.setattr(graphviz.Digraph, "pipe", failing)
    with caplog.at_level(logging.WARNING):
        written = render_dot(shop_modules, tmp_path / "out", svg_output=True)
    assert written == [tmp_path / "out.dot"]
    assert not (tmp_path / "out.svg").exists()
    assert "could not render svg output" in caplog.text
