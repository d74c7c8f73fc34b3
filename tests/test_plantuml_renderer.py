from structgraph.model import Class, Enum, Interface, Member, Module, TypeRef
from structgraph.renderer.plantuml import build_plantuml, render_plantuml


def test_document_frame(shop_modules):
    lines = build_plantuml(shop_modules).splitlines()
    assert lines[:3] == ["@startuml", "set namespaceSeparator none", "hide empty members"]
    assert lines[-1] == "@enduml"


def test_packages_and_elements(shop_modules):
    text = build_plantuml(shop_modules)
    assert 'package "catalog" {' in text
    assert '  package "catalog.legacy" {' in text
    assert '    class "OldProduct" as catalog_legacy_OldProduct\n' in text
    assert '  class "Product" as catalog_Product {' in text
    assert '  enum "Color" as catalog_Color {' in text
    assert '  interface "Priced" as shop_Priced {' in text
    # modules are emitted sorted by name
    assert text.index('package "catalog"') < text.index('package "shop"')


def test_member_lines(shop_modules):
    lines = build_plantuml(shop_modules).splitlines()
    assert "    +sku : str" in lines
    assert "    -_price : float" in lines
    assert "    +discount(rate : float) : float" in lines
    assert "    +{static} add(product : Product) : None" in lines
    assert "    RED" in lines


def test_properties_before_methods(shop_modules):
    lines = build_plantuml(shop_modules).splitlines()
    assert lines.index("    -_price : float") < lines.index("    +discount(rate : float) : float")


def test_no_types(shop_modules):
    lines = build_plantuml(shop_modules, no_types=True).splitlines()
    assert "    +sku" in lines
    assert "    +discount(rate)" in lines


def test_names_only(shop_modules):
    lines = build_plantuml(shop_modules, no_methods=True, no_properties=True).splitlines()
    assert '  class "Product" as catalog_Product' in lines
    assert not any(line.strip().startswith(("+", "-", "#")) for line in lines)
    assert not any(line.strip() in ("RED", "BLUE") for line in lines)


def test_relations(shop_modules):
    lines = build_plantuml(shop_modules).splitlines()
    assert "catalog_Product --|> catalog_Item" in lines
    assert "catalog_legacy_OldProduct --|> catalog_Product" in lines
    assert "shop_Cart ..|> shop_Priced" in lines
    assert lines.count("shop_Cart ..> catalog_Product") == 1


def test_usage_skips_inheritance_targets():
    modules = [
        Module(
            "m",
            classes=[
                Class(
                    "Child",
                    members=[
                        Member(
                            "parent",
                            "property",
                            type="Parent",
                            references=[TypeRef("Parent", "m")],
                        )
                    ],
                    base=TypeRef("Parent", "m"),
                ),
                Class("Parent"),
            ],
        )
    ]
    lines = build_plantuml(modules).splitlines()
    assert "m_Child --|> m_Parent" in lines
    assert "m_Child ..> m_Parent" not in lines


def test_unknown_base_is_quoted():
    modules = [
        Module(
            "errors",
            classes=[Class("Oops", base=TypeRef("Exception"))],
            interfaces=[Interface("Sized", extends=[TypeRef("Iterable", "typing")])],
        )
    ]
    lines = build_plantuml(modules).splitlines()
    assert 'errors_Oops --|> "Exception"' in lines
    assert 'errors_Sized --|> "Iterable"' in lines


def test_abstract_and_static_markers():
    modules = [
        Module(
            "m",
            classes=[
                Class(
                    "Shape",
                    members=[Member("draw", "method", modifiers=["abstract"])],
                    is_abstract=True,
                )
            ],
        )
    ]
    text = build_plantuml(modules)
    assert '  abstract class "Shape" as m_Shape {' in text
    assert "    +{abstract} draw()" in text


def test_empty_model():
    assert build_plantuml([]) == (
        "@startuml\nset namespaceSeparator none\nhide empty members\n@enduml\n"
    )


def test_output_paths(shop_modules, tmp_path):
    assert render_plantuml(shop_modules, tmp_path / "diagram") == tmp_path / "diagram.puml"
    assert render_plantuml(shop_modules, tmp_path / "a.png") == tmp_path / "a.puml"
    assert render_plantuml(shop_modules, tmp_path / "b.txt") == tmp_path / "b.txt"
    assert render_plantuml(shop_modules, tmp_path / "c.plantuml") == tmp_path / "c.plantuml"
    assert (tmp_path / "diagram.puml").read_text().startswith("@startuml")


def test_aliases_stay_unique_when_names_sanitize_alike():
    modules = [
        Module("a-b", classes=[Class("Helper")]),
        Module(
            "a_b",
            classes=[
                Class(
                    "Helper",
                    members=[
                        Member(
                            "twin",
                            "property",
                            type="Helper",
                            references=[TypeRef("Helper", "a-b")],
                        )
                    ],
                )
            ],
        ),
    ]
    lines = build_plantuml(modules).splitlines()
    assert '  class "Helper" as a_b_Helper' in lines
    assert '  class "Helper" as a_b_Helper_2 {' in lines
    assert "a_b_Helper_2 ..> a_b_Helper" in lines


def test_same_namespace_in_two_files():
    modules = [
        Module("a", modules=[Module("a.Utils", classes=[Class("Helper")])]),
        Module("b", modules=[Module("b.Utils", classes=[Class("Helper")])]),
    ]
    text = build_plantuml(modules)
    assert text.count(" as a_Utils_Helper\n") == 1
    assert text.count(" as b_Utils_Helper\n") == 1


def test_enum_methods_keep_method_lines():
    modules = [
        Module(
            "colors",
            enums=[
                Enum(
                    "Color",
                    members=[
                        Member("RED", "property"),
                        Member("label", "method", type="str"),
                    ],
                )
            ],
        )
    ]
    lines = build_plantuml(modules).splitlines()
    assert "    RED" in lines
    assert "    +label() : str" in lines
