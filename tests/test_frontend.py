import ast
from pathlib import Path

import pytest

from structgraph.frontend import (
    FrontEndFailure,
    is_declaration_file,
    language_of,
    load_program,
    working_directory,
)
from structgraph.frontend import python as pyfront


def test_working_directory_restores_after_error(tmp_path):
    before = Path.cwd()
    with pytest.raises(RuntimeError):
        with working_directory(tmp_path):
            assert Path.cwd() == tmp_path.resolve()
            raise RuntimeError("boom")
    assert Path.cwd() == before


def test_declaration_files():
    assert is_declaration_file(Path("types.pyi"))
    assert is_declaration_file(Path("lib/index.d.ts"))
    assert not is_declaration_file(Path("mod.py"))
    assert not is_declaration_file(Path("index.ts"))


def test_language_of():
    assert language_of(Path("a.py")) == "python"
    assert language_of(Path("a.pyi")) == "python"
    assert language_of(Path("a.tsx")) == "typescript"
    assert language_of(Path("README.md")) is None


def test_stubs_never_become_units(write_sources, tmp_path):
    write_sources({"a.py": "class A: ...\n", "a.pyi": "class A: ...\n"})
    with working_directory(tmp_path):
        program = load_program([Path("a.py"), Path("a.pyi"), Path("notes.txt")], tmp_path)
    assert [u.module_name for u in program.units] == ["a"]
    assert program.declaration_files == [Path("a.pyi")]
    assert program.kind_of("a", "A") == "class"


def test_syntax_error_raises(write_sources, tmp_path):
    write_sources({"bad.py": "def broken(:\n"})
    with working_directory(tmp_path):
        with pytest.raises(FrontEndFailure, match="bad.py"):
            load_program([Path("bad.py")], tmp_path)


def test_package_prefix(write_sources, tmp_path):
    write_sources({"pkg/__init__.py": "", "pkg/sub/__init__.py": ""})
    assert pyfront.package_prefix(tmp_path / "pkg" / "sub") == ["pkg", "sub"]
    assert pyfront.package_prefix(tmp_path) == []


def test_module_names():
    assert pyfront.module_name(Path("mod.py"), []) == "mod"
    assert pyfront.module_name(Path("a/b.py"), ["pkg"]) == "pkg.a.b"
    assert pyfront.module_name(Path("a/__init__.py"), []) == "a"
    assert pyfront.module_name(Path("__init__.py"), ["pkg"]) == "pkg"


def test_resolve_relative():
    assert pyfront.resolve_relative("pkg.mod", False, 1, "other") == "pkg.other"
    assert pyfront.resolve_relative("pkg.mod", False, 1, None) == "pkg"
    assert pyfront.resolve_relative("pkg", True, 1, "mod") == "pkg.mod"
    assert pyfront.resolve_relative("pkg.sub.mod", False, 2, "x") == "pkg.x"


def test_declared_kinds():
    tree = ast.parse(
        "import enum\n"
        "from typing import Protocol\n"
        "class Color(enum.Enum): ...\n"
        "class Shade(Color): ...\n"
        "class Drawable(Protocol): ...\n"
        "class Plain: ...\n"
    )
    assert pyfront.declared_kinds(tree) == {
        "Color": "enum",
        "Shade": "enum",
        "Drawable": "interface",
        "Plain": "class",
    }
