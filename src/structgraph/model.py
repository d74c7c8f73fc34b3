"""Language-agnostic data model for extracted program structure."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class TypeRef:
    """A reference to a named type, resolved to its declaring module if known."""

    name: str
    module: str | None = None  # None for globals, built-ins and unknown names


@dataclass(frozen=True)
class Dependency:
    """A name-based pointer from a module to another module."""

    name: str
    kind: str = "import"  # "import", "base", "member"


@dataclass
class Parameter:
    name: str
    type: str | None = None


@dataclass
class Member:
    """A method or property of a type declaration."""

    name: str
    kind: str  # "method", "property"
    visibility: str = "public"  # "public", "protected", "private"
    modifiers: list[str] = field(default_factory=list)
    type: str | None = None
    parameters: list[Parameter] = field(default_factory=list)
    references: list[TypeRef] = field(default_factory=list)

    @property
    def is_method(self) -> bool:
        return self.kind == "method"

    @property
    def is_static(self) -> bool:
        return "static" in self.modifiers

    @property
    def is_abstract(self) -> bool:
        return "abstract" in self.modifiers


@dataclass
class Class:
    name: str
    members: list[Member] = field(default_factory=list)
    base: TypeRef | None = None
    interfaces: list[TypeRef] = field(default_factory=list)
    is_abstract: bool = False

    @property
    def kind(self) -> str:
        return "class"


@dataclass
class Interface:
    name: str
    members: list[Member] = field(default_factory=list)
    extends: list[TypeRef] = field(default_factory=list)

    @property
    def kind(self) -> str:
        return "interface"


@dataclass
class Enum:
    name: str
    members: list[Member] = field(default_factory=list)

    @property
    def kind(self) -> str:
        return "enum"


TypeDeclaration = Class | Interface | Enum


@dataclass
class Module:
    """A namespace-like grouping of type declarations."""

    name: str
    modules: list[Module] = field(default_factory=list)
    classes: list[Class] = field(default_factory=list)
    interfaces: list[Interface] = field(default_factory=list)
    enums: list[Enum] = field(default_factory=list)
    dependencies: list[Dependency] = field(default_factory=list)
    path: str | None = None

    @property
    def types(self) -> list[TypeDeclaration]:
        """All type declarations: classes, then interfaces, then enums."""
        return [*self.classes, *self.interfaces, *self.enums]

    def add_dependency(self, name: str, kind: str = "import") -> None:
        if name != self.name:
            self.dependencies.append(Dependency(name, kind))

    def walk(self) -> list[Module]:
        """Return this module and every nested module, in pre-order."""
        result: list[Module] = []
        stack: list[Module] = [self]
        while stack:
            module = stack.pop()
            result.append(module)
            stack.extend(reversed(module.modules))
        return result


@dataclass
class OutputModule:
    """External projection of a module: its name and resolved dependencies."""

    name: str
    dependencies: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"name": self.name, "dependencies": list(self.dependencies)}
