"""Collect classes, protocols, enums and their members from Python units."""

from __future__ import annotations

import ast
import builtins
import logging

from structgraph.config import Settings
from structgraph.frontend.base import Program, SourceUnit
from structgraph.frontend.python import base_name, is_stdlib, resolve_relative
from structgraph.model import Class, Enum, Interface, Member, Module, Parameter, TypeRef

logger = logging.getLogger(__name__)

_BUILTIN_NAMES = frozenset(dir(builtins))

# Bases that only mark a kind and never appear as base/interface references.
_MARKER_BASES = {
    "object",
    "Generic",
    "Protocol",
    "ABC",
    "Enum",
    "IntEnum",
    "StrEnum",
    "Flag",
    "IntFlag",
}

_STATIC_DECORATORS = {"staticmethod", "classmethod"}
_PROPERTY_DECORATORS = {"property", "cached_property"}
_ACCESSOR_DECORATORS = {"setter", "deleter"}


class PythonCollector:
    """Build a Module from one parsed Python unit."""

    def __init__(self, settings: Settings | None = None):
        self._settings = settings or Settings()

    def collect(self, unit: SourceUnit, program: Program) -> Module:
        module = Module(unit.module_name, path=unit.path.as_posix())
        names = _Names(unit, program)

        for dependency in names.imported_modules:
            self._record(module, dependency, "import", names)

        for node in unit.tree.body:
            if isinstance(node, ast.ClassDef):
                self._collect_type(node, module, names)

        logger.debug(
            "%s: %d type(s), %d raw dependencies",
            module.name,
            len(module.types),
            len(module.dependencies),
        )
        return module

    def _record(
        self, module: Module, target: str | None, kind: str, names: _Names
    ) -> None:
        """Add a dependency unless it is local, stdlib or otherwise untracked."""
        if not target or target == module.name or target == "__future__":
            return
        if (
            is_stdlib(target)
            and not names.is_program_module(target)
            and not self._settings.include_stdlib
        ):
            return
        module.add_dependency(target, kind)

    def _collect_type(self, node: ast.ClassDef, module: Module, names: _Names) -> None:
        kind = names.program.kind_of(module.name, node.name) or "class"
        members = _collect_members(node, names)
        for member in members:
            for ref in member.references:
                self._record(module, ref.module, "member", names)

        bases: list[TypeRef] = []
        for expr in node.bases:
            if base_name(expr) in _MARKER_BASES:
                continue
            ref = names.type_ref(expr) or TypeRef(base_name(expr) or ast.unparse(expr))
            bases.append(ref)
            self._record(module, ref.module, "base", names)

        if kind == "enum":
            module.enums.append(Enum(node.name, members))
        elif kind == "interface":
            module.interfaces.append(Interface(node.name, members, extends=bases))
        else:
            base: TypeRef | None = None
            interfaces: list[TypeRef] = []
            for ref in bases:
                is_interface = names.program.kind_of(ref.module, ref.name) == "interface"
                if base is None and not is_interface:
                    base = ref
                else:
                    interfaces.append(ref)
            module.classes.append(
                Class(
                    node.name,
                    members,
                    base=base,
                    interfaces=interfaces,
                    is_abstract=_is_abstract(node, members),
                )
            )


class _Names:
    """Resolve names used in one unit to the modules that declare them."""

    def __init__(self, unit: SourceUnit, program: Program):
        self.program = program
        self.module = unit.module_name
        self._known = program.module_names()
        self._local: set[str] = set()
        # local name -> module it refers to
        self._modules: dict[str, str] = {}
        # local name -> (declaring module, original name)
        self._symbols: dict[str, tuple[str, str]] = {}
        self.imported_modules: list[str] = []

        for node in unit.tree.body:
            if isinstance(node, ast.ClassDef):
                self._local.add(node.name)
            elif isinstance(node, getattr(ast, "TypeAlias", ())):
                self._local.add(node.name.id)

        for node in ast.walk(unit.tree):
            if isinstance(node, ast.Import):
                for alias in node.names:
                    self.imported_modules.append(alias.name)
                    if alias.asname:
                        self._modules[alias.asname] = alias.name
                    else:
                        head = alias.name.split(".")[0]
                        self._modules.setdefault(head, head)
            elif isinstance(node, ast.ImportFrom):
                if node.level:
                    source = resolve_relative(
                        self.module, unit.is_package, node.level, node.module
                    )
                else:
                    source = node.module or ""
                for alias in node.names:
                    local = alias.asname or alias.name
                    candidate = f"{source}.{alias.name}" if source else alias.name
                    if alias.name != "*" and candidate in self._known:
                        self.imported_modules.append(candidate)
                        self._modules[local] = candidate
                    elif source:
                        self.imported_modules.append(source)
                        if alias.name != "*":
                            self._symbols[local] = (source, alias.name)

    def is_program_module(self, name: str) -> bool:
        return name in self._known

    def type_ref(self, node: ast.expr) -> TypeRef | None:
        """Resolve a base-class or annotation head to a TypeRef."""
        if isinstance(node, ast.Subscript):
            node = node.value
        if isinstance(node, ast.Name):
            return self.resolve_name(node.id)
        if isinstance(node, ast.Attribute):
            parts = _dotted(node)
            if parts:
                return self.resolve_dotted(parts)
        return None

    def resolve_name(self, name: str) -> TypeRef | None:
        if name in self._local:
            return TypeRef(name, self.module)
        if name in self._symbols:
            source, original = self._symbols[name]
            return TypeRef(original, source)
        return None

    def resolve_dotted(self, parts: list[str]) -> TypeRef | None:
        head, rest = parts[0], parts[1:-1]
        if head in self._modules:
            base = self._modules[head]
        elif head in self._symbols:
            base = ".".join(self._symbols[head])
        else:
            return None
        return TypeRef(parts[-1], ".".join([base, *rest]))

    def references(self, node: ast.expr | None) -> list[TypeRef]:
        """All resolved type references inside an annotation expression."""
        refs: list[TypeRef] = []
        if node is not None:
            self._visit(node, refs)
        return refs

    def _visit(self, node: ast.AST, refs: list[TypeRef]) -> None:
        if isinstance(node, ast.Constant):
            if isinstance(node.value, str):
                try:
                    parsed = ast.parse(node.value, mode="eval")
                except SyntaxError:
                    return
                self._visit(parsed.body, refs)
        elif isinstance(node, ast.Name):
            if node.id not in _BUILTIN_NAMES or node.id in self._local:
                ref = self.resolve_name(node.id)
                if ref is not None:
                    refs.append(ref)
        elif isinstance(node, ast.Attribute):
            ref = self.type_ref(node)
            if ref is not None:
                refs.append(ref)
        elif isinstance(node, ast.Subscript):
            self._visit(node.value, refs)
            head = base_name(node.value)
            if head == "Literal":
                return
            if head == "Annotated" and isinstance(node.slice, ast.Tuple):
                self._visit(node.slice.elts[0], refs)
                return
            self._visit(node.slice, refs)
        else:
            for child in ast.iter_child_nodes(node):
                self._visit(child, refs)


def _dotted(node: ast.expr) -> list[str] | None:
    parts: list[str] = []
    while isinstance(node, ast.Attribute):
        parts.insert(0, node.attr)
        node = node.value
    if not isinstance(node, ast.Name):
        return None
    parts.insert(0, node.id)
    return parts


def _get_python_visibility(name: str) -> str:
    """
    Determine visibility based on Python naming conventions.

    __dunder__ -> "public" (special methods are part of the public API)
    __private or _private -> "private" (internal use)
    public -> "public"
    """
    if name.startswith("__") and name.endswith("__"):
        return "public"
    elif name.startswith("_"):
        return "private"
    else:
        return "public"


def _annotation_text(node: ast.expr | None) -> str | None:
    """Source text of an annotation; string forward references lose their quotes."""
    if node is None:
        return None
    if isinstance(node, ast.Constant) and isinstance(node.value, str):
        return node.value
    return ast.unparse(node)


def _decorator_names(func: ast.FunctionDef | ast.AsyncFunctionDef) -> set[str]:
    names: set[str] = set()
    for decorator in func.decorator_list:
        if isinstance(decorator, ast.Call):
            decorator = decorator.func
        name = base_name(decorator)
        if name:
            names.add(name)
    return names


def _collect_members(node: ast.ClassDef, names: _Names) -> list[Member]:
    """Members of *node* in declaration order; first occurrence of a name wins."""
    members: list[Member] = []
    seen: set[str] = set()

    def add(member: Member) -> None:
        if member.name not in seen:
            seen.add(member.name)
            members.append(member)

    for item in node.body:
        if isinstance(item, (ast.FunctionDef, ast.AsyncFunctionDef)):
            decorators = _decorator_names(item)
            if decorators & _ACCESSOR_DECORATORS:
                continue
            if decorators & _PROPERTY_DECORATORS:
                add(_annotated_property(item.name, item.returns, names))
                continue
            add(_method(item, decorators, names))
            if item.name == "__init__":
                for attribute in _init_attributes(item, names):
                    add(attribute)
        elif isinstance(item, ast.AnnAssign) and isinstance(item.target, ast.Name):
            add(_annotated_property(item.target.id, item.annotation, names))
        elif isinstance(item, ast.Assign):
            for target in item.targets:
                if isinstance(target, ast.Name) and not (
                    target.id.startswith("__") and target.id.endswith("__")
                ):
                    add(
                        Member(
                            target.id,
                            "property",
                            visibility=_get_python_visibility(target.id),
                        )
                    )

    return members


def _annotated_property(name: str, annotation: ast.expr | None, names: _Names) -> Member:
    modifiers: list[str] = []
    if isinstance(annotation, ast.Subscript) and base_name(annotation.value) in (
        "ClassVar",
        "Final",
    ):
        modifiers.append("static" if base_name(annotation.value) == "ClassVar" else "readonly")
        annotation = annotation.slice
    elif annotation is not None and base_name(annotation) in ("ClassVar", "Final"):
        modifiers.append("static" if base_name(annotation) == "ClassVar" else "readonly")
        annotation = None
    return Member(
        name,
        "property",
        visibility=_get_python_visibility(name),
        modifiers=modifiers,
        type=_annotation_text(annotation),
        references=names.references(annotation),
    )


def _method(
    func: ast.FunctionDef | ast.AsyncFunctionDef, decorators: set[str], names: _Names
) -> Member:
    args = func.args
    positional = [*args.posonlyargs, *args.args]
    if positional and "staticmethod" not in decorators:
        positional = positional[1:]  # self / cls

    parameters: list[Parameter] = []
    references: list[TypeRef] = []
    all_args = [(a.arg, a) for a in positional]
    if args.vararg is not None:
        all_args.append((f"*{args.vararg.arg}", args.vararg))
    all_args.extend((a.arg, a) for a in args.kwonlyargs)
    if args.kwarg is not None:
        all_args.append((f"**{args.kwarg.arg}", args.kwarg))

    for display, arg in all_args:
        annotation = arg.annotation
        parameters.append(
            Parameter(display, _annotation_text(annotation))
        )
        references.extend(names.references(annotation))
    references.extend(names.references(func.returns))

    modifiers: list[str] = []
    if decorators & _STATIC_DECORATORS:
        modifiers.append("static")
    if "abstractmethod" in decorators:
        modifiers.append("abstract")
    if isinstance(func, ast.AsyncFunctionDef):
        modifiers.append("async")

    return Member(
        func.name,
        "method",
        visibility=_get_python_visibility(func.name),
        modifiers=modifiers,
        type=_annotation_text(func.returns),
        parameters=parameters,
        references=references,
    )


def _init_attributes(func: ast.FunctionDef | ast.AsyncFunctionDef, names: _Names) -> list[Member]:
    """Properties assigned on ``self`` inside ``__init__``, in source order."""
    all_args = [*func.args.posonlyargs, *func.args.args]
    if not all_args:
        return []
    self_name = all_args[0].arg
    param_annotations = {
        a.arg: a.annotation for a in all_args[1:] + func.args.kwonlyargs if a.annotation
    }

    found: list[tuple[int, int, str, ast.expr | None]] = []
    for node in ast.walk(func):
        if isinstance(node, ast.AnnAssign):
            targets, annotation = [node.target], node.annotation
        elif isinstance(node, ast.Assign):
            targets = node.targets
            annotation = (
                param_annotations.get(node.value.id)
                if isinstance(node.value, ast.Name)
                else None
            )
        else:
            continue
        for target in targets:
            if (
                isinstance(target, ast.Attribute)
                and isinstance(target.value, ast.Name)
                and target.value.id == self_name
            ):
                found.append((target.lineno, target.col_offset, target.attr, annotation))

    return [
        _annotated_property(attr, annotation, names)
        for _, _, attr, annotation in sorted(found, key=lambda f: (f[0], f[1]))
    ]


def _is_abstract(node: ast.ClassDef, members: list[Member]) -> bool:
    if any(base_name(b) == "ABC" for b in node.bases):
        return True
    if any(
        kw.arg == "metaclass" and base_name(kw.value) == "ABCMeta" for kw in node.keywords
    ):
        return True
    return any(m.is_abstract for m in members)
