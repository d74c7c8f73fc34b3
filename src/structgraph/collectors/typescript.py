"""Collect namespaces, classes, interfaces and enums from TypeScript units."""

from __future__ import annotations

import logging

import tree_sitter

from structgraph.config import Settings
from structgraph.frontend.base import Program, SourceUnit
from structgraph.frontend.typescript import (
    TYPE_DECL_TYPES,
    resolve_specifier,
    unquote,
    unwrap,
)
from structgraph.model import Class, Enum, Interface, Member, Module, Parameter, TypeRef

logger = logging.getLogger(__name__)

# Path of nested module names from the unit's module down to a namespace.
ScopePath = tuple[str, ...]

_NAMESPACE_TYPES = {"module", "internal_module"}
_METHOD_TYPES = {"method_definition", "method_signature", "abstract_method_signature"}
_PROPERTY_TYPES = {"public_field_definition", "property_signature"}
_MODIFIER_TOKENS = {
    "static": "static",
    "abstract": "abstract",
    "readonly": "readonly",
    "async": "async",
    "?": "optional",
}


class TypeScriptCollector:
    """Build a Module from one parsed TypeScript unit."""

    def __init__(self, settings: Settings | None = None):
        self._settings = settings or Settings()

    def collect(self, unit: SourceUnit, program: Program) -> Module:
        module = Module(unit.module_name, path=unit.path.as_posix())
        scope = _Scope(unit, program)
        self._collect_statements(
            unit.tree.root_node.named_children, module, (unit.module_name,), scope
        )
        logger.debug(
            "%s: %d type(s), %d nested module(s)",
            module.name,
            len(module.types),
            len(module.modules),
        )
        return module

    def _collect_statements(
        self,
        nodes: list[tree_sitter.Node],
        module: Module,
        path: ScopePath,
        scope: _Scope,
    ) -> None:
        for node in nodes:
            if node.type in ("import_statement", "export_statement"):
                target = scope.import_target(node)
                if target is not None:
                    module.add_dependency(target, "import")

            decl = unwrap(node)
            if decl.type in _NAMESPACE_TYPES:
                self._collect_namespace(decl, module, path, scope)
            elif decl.type in TYPE_DECL_TYPES:
                self._collect_type(decl, module, path, scope)

    def _collect_namespace(
        self, node: tree_sitter.Node, parent: Module, path: ScopePath, scope: _Scope
    ) -> None:
        current = parent
        for part in _namespace_parts(node):
            path = (*path, part)
            name = _qualified(path)
            nested = next((m for m in current.modules if m.name == name), None)
            if nested is None:
                nested = Module(name)
                current.modules.append(nested)
            current = nested

        body = node.child_by_field_name("body")
        if body is not None:
            self._collect_statements(body.named_children, current, path, scope)

    def _collect_type(
        self, node: tree_sitter.Node, module: Module, path: ScopePath, scope: _Scope
    ) -> None:
        name = _text(node.child_by_field_name("name"))
        kind = TYPE_DECL_TYPES[node.type]
        type_params = _type_parameters(node)

        def record(refs: list[TypeRef], dep_kind: str) -> None:
            for ref in refs:
                if ref.module is not None and ref.module != module.name:
                    module.add_dependency(ref.module, dep_kind)

        if kind == "enum":
            module.enums.append(Enum(name, _enum_values(node)))
            return

        members = _collect_members(node, path, scope, type_params)
        for member in members:
            record(member.references, "member")

        if kind == "interface":
            extends: list[TypeRef] = []
            for clause in node.named_children:
                if clause.type in ("extends_type_clause", "extends_clause"):
                    for type_node in clause.named_children:
                        if type_node.type == "type_arguments":
                            continue
                        extends.append(_heritage_ref(type_node, path, scope))
                        record(scope.type_refs(type_node, path, type_params), "base")
            module.interfaces.append(Interface(name, members, extends=extends))
            return

        base: TypeRef | None = None
        interfaces: list[TypeRef] = []
        heritage = next((c for c in node.named_children if c.type == "class_heritage"), None)
        if heritage is not None:
            for clause in heritage.named_children:
                if clause.type == "extends_clause":
                    for value in clause.children_by_field_name("value"):
                        ref = _heritage_ref(value, path, scope)
                        if base is None:
                            base = ref
                        record([ref], "base")
                    for args in clause.children_by_field_name("type_arguments"):
                        record(scope.type_refs(args, path, type_params), "base")
                elif clause.type == "implements_clause":
                    for type_node in clause.named_children:
                        interfaces.append(_heritage_ref(type_node, path, scope))
                        record(scope.type_refs(type_node, path, type_params), "base")

        module.classes.append(
            Class(
                name,
                members,
                base=base,
                interfaces=interfaces,
                is_abstract=node.type == "abstract_class_declaration",
            )
        )


class _Scope:
    """Declared names per namespace path, plus the unit's imports."""

    def __init__(self, unit: SourceUnit, program: Program):
        self.module = unit.module_name
        self._known = program.module_names()
        self._types: dict[ScopePath, set[str]] = {}
        self._namespaces: dict[ScopePath, set[str]] = {}
        # local name -> (module, exported name)
        self._named: dict[str, tuple[str, str]] = {}
        # local name -> module, for `import * as x` and `import x = require()`
        self._modules: dict[str, str] = {}

        root = unit.tree.root_node
        self._index(root.named_children, (self.module,))
        for node in root.named_children:
            if node.type == "import_statement":
                self._index_import(node)

    def _index(self, nodes: list[tree_sitter.Node], path: ScopePath) -> None:
        for node in nodes:
            decl = unwrap(node)
            if decl.type in _NAMESPACE_TYPES:
                inner = path
                for part in _namespace_parts(decl):
                    self._namespaces.setdefault(inner, set()).add(part)
                    inner = (*inner, part)
                body = decl.child_by_field_name("body")
                if body is not None:
                    self._index(body.named_children, inner)
            elif decl.type in TYPE_DECL_TYPES or decl.type == "type_alias_declaration":
                name = decl.child_by_field_name("name")
                if name is not None:
                    self._types.setdefault(path, set()).add(_text(name))

    def _index_import(self, node: tree_sitter.Node) -> None:
        target = self.import_target(node)
        if target is None:
            return
        for child in node.named_children:
            if child.type == "import_require_clause":
                ident = next(c for c in child.named_children if c.type == "identifier")
                self._modules[_text(ident)] = target
            elif child.type == "import_clause":
                for part in child.named_children:
                    if part.type == "identifier":
                        self._named[_text(part)] = (target, _text(part))
                    elif part.type == "namespace_import":
                        ident = next(c for c in part.named_children if c.type == "identifier")
                        self._modules[_text(ident)] = target
                    elif part.type == "named_imports":
                        for spec in part.named_children:
                            if spec.type != "import_specifier":
                                continue
                            name = spec.child_by_field_name("name")
                            alias = spec.child_by_field_name("alias")
                            local = alias if alias is not None else name
                            self._named[_text(local)] = (target, _text(name))

    def import_target(self, node: tree_sitter.Node) -> str | None:
        """Module named by an import or re-export statement, if any."""
        source = node.child_by_field_name("source")
        if source is None:
            for child in node.named_children:
                if child.type == "import_require_clause":
                    source = child.child_by_field_name("source")
        if source is None:
            return None
        return resolve_specifier(self.module, unquote(source), self._known)

    def resolve(self, parts: list[str], path: ScopePath) -> TypeRef | None:
        """Resolve a possibly qualified type name seen inside namespace *path*."""
        head = parts[0]
        if len(parts) == 1:
            for i in range(len(path), 0, -1):
                if head in self._types.get(path[:i], ()):
                    return TypeRef(head, _qualified(path[:i]))
            if head in self._named:
                target, exported = self._named[head]
                return TypeRef(exported, target)
            return None

        if head in self._modules:
            return TypeRef(parts[-1], self._modules[head])
        for i in range(len(path), 0, -1):
            if head in self._namespaces.get(path[:i], ()):
                inner = (*path[:i], head)
                for part in parts[1:-1]:
                    if part not in self._namespaces.get(inner, ()):
                        break
                    inner = (*inner, part)
                return TypeRef(parts[-1], _qualified(inner))
        if head in self._named:
            return TypeRef(parts[-1], self._named[head][0])
        return None

    def type_refs(
        self, node: tree_sitter.Node | None, path: ScopePath, type_params: set[str]
    ) -> list[TypeRef]:
        """Resolved references to named types inside a type expression."""
        refs: list[TypeRef] = []
        if node is not None:
            self._visit(node, path, type_params, refs)
        return refs

    def _visit(
        self,
        node: tree_sitter.Node,
        path: ScopePath,
        type_params: set[str],
        refs: list[TypeRef],
    ) -> None:
        if node.type == "type_identifier":
            name = _text(node)
            if name not in type_params:
                ref = self.resolve([name], path)
                if ref is not None:
                    refs.append(ref)
        elif node.type == "nested_type_identifier":
            ref = self.resolve(_text(node).split("."), path)
            if ref is not None:
                refs.append(ref)
        elif node.type != "type_query":
            for child in node.named_children:
                self._visit(child, path, type_params, refs)


def _qualified(path: ScopePath) -> str:
    """Module name of a namespace path: the unit name, then dotted namespaces."""
    return ".".join(path)


def _text(node: tree_sitter.Node | None) -> str:
    return node.text.decode("utf-8") if node is not None else ""


def _annotation(node: tree_sitter.Node | None) -> str | None:
    """Type text of a ``type_annotation`` node, whitespace collapsed."""
    if node is None:
        return None
    inner = node.named_children[0] if node.named_children else node
    return " ".join(_text(inner).split())


def _namespace_parts(node: tree_sitter.Node) -> list[str]:
    name = node.child_by_field_name("name")
    if name is None:
        return []
    if name.type == "string":
        return [unquote(name)]
    return _text(name).split(".")


def _type_parameters(node: tree_sitter.Node) -> set[str]:
    params = node.child_by_field_name("type_parameters")
    if params is None:
        return set()
    names: set[str] = set()
    for param in params.named_children:
        name = param.child_by_field_name("name")
        if name is not None:
            names.add(_text(name))
    return names


def _heritage_ref(node: tree_sitter.Node, path: ScopePath, scope: _Scope) -> TypeRef:
    head = node.child_by_field_name("name") if node.type == "generic_type" else node
    parts = _text(head).split(".")
    return scope.resolve(parts, path) or TypeRef(parts[-1])


def _modifiers(node: tree_sitter.Node) -> tuple[str, list[str]]:
    """Visibility and modifier list of a member declaration."""
    visibility = "public"
    modifiers: list[str] = []
    for child in node.children:
        if child.type == "accessibility_modifier":
            visibility = _text(child)
        elif child.type in _MODIFIER_TOKENS:
            modifiers.append(_MODIFIER_TOKENS[child.type])
    name = node.child_by_field_name("name")
    if name is not None and name.type == "private_property_identifier":
        visibility = "private"
    return visibility, modifiers


def _parameters(
    node: tree_sitter.Node | None, path: ScopePath, scope: _Scope, type_params: set[str]
) -> tuple[list[Parameter], list[TypeRef]]:
    parameters: list[Parameter] = []
    references: list[TypeRef] = []
    if node is None:
        return parameters, references
    for param in node.named_children:
        if param.type not in ("required_parameter", "optional_parameter"):
            continue
        pattern = param.child_by_field_name("pattern") or param.child_by_field_name("name")
        if pattern is None or pattern.type == "this":
            continue
        name = _text(pattern)
        if param.type == "optional_parameter":
            name += "?"
        type_node = param.child_by_field_name("type")
        parameters.append(Parameter(name, _annotation(type_node)))
        references.extend(scope.type_refs(type_node, path, type_params))
    return parameters, references


def _collect_members(
    node: tree_sitter.Node, path: ScopePath, scope: _Scope, type_params: set[str]
) -> list[Member]:
    """Members of a class or interface body, in declaration order."""
    body = node.child_by_field_name("body")
    if body is None:
        return []

    members: list[Member] = []
    seen: set[str] = set()

    def add(member: Member) -> None:
        if member.name not in seen:
            seen.add(member.name)
            members.append(member)

    for child in body.named_children:
        if child.type in _METHOD_TYPES:
            name = _text(child.child_by_field_name("name"))
            visibility, modifiers = _modifiers(child)
            method_params = type_params | _type_parameters(child)
            params_node = child.child_by_field_name("parameters")
            return_node = child.child_by_field_name("return_type")
            parameters, references = _parameters(params_node, path, scope, method_params)
            references.extend(scope.type_refs(return_node, path, method_params))
            accessor = next((c.type for c in child.children if c.type in ("get", "set")), None)

            if accessor is not None:
                if accessor == "get":
                    type_text = _annotation(return_node)
                else:
                    type_text = parameters[0].type if parameters else None
                member = Member(
                    name,
                    "property",
                    visibility=visibility,
                    modifiers=modifiers,
                    type=type_text,
                    references=references,
                )
            else:
                member = Member(
                    name,
                    "method",
                    visibility=visibility,
                    modifiers=modifiers,
                    type=_annotation(return_node),
                    parameters=parameters,
                    references=references,
                )
            add(member)

            if name == "constructor" and params_node is not None:
                for prop in _parameter_properties(params_node, path, scope, type_params):
                    add(prop)
        elif child.type in _PROPERTY_TYPES:
            type_node = child.child_by_field_name("type")
            visibility, modifiers = _modifiers(child)
            add(
                Member(
                    _text(child.child_by_field_name("name")),
                    "property",
                    visibility,
                    modifiers,
                    type=_annotation(type_node),
                    references=scope.type_refs(type_node, path, type_params),
                )
            )

    return members


def _parameter_properties(
    params: tree_sitter.Node, path: ScopePath, scope: _Scope, type_params: set[str]
) -> list[Member]:
    """Constructor parameters declared with an accessibility or readonly modifier."""
    result: list[Member] = []
    for param in params.named_children:
        if param.type not in ("required_parameter", "optional_parameter"):
            continue
        visibility, modifiers = _modifiers(param)
        has_modifier = any(
            c.type in ("accessibility_modifier", "readonly") for c in param.children
        )
        pattern = param.child_by_field_name("pattern") or param.child_by_field_name("name")
        if not has_modifier or pattern is None:
            continue
        type_node = param.child_by_field_name("type")
        result.append(
            Member(
                _text(pattern),
                "property",
                visibility,
                modifiers,
                type=_annotation(type_node),
                references=scope.type_refs(type_node, path, type_params),
            )
        )
    return result


def _enum_values(node: tree_sitter.Node) -> list[Member]:
    body = node.child_by_field_name("body")
    values: list[Member] = []
    if body is None:
        return values
    for child in body.named_children:
        if child.type == "enum_assignment":
            child = child.child_by_field_name("name")
        if child is None or child.type == "comment":
            continue
        name = unquote(child) if child.type == "string" else _text(child)
        values.append(Member(name, "property"))
    return values
