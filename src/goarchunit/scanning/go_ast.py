"""Helpers over tree-sitter-go syntax nodes.

``TypeResolver`` turns type nodes into structural ``TypeRef`` values and
infers the static type of simple initializer expressions, the way the Go
type checker would report them for package-level declarations.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from ..model.entities import Param
from ..model.types import (
    ANY,
    BASIC_TYPES,
    CONTEXT,
    EMPTY_INTERFACE,
    ERROR,
    UNIVERSE_NAMED,
    UNKNOWN,
    UNTYPED_DEFAULTS,
    TypeRef,
    basic,
    named,
    pointer,
    slice_of,
)

_MAJOR_VERSION = re.compile(r"^v[0-9]+$")

# Results of standard library calls that commonly initialize package state.
KNOWN_CALL_RESULTS: dict[str, TypeRef] = {
    "errors.New": ERROR,
    "errors.Join": ERROR,
    "fmt.Errorf": ERROR,
    "context.Background": CONTEXT,
    "context.TODO": CONTEXT,
    "time.Now": named("time", "Time"),
    "regexp.MustCompile": pointer(named("regexp", "Regexp")),
}

# Standard library types used in conversions such as time.Duration(5).
KNOWN_CONVERSIONS = frozenset({"time.Duration", "time.Month", "os.FileMode", "fs.FileMode"})

COMPARISON_OPERATORS = frozenset({"==", "!=", "<", "<=", ">", ">=", "&&", "||"})

BUILTIN_INT_RESULTS = frozenset({"len", "cap", "copy"})


def node_text(node: Any) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8", errors="replace")


def node_line(node: Any) -> int:
    return node.start_point[0] + 1


def string_value(node: Any) -> Optional[str]:
    """The value of a Go string literal node, or None for other nodes."""
    if node is None:
        return None
    raw = node_text(node)
    if node.type == "raw_string_literal":
        return raw[1:-1]
    if node.type == "interpreted_string_literal":
        body = raw[1:-1]
        return body.replace('\\"', '"').replace("\\\\", "\\")
    return None


def default_import_name(path: str) -> str:
    """The identifier a Go import is referred to by when it has no alias.

    ``github.com/x/yaml.v3`` and ``github.com/x/go-yaml`` are both ``yaml``;
    a trailing major version segment (``/v2``) is skipped.
    """
    segments = [s for s in path.split("/") if s]
    if not segments:
        return path
    name = segments[-1]
    if _MAJOR_VERSION.match(name) and len(segments) > 1:
        name = segments[-2]
    if name.startswith("go-"):
        name = name[3:]
    for suffix in ("-go", ".go"):
        if name.endswith(suffix):
            name = name[: -len(suffix)]
    name = re.sub(r"\.v[0-9]+$", "", name)
    return name.replace("-", "_").replace(".", "_")


def parameters(resolver: TypeResolver, node: Any) -> tuple[tuple[Param, ...], bool]:
    """Expand a parameter_list into ordered Params.

    ``a, b string`` yields two params; unnamed parameters get ``""``.
    Returns the params and whether the last one is variadic.
    """
    params: list[Param] = []
    variadic = False
    if node is None:
        return (), False
    for child in node.named_children:
        if child.type == "parameter_declaration":
            typ = resolver.resolve(child.child_by_field_name("type"))
            names = child.children_by_field_name("name")
            if names:
                params.extend(Param(node_text(n), typ) for n in names)
            else:
                params.append(Param("", typ))
        elif child.type == "variadic_parameter_declaration":
            typ = slice_of(resolver.resolve(child.child_by_field_name("type")))
            name = child.child_by_field_name("name")
            params.append(Param(node_text(name) if name is not None else "", typ))
            variadic = True
    return tuple(params), variadic


def results(resolver: TypeResolver, node: Any) -> tuple[Param, ...]:
    if node is None:
        return ()
    if node.type == "parameter_list":
        return parameters(resolver, node)[0]
    return (Param("", resolver.resolve(node)),)


class TypeResolver:
    """Resolves type and expression nodes within one file of one package.

    Args:
        package_id: Import path of the package being parsed
        imports: Import alias to import path for the file
        local_types: Names of types declared at package level
        type_params: Names of type parameters in scope
    """

    def __init__(
        self,
        package_id: str,
        imports: dict[str, str],
        local_types: frozenset[str] = frozenset(),
        type_params: frozenset[str] = frozenset(),
    ) -> None:
        self.package_id = package_id
        self.imports = imports
        self.local_types = local_types
        self.type_params = type_params

    def with_type_params(self, node: Any) -> TypeResolver:
        """A resolver that also knows the type parameters declared by node."""
        if node is None:
            return self
        names = set(self.type_params)
        for decl in node.named_children:
            for name in decl.children_by_field_name("name"):
                names.add(node_text(name))
        return TypeResolver(self.package_id, self.imports, self.local_types, frozenset(names))

    # ------------------------------------------------------------------
    # Types
    # ------------------------------------------------------------------

    def named_type(self, name: str) -> TypeRef:
        if name in BASIC_TYPES:
            return basic(name)
        if name in UNIVERSE_NAMED:
            return named("", name)
        if name == "any":
            return ANY
        if name in self.type_params:
            return TypeRef(kind="param", name=name)
        return named(self.package_id, name)

    def qualified(self, alias: str, name: str) -> TypeRef:
        return named(self.imports.get(alias, alias), name)

    def resolve(self, node: Any) -> TypeRef:
        if node is None:
            return UNKNOWN
        kind = node.type
        if kind in ("type_identifier", "identifier"):
            return self.named_type(node_text(node))
        if kind == "qualified_type":
            return self.qualified(
                node_text(node.child_by_field_name("package")),
                node_text(node.child_by_field_name("name")),
            )
        if kind == "pointer_type":
            return pointer(self.resolve(_first_named(node)))
        if kind == "slice_type":
            return slice_of(self.resolve(node.child_by_field_name("element")))
        if kind == "array_type":
            return TypeRef(
                kind="array",
                length=node_text(node.child_by_field_name("length")),
                elem=self.resolve(node.child_by_field_name("element")),
            )
        if kind == "implicit_length_array_type":
            return TypeRef(
                kind="array", length="...", elem=self.resolve(node.child_by_field_name("element"))
            )
        if kind == "map_type":
            return TypeRef(
                kind="map",
                key=self.resolve(node.child_by_field_name("key")),
                elem=self.resolve(node.child_by_field_name("value")),
            )
        if kind == "channel_type":
            return TypeRef(
                kind="chan",
                elem=self.resolve(node.child_by_field_name("value")),
                direction=_channel_direction(node),
            )
        if kind == "function_type":
            params, variadic = parameters(self, node.child_by_field_name("parameters"))
            returns = results(self, node.child_by_field_name("result"))
            return TypeRef(
                kind="func",
                params=tuple(p.type for p in params),
                results=tuple(r.type for r in returns),
                variadic=variadic,
            )
        if kind == "generic_type":
            base = self.resolve(node.child_by_field_name("type"))
            args_node = node.child_by_field_name("type_arguments")
            args: tuple[TypeRef, ...] = ()
            if args_node is not None:
                args = tuple(self.resolve(_unwrap_elem(a)) for a in args_node.named_children)
            return TypeRef(kind="named", package=base.package, name=base.name, args=args)
        if kind == "struct_type":
            return TypeRef(kind="struct", text=self._struct_text(node))
        if kind == "interface_type":
            if not node.named_children:
                return EMPTY_INTERFACE
            members = [_squash(node_text(c)) for c in node.named_children if c.type != "comment"]
            return TypeRef(kind="interface", text="interface{" + "; ".join(members) + "}")
        if kind in ("parenthesized_type", "type_elem"):
            return self.resolve(_first_named(node))
        return UNKNOWN

    def _struct_text(self, node: Any) -> str:
        fields_node = _first_named(node)
        parts = []
        if fields_node is not None:
            for decl in fields_node.named_children:
                if decl.type != "field_declaration":
                    continue
                typ = self.resolve(decl.child_by_field_name("type"))
                names = decl.children_by_field_name("name")
                if names:
                    parts.extend(f"{node_text(n)} {typ}" for n in names)
                else:
                    parts.append(str(typ))
        return "struct{" + "; ".join(parts) + "}"

    def expression_as_type(self, node: Any) -> TypeRef:
        """Resolve an expression that names a type, as in new(T) or make([]T, 0)."""
        if node is None:
            return UNKNOWN
        if node.type == "selector_expression":
            operand = node.child_by_field_name("operand")
            if operand is not None and operand.type == "identifier":
                field_name = node_text(node.child_by_field_name("field"))
                return self.qualified(node_text(operand), field_name)
            return UNKNOWN
        operator = node_text(node.child_by_field_name("operator"))
        if node.type == "unary_expression" and operator == "*":
            return pointer(self.expression_as_type(node.child_by_field_name("operand")))
        if node.type == "parenthesized_expression":
            return self.expression_as_type(_first_named(node))
        return self.resolve(node)

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def infer(self, node: Any) -> TypeRef:
        """Static type of an initializer expression.

        Identifiers and calls of package functions yield deferred ``ref`` and
        ``call`` TypeRefs that the artifact resolves once every package is
        parsed; anything else that cannot be typed locally is unknown.
        """
        if node is None:
            return UNKNOWN
        kind = node.type
        if kind in UNTYPED_DEFAULTS:
            return basic(UNTYPED_DEFAULTS[kind])
        if kind == "iota":
            return basic("int")
        if kind == "nil":
            return UNKNOWN
        if kind == "composite_literal":
            return self.resolve(node.child_by_field_name("type"))
        if kind == "func_literal":
            params, variadic = parameters(self, node.child_by_field_name("parameters"))
            returns = results(self, node.child_by_field_name("result"))
            return TypeRef(
                kind="func",
                params=tuple(p.type for p in params),
                results=tuple(r.type for r in returns),
                variadic=variadic,
            )
        if kind == "unary_expression":
            operator = node_text(node.child_by_field_name("operator"))
            operand = node.child_by_field_name("operand")
            if operator == "&":
                inner = self.infer(operand)
                return pointer(inner) if inner.kind != "unknown" else UNKNOWN
            if operator == "!":
                return basic("bool")
            if operator in ("-", "+", "^"):
                return self.infer(operand)
            return UNKNOWN
        if kind == "binary_expression":
            if node_text(node.child_by_field_name("operator")) in COMPARISON_OPERATORS:
                return basic("bool")
            return self.infer(node.child_by_field_name("left"))
        if kind == "parenthesized_expression":
            return self.infer(_first_named(node))
        if kind in ("type_conversion_expression", "type_assertion_expression"):
            return self.resolve(node.child_by_field_name("type"))
        if kind == "call_expression":
            return self._infer_call(node)
        if kind == "identifier":
            name = node_text(node)
            if name in ("true", "false"):
                return basic("bool")
            return TypeRef(kind="ref", package=self.package_id, name=name)
        if kind == "selector_expression":
            operand = node.child_by_field_name("operand")
            if (
                operand is not None
                and operand.type == "identifier"
                and node_text(operand) in self.imports
            ):
                return TypeRef(
                    kind="ref",
                    package=self.imports[node_text(operand)],
                    name=node_text(node.child_by_field_name("field")),
                )
        return UNKNOWN

    def _infer_call(self, node: Any) -> TypeRef:
        function = node.child_by_field_name("function")
        arguments = node.child_by_field_name("arguments")
        args = arguments.named_children if arguments is not None else []
        if function is None:
            return UNKNOWN

        if function.type == "identifier":
            name = node_text(function)
            if name == "new" and args:
                return pointer(self.expression_as_type(args[0]))
            if name == "make" and args:
                return self.expression_as_type(args[0])
            if name in BUILTIN_INT_RESULTS:
                return basic("int")
            if name == "append" and args:
                return self.infer(args[0])
            if name in BASIC_TYPES or name in UNIVERSE_NAMED:
                return self.named_type(name)
            if name in self.local_types:
                return named(self.package_id, name)
            return TypeRef(kind="call", package=self.package_id, name=name)

        if function.type == "selector_expression":
            operand = function.child_by_field_name("operand")
            field_name = node_text(function.child_by_field_name("field"))
            if operand is not None and operand.type == "identifier":
                alias = node_text(operand)
                if alias in self.imports:
                    path = self.imports[alias]
                    known = KNOWN_CALL_RESULTS.get(f"{path}.{field_name}")
                    if known is not None:
                        return known
                    if f"{path}.{field_name}" in KNOWN_CONVERSIONS:
                        return named(path, field_name)
                    return TypeRef(kind="call", package=path, name=field_name)
            return UNKNOWN

        if function.type in ("parenthesized_expression", "parenthesized_type"):
            # (*T)(x) conversions
            return self.expression_as_type(function)

        if function.type in (
            "slice_type",
            "array_type",
            "map_type",
            "pointer_type",
            "qualified_type",
            "generic_type",
            "function_type",
            "channel_type",
            "interface_type",
        ):
            return self.resolve(function)

        return UNKNOWN


def _first_named(node: Any) -> Any:
    for child in node.named_children:
        if child.type != "comment":
            return child
    return None


def _unwrap_elem(node: Any) -> Any:
    if node.type == "type_elem" and node.named_children:
        return node.named_children[0]
    return node


def _channel_direction(node: Any) -> str:
    tokens = [c.type for c in node.children if not c.is_named]
    if tokens and tokens[0] == "<-":
        return "recv"
    if "<-" in tokens:
        return "send"
    return ""


def _squash(text: str) -> str:
    return " ".join(text.split())


def collect_directives(node: Any) -> list[str]:
    """``//go:`` directive comments immediately preceding a declaration."""
    directives = []
    sibling = node.prev_sibling
    expected_row = node.start_point[0] - 1
    while (
        sibling is not None
        and sibling.type == "comment"
        and sibling.end_point[0] == expected_row
    ):
        text = node_text(sibling)
        if text.startswith("//go:"):
            directives.append(text)
        expected_row = sibling.start_point[0] - 1
        sibling = sibling.prev_sibling
    directives.reverse()
    return directives
