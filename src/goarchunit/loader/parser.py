"""Parse the files of one package listing into a model Package."""

from __future__ import annotations

import glob
import os
import shlex
from dataclasses import dataclass, field, replace
from typing import Any, Optional

from ..exceptions import FileAccessError, ParsingError
from ..logging_config import get_logger
from ..model.entities import (
    CallSite,
    Constant,
    DeclarationIssue,
    Function,
    GoType,
    Package,
    Param,
    TestFileReference,
    UseSite,
    Variable,
)
from ..model.types import UNKNOWN, TypeRef, pointer
from ..scanning.go_ast import (
    TypeResolver,
    collect_directives,
    default_import_name,
    node_line,
    node_text,
    parameters,
    results,
    string_value,
)
from ..scanning.queries import IMPORT_QUERY, QUALIFIED_CALL_QUERY, REFERENCE_QUERY
from ..scanning.treesitter_parser import TreeSitterParser
from .listing import PackageListing
from .source_walker import read_source

logger = get_logger(__name__)

# (import path, function) pairs whose first argument names a file
FILE_ACCESS_CALLS = frozenset(
    {
        ("os", "Open"),
        ("os", "OpenFile"),
        ("os", "ReadFile"),
        ("os", "Stat"),
        ("os", "Lstat"),
        ("io/ioutil", "ReadFile"),
    }
)
PATH_JOIN_CALLS = frozenset({("path/filepath", "Join"), ("path", "Join")})

EXEMPTING_DIRECTIVES = ("//go:embed", "//go:linkname")

_DECLARATION_NAME_PARENTS = frozenset(
    {
        "const_spec",
        "var_spec",
        "function_declaration",
        "method_declaration",
        "type_spec",
        "type_alias",
        "parameter_declaration",
        "variadic_parameter_declaration",
        "field_declaration",
        "type_parameter_declaration",
        "method_elem",
        "method_spec",
    }
)

_INTERFACE_ELEM_TYPES = frozenset({"type_identifier", "qualified_type", "generic_type"})


@dataclass
class _SourceUnit:
    path: str
    tree: Any
    package_name: str
    imports: dict[str, str]
    is_test: bool

    @property
    def root(self) -> Any:
        return self.tree.root_node

    @property
    def is_external_test(self) -> bool:
        return self.is_test and self.package_name.endswith("_test")


@dataclass
class _Declarations:
    constants: list[Constant] = field(default_factory=list)
    variables: list[Variable] = field(default_factory=list)
    functions: list[Function] = field(default_factory=list)
    types: list[GoType] = field(default_factory=list)
    methods: dict[str, list[Function]] = field(default_factory=dict)
    init_files: list[str] = field(default_factory=list)

    def names(self) -> set[str]:
        names = {c.name for c in self.constants}
        names.update(v.name for v in self.variables)
        names.update(f.name for f in self.functions)
        names.update(t.name for t in self.types)
        return names


class PackageParser:
    """Build a Package from its source files.

    Declarations come from non-test files. Use sites are collected from every
    file; context calls and declaration order from non-test files; file
    references from test files. The last three only for application packages.
    """

    def __init__(self, parser: TreeSitterParser, module: str):
        self.parser = parser
        self.module = module

    def parse(self, listing: PackageListing) -> tuple[Package, list[ParsingError]]:
        errors: list[ParsingError] = []
        application = self._is_application(listing.import_path)

        units = []
        for path in listing.go_files:
            unit = self._read(path, False, errors)
            if unit is not None:
                units.append(unit)
        for path in listing.all_test_files:
            unit = self._read(path, True, errors)
            if unit is not None:
                units.append(unit)

        sources = [u for u in units if not u.is_test]
        name = listing.name or next((u.package_name for u in sources), "")
        if not name:
            name = next((u.package_name for u in units if not u.is_external_test), "")

        decls = self._declarations(listing.import_path, sources)
        types = tuple(
            t if t.is_interface else replace(t, methods=tuple(decls.methods.get(t.name, ())))
            for t in decls.types
        )

        imports = listing.imports
        if imports is None:
            imports = _sorted_unique(p for u in sources for p in u.imports.values())
        test_imports = listing.test_imports
        if test_imports is None:
            test_imports = _sorted_unique(
                p for u in units if u.is_test for p in u.imports.values()
            )

        use_sites: list[UseSite] = []
        member_uses: set[tuple[str, str]] = set()
        context_calls: list[CallSite] = []
        issues: list[DeclarationIssue] = []
        references: list[TestFileReference] = []
        if application:
            local_names = decls.names()
            for unit in units:
                referrer = listing.import_path + ("_test" if unit.is_external_test else "")
                self._collect_uses(
                    unit, listing.import_path, local_names, referrer, use_sites, member_uses
                )
            local_types = frozenset(t.name for t in decls.types)
            for unit in sources:
                resolver = TypeResolver(listing.import_path, unit.imports, local_types)
                context_calls.extend(self._context_calls(unit, resolver))
                issue = declaration_order_issue(unit.path, unit.root)
                if issue is not None:
                    issues.append(issue)
            for unit in units:
                if unit.is_test:
                    references.extend(self._test_file_references(unit, listing.dir))

        package = Package(
            id=listing.import_path,
            name=name,
            dir=listing.dir,
            go_files=tuple(listing.go_files),
            test_go_files=tuple(listing.all_test_files),
            imports=tuple(imports),
            test_imports=tuple(test_imports),
            application=application,
            standard=listing.standard,
            constants=tuple(decls.constants),
            functions=tuple(decls.functions),
            types=types,
            variables=tuple(decls.variables),
            init_files=tuple(decls.init_files),
            use_sites=tuple(use_sites),
            member_uses=frozenset(member_uses),
            context_calls=tuple(context_calls),
            declaration_issues=tuple(issues),
            test_file_references=tuple(references),
        )
        return package, errors

    def _is_application(self, import_path: str) -> bool:
        return import_path == self.module or import_path.startswith(self.module + "/")

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def _read(
        self, path: str, is_test: bool, errors: list[ParsingError]
    ) -> Optional[_SourceUnit]:
        try:
            code = read_source(path)
        except FileAccessError as e:
            logger.warning(f"Skipping {path}: {e.reason}")
            errors.append(ParsingError(path, e.reason))
            return None

        tree = self.parser.parse(code)
        root = tree.root_node
        if root.has_error:
            line = _first_error_line(root)
            logger.warning(f"Syntax error in {path} near line {line}")
            errors.append(ParsingError(path, "syntax error", line))

        package_name = ""
        for child in root.named_children:
            if child.type == "package_clause":
                package_name = node_text(_first_named_child(child))
                break

        return _SourceUnit(
            path=path,
            tree=tree,
            package_name=package_name,
            imports=self._imports(root),
            is_test=is_test,
        )

    def _imports(self, root: Any) -> dict[str, str]:
        imports: dict[str, str] = {}
        for match in self.parser.matches(root, IMPORT_QUERY):
            path_nodes = match.get("import.path")
            if not path_nodes:
                continue
            path = string_value(path_nodes[0])
            if not path:
                continue
            alias_nodes = match.get("import.name")
            alias = node_text(alias_nodes[0]) if alias_nodes else default_import_name(path)
            if alias in ("_", "."):
                # blank and dot imports still count as imports
                imports[f"{alias}{path}"] = path
                continue
            imports[alias] = path
        return imports

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    def _declarations(self, package_id: str, sources: list[_SourceUnit]) -> _Declarations:
        decls = _Declarations()
        local_types = frozenset(
            node_text(spec.child_by_field_name("name"))
            for unit in sources
            for decl in unit.root.named_children
            if decl.type == "type_declaration"
            for spec in decl.named_children
            if spec.type in ("type_spec", "type_alias")
        )
        for unit in sources:
            resolver = TypeResolver(package_id, unit.imports, local_types)
            for decl in unit.root.named_children:
                kind = decl.type
                if kind == "const_declaration":
                    self._constants(decl, unit.path, resolver, decls)
                elif kind == "var_declaration":
                    self._variables(decl, unit.path, resolver, decls)
                elif kind == "function_declaration":
                    self._function(decl, unit.path, resolver, decls)
                elif kind == "method_declaration":
                    self._method(decl, unit.path, resolver, decls)
                elif kind == "type_declaration":
                    for spec in decl.named_children:
                        if spec.type in ("type_spec", "type_alias"):
                            decls.types.append(self._type(spec, unit.path, resolver))
        return decls

    def _constants(
        self, decl: Any, path: str, resolver: TypeResolver, decls: _Declarations
    ) -> None:
        # Within a group, a spec without type and values repeats the previous one.
        previous_type: Optional[Any] = None
        previous_values: list[Any] = []
        for spec in _specs(decl, "const_spec"):
            type_node = spec.child_by_field_name("type")
            value_node = spec.child_by_field_name("value")
            values = _expressions(value_node)
            if type_node is None and not values:
                type_node, values = previous_type, previous_values
            else:
                previous_type, previous_values = type_node, values
            for index, name_node in enumerate(spec.children_by_field_name("name")):
                name = node_text(name_node)
                if name == "_":
                    continue
                if type_node is not None:
                    typ = resolver.resolve(type_node)
                elif index < len(values):
                    typ = resolver.infer(values[index])
                else:
                    typ = UNKNOWN
                decls.constants.append(
                    Constant(name, resolver.package_id, path, node_line(name_node), typ)
                )

    def _variables(
        self, decl: Any, path: str, resolver: TypeResolver, decls: _Declarations
    ) -> None:
        for spec in _specs(decl, "var_spec"):
            type_node = spec.child_by_field_name("type")
            values = _expressions(spec.child_by_field_name("value"))
            names = spec.children_by_field_name("name")
            for index, name_node in enumerate(names):
                name = node_text(name_node)
                if name == "_":
                    continue
                if type_node is not None:
                    typ = resolver.resolve(type_node)
                elif len(values) == len(names):
                    typ = resolver.infer(values[index])
                else:
                    # multi-value call: a, b = f()
                    typ = UNKNOWN
                decls.variables.append(
                    Variable(name, resolver.package_id, path, node_line(name_node), typ)
                )

    def _signature(
        self, decl: Any, resolver: TypeResolver
    ) -> tuple[tuple[Param, ...], tuple[Param, ...], bool]:
        params, variadic = parameters(resolver, decl.child_by_field_name("parameters"))
        returns = results(resolver, decl.child_by_field_name("result"))
        return params, returns, variadic

    def _function(
        self, decl: Any, path: str, resolver: TypeResolver, decls: _Declarations
    ) -> None:
        name = node_text(decl.child_by_field_name("name"))
        if name == "init":
            # init functions are not part of the package scope
            decls.init_files.append(path)
            return
        if name == "_":
            return
        resolver = resolver.with_type_params(decl.child_by_field_name("type_parameters"))
        params, returns, variadic = self._signature(decl, resolver)
        decls.functions.append(
            Function(
                name=name,
                package=resolver.package_id,
                file=path,
                line=node_line(decl),
                params=params,
                returns=returns,
                variadic=variadic,
            )
        )

    def _method(
        self, decl: Any, path: str, resolver: TypeResolver, decls: _Declarations
    ) -> None:
        receiver_type, is_pointer, type_params = _receiver(decl.child_by_field_name("receiver"))
        if not receiver_type:
            return
        if type_params:
            resolver = TypeResolver(
                resolver.package_id,
                resolver.imports,
                resolver.local_types,
                resolver.type_params | frozenset(type_params),
            )
        params, returns, variadic = self._signature(decl, resolver)
        decls.methods.setdefault(receiver_type, []).append(
            Function(
                name=node_text(decl.child_by_field_name("name")),
                package=resolver.package_id,
                file=path,
                line=node_line(decl),
                params=params,
                returns=returns,
                receiver=receiver_type,
                pointer_receiver=is_pointer,
                variadic=variadic,
            )
        )

    def _type(self, spec: Any, path: str, resolver: TypeResolver) -> GoType:
        name = node_text(spec.child_by_field_name("name"))
        resolver = resolver.with_type_params(spec.child_by_field_name("type_parameters"))
        type_node = spec.child_by_field_name("type")
        line = node_line(spec)
        underlying = resolver.resolve(type_node)

        if spec.type == "type_alias":
            return GoType(name, resolver.package_id, path, line, "alias", underlying)

        kind_map = {"interface_type": "interface", "struct_type": "struct", "function_type": "func"}
        kind = kind_map.get(type_node.type if type_node is not None else "", "named")

        if kind == "interface":
            methods, embedded, union = _interface_members(type_node, name, path, resolver)
            return GoType(
                name, resolver.package_id, path, line, kind, underlying, methods, embedded, union
            )
        if kind == "struct":
            return GoType(
                name,
                resolver.package_id,
                path,
                line,
                kind,
                underlying,
                embedded=_embedded_fields(type_node, resolver),
            )
        return GoType(name, resolver.package_id, path, line, kind, underlying)

    # ------------------------------------------------------------------
    # Use sites
    # ------------------------------------------------------------------

    def _collect_uses(
        self,
        unit: _SourceUnit,
        package_id: str,
        local_names: set[str],
        referrer: str,
        use_sites: list[UseSite],
        member_uses: set[tuple[str, str]],
    ) -> None:
        aliases = unit.imports
        for match in self.parser.matches(unit.root, REFERENCE_QUERY):
            if "ref.qualified" in match:
                alias = node_text(match["ref.qualified.package"][0])
                target = match["ref.qualified.name"][0]
                if alias in aliases:
                    use_sites.append(
                        UseSite(
                            f"{aliases[alias]}.{node_text(target)}",
                            unit.path,
                            node_line(target),
                            referrer,
                        )
                    )
                continue

            if "ref.selector" in match:
                operand = match["ref.selector.operand"][0]
                field_node = match["ref.selector.field"][0]
                alias = node_text(operand)
                if operand.type == "identifier" and alias in aliases and alias not in local_names:
                    use_sites.append(
                        UseSite(
                            f"{aliases[alias]}.{node_text(field_node)}",
                            unit.path,
                            node_line(field_node),
                            referrer,
                        )
                    )
                else:
                    member_uses.add((referrer, node_text(field_node)))
                continue

            nodes = match.get("ref.identifier") or match.get("ref.type") or []
            for node in nodes:
                if unit.is_external_test:
                    continue
                name = node_text(node)
                if name not in local_names or _is_declaration_name(node):
                    continue
                if _is_local_binding(node) or _is_shadowed(node, name):
                    continue
                parent = node.parent
                if parent is not None and parent.type == "qualified_type":
                    continue
                use_sites.append(
                    UseSite(f"{package_id}.{name}", unit.path, node_line(node), referrer)
                )

    # ------------------------------------------------------------------
    # Context keys
    # ------------------------------------------------------------------

    def _context_calls(self, unit: _SourceUnit, resolver: TypeResolver) -> list[CallSite]:
        calls = []
        for match in self.parser.matches(unit.root, QUALIFIED_CALL_QUERY):
            alias = node_text(match["call.package"][0])
            function = node_text(match["call.function"][0])
            if unit.imports.get(alias) != "context" or function != "WithValue":
                continue
            args = [a for a in match["call.arguments"][0].named_children if a.type != "comment"]
            if len(args) < 2:
                continue
            key = args[1]
            calls.append(CallSite(unit.path, node_line(key), resolver.infer(key)))
        return calls

    # ------------------------------------------------------------------
    # Files referenced by tests
    # ------------------------------------------------------------------

    def _test_file_references(
        self, unit: _SourceUnit, package_dir: str
    ) -> list[TestFileReference]:
        references: list[TestFileReference] = []
        seen: set[str] = set()

        def add(candidate: str) -> None:
            full = candidate if os.path.isabs(candidate) else os.path.join(package_dir, candidate)
            full = os.path.normpath(full)
            if full in seen or full.endswith(".go") or not os.path.isfile(full):
                return
            seen.add(full)
            references.append(TestFileReference(full, unit.path))

        for match in self.parser.matches(unit.root, QUALIFIED_CALL_QUERY):
            path = unit.imports.get(node_text(match["call.package"][0]))
            function = node_text(match["call.function"][0])
            if (path, function) not in FILE_ACCESS_CALLS:
                continue
            args = [a for a in match["call.arguments"][0].named_children if a.type != "comment"]
            if not args:
                continue
            literal = self._literal_path(args[0], unit.imports)
            if literal:
                add(literal)

        for comment in _comments(unit.root):
            text = node_text(comment)
            if not text.startswith("//go:embed"):
                continue
            try:
                patterns = shlex.split(text[len("//go:embed") :])
            except ValueError:
                continue
            for pattern in patterns:
                pattern = pattern.removeprefix("all:")
                for hit in sorted(glob.glob(os.path.join(package_dir, pattern))):
                    if os.path.isdir(hit):
                        for dirpath, _dirnames, filenames in os.walk(hit):
                            for filename in sorted(filenames):
                                add(os.path.join(dirpath, filename))
                    else:
                        add(hit)
        return references

    def _literal_path(self, node: Any, imports: dict[str, str]) -> Optional[str]:
        value = string_value(node)
        if value is not None:
            return value
        if node.type != "call_expression":
            return None
        function = node.child_by_field_name("function")
        if function is None or function.type != "selector_expression":
            return None
        operand = function.child_by_field_name("operand")
        pair = (imports.get(node_text(operand)), node_text(function.child_by_field_name("field")))
        if pair not in PATH_JOIN_CALLS:
            return None
        arguments = node.child_by_field_name("arguments")
        parts = [string_value(a) for a in arguments.named_children if a.type != "comment"]
        if not parts or any(p is None for p in parts):
            return None
        return os.path.join(*parts)


# ----------------------------------------------------------------------
# Declaration order
# ----------------------------------------------------------------------

_STAGES = {"import_declaration": 0, "const_declaration": 1, "var_declaration": 2}


def declaration_order_issue(path: str, root: Any) -> Optional[DeclarationIssue]:
    """The first declaration-order problem in a file, if any.

    Expected order: imports, one const block, one var block, then types and
    functions. Declarations annotated with ``//go:embed`` or
    ``//go:linkname`` are exempt.
    """
    stage = 0
    counts = {"const": 0, "var": 0}
    for decl in root.named_children:
        if decl.type in ("comment", "package_clause"):
            continue
        if any(d.startswith(EXEMPTING_DIRECTIVES) for d in collect_directives(decl)):
            continue
        current = _STAGES.get(decl.type, 3)
        line = node_line(decl)

        if decl.type == "import_declaration":
            if stage > 0:
                return DeclarationIssue(
                    path, line, "import declaration should be at the top of the file"
                )
            continue

        if decl.type in ("const_declaration", "var_declaration"):
            keyword = "const" if decl.type == "const_declaration" else "var"
            if stage > current:
                following = "var, type and func" if keyword == "const" else "type and func"
                return DeclarationIssue(
                    path, line, f"{keyword} declaration should come before {following} declarations"
                )
            counts[keyword] += 1
            if counts[keyword] > 1:
                return DeclarationIssue(
                    path,
                    line,
                    f"multiple {keyword} declarations should be grouped into a single block",
                )
            spec_type = f"{keyword}_spec"
            if _is_grouped(decl) and len(_specs(decl, spec_type)) == 1:
                return DeclarationIssue(
                    path,
                    line,
                    f"single {keyword} declaration should not be in a parenthesized block",
                )
        stage = max(stage, current)
    return None


# ----------------------------------------------------------------------
# Node helpers
# ----------------------------------------------------------------------


def _sorted_unique(values: Any) -> tuple[str, ...]:
    return tuple(sorted(set(values)))


def _first_named_child(node: Any) -> Any:
    return node.named_children[0] if node.named_children else None


def _first_error_line(root: Any) -> int:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node_line(node)
        if node.has_error:
            stack.extend(reversed(node.children))
    return node_line(root)


def _is_grouped(decl: Any) -> bool:
    return any(child.type == "(" for child in decl.children) or any(
        child.type == "var_spec_list" for child in decl.named_children
    )


def _specs(decl: Any, spec_type: str) -> list[Any]:
    specs = []
    for child in decl.named_children:
        if child.type == spec_type:
            specs.append(child)
        elif child.type == f"{spec_type}_list":
            specs.extend(c for c in child.named_children if c.type == spec_type)
    return specs


def _expressions(node: Any) -> list[Any]:
    if node is None:
        return []
    if node.type == "expression_list":
        return [c for c in node.named_children if c.type != "comment"]
    return [node]


def _comments(root: Any) -> list[Any]:
    comments = []
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "comment":
            comments.append(node)
        else:
            stack.extend(node.children)
    return comments


def _is_declaration_name(node: Any) -> bool:
    parent = node.parent
    if parent is None or parent.type not in _DECLARATION_NAME_PARENTS:
        return False
    return any(n == node for n in parent.children_by_field_name("name"))


def _defines(node: Any) -> bool:
    if node.type == "short_var_declaration":
        return True
    return node.type in ("range_clause", "receive_statement") and any(
        c.type == ":=" for c in node.children
    )


def _left_names(node: Any) -> set[str]:
    left = node.child_by_field_name("left")
    if left is None:
        return set()
    return {node_text(c) for c in left.named_children if c.type == "identifier"}


def _is_local_binding(node: Any) -> bool:
    """Whether an identifier is the name introduced by ``:=`` or a type switch."""
    holder = node.parent
    if holder is None or holder.type != "expression_list":
        return False
    owner = holder.parent
    if owner is None:
        return False
    if owner.type == "type_switch_statement":
        return owner.child_by_field_name("alias") == holder
    return _defines(owner) and owner.child_by_field_name("left") == holder


def _declared_names(node: Any) -> set[str]:
    """Names a statement or signature part binds for the nodes that follow it."""
    kind = node.type
    if kind in ("var_spec", "const_spec", "type_spec", "type_alias"):
        return {node_text(n) for n in node.children_by_field_name("name")}
    if kind in ("var_declaration", "const_declaration", "type_declaration", "var_spec_list"):
        names: set[str] = set()
        for child in node.named_children:
            names |= _declared_names(child)
        return names
    if _defines(node):
        return _left_names(node)
    if kind == "for_clause":
        init = node.child_by_field_name("initializer")
        return _declared_names(init) if init is not None else set()
    if kind in ("parameter_list", "type_parameter_list"):
        return {
            node_text(n)
            for param in node.named_children
            for n in param.children_by_field_name("name")
        }
    return set()


def _is_shadowed(node: Any, name: str) -> bool:
    """Whether ``name`` at ``node`` resolves to a function-local binding.

    Walks the enclosing nodes up to the file and looks at the siblings that
    precede the path: earlier statements of a block, the initializer of an
    if/for/switch, range and receive clauses, and the receiver, type
    parameters and parameters of an enclosing function.
    """
    child, parent = node, node.parent
    while parent is not None and parent.type != "source_file":
        if parent.type == "type_switch_statement" and child.type in ("type_case", "default_case"):
            alias = parent.child_by_field_name("alias")
            if alias is not None and name in {node_text(n) for n in alias.named_children}:
                return True
        for sibling in parent.children:
            if sibling.start_byte >= child.start_byte:
                break
            if name in _declared_names(sibling):
                return True
        child, parent = parent, parent.parent
    return False


def _receiver(node: Any) -> tuple[str, bool, list[str]]:
    """Receiver base type name, pointer flag and receiver type parameters."""
    if node is None:
        return "", False, []
    for decl in node.named_children:
        if decl.type != "parameter_declaration":
            continue
        typ = decl.child_by_field_name("type")
        is_pointer = False
        if typ is not None and typ.type == "pointer_type":
            is_pointer = True
            typ = _first_named_child(typ)
        while typ is not None and typ.type == "parenthesized_type":
            typ = _first_named_child(typ)
        type_params: list[str] = []
        if typ is not None and typ.type == "generic_type":
            args = typ.child_by_field_name("type_arguments")
            if args is not None:
                type_params = [node_text(a) for a in args.named_children]
            typ = typ.child_by_field_name("type")
        return node_text(typ), is_pointer, type_params
    return "", False, []


def _interface_members(
    node: Any, owner: str, path: str, resolver: TypeResolver
) -> tuple[tuple[Function, ...], tuple[TypeRef, ...], bool]:
    methods: list[Function] = []
    embedded: list[TypeRef] = []
    union = False
    for member in node.named_children:
        kind = member.type
        if kind in ("method_elem", "method_spec"):
            params, variadic = parameters(resolver, member.child_by_field_name("parameters"))
            methods.append(
                Function(
                    name=node_text(member.child_by_field_name("name")),
                    package=resolver.package_id,
                    file=path,
                    line=node_line(member),
                    params=params,
                    returns=results(resolver, member.child_by_field_name("result")),
                    receiver=owner,
                    variadic=variadic,
                )
            )
        elif kind == "type_elem":
            elements = [c for c in member.named_children if c.type != "comment"]
            if len(elements) == 1 and elements[0].type in _INTERFACE_ELEM_TYPES:
                embedded.append(resolver.resolve(elements[0]))
            else:
                union = True
        elif kind in _INTERFACE_ELEM_TYPES or kind == "interface_type_name":
            if kind == "interface_type_name":
                member = _first_named_child(member)
            embedded.append(resolver.resolve(member))
        elif kind in ("constraint_elem", "struct_elem"):
            union = True
    return tuple(methods), tuple(embedded), union


def _embedded_fields(node: Any, resolver: TypeResolver) -> tuple[TypeRef, ...]:
    fields_node = _first_named_child(node)
    embedded = []
    if fields_node is None:
        return ()
    for decl in fields_node.named_children:
        if decl.type != "field_declaration" or decl.children_by_field_name("name"):
            continue
        typ = resolver.resolve(decl.child_by_field_name("type"))
        if any(child.type == "*" for child in decl.children):
            typ = pointer(typ)
        embedded.append(typ)
    return tuple(embedded)
