"""The immutable snapshot of a loaded Go project."""

from __future__ import annotations

import dataclasses
import os
from collections import defaultdict
from functools import cached_property
from typing import Iterable, Optional

from ..exceptions import ParsingError
from ..logging_config import get_logger
from .entities import (
    CallSite,
    DeclarationIssue,
    Function,
    GoType,
    Package,
    TestFileReference,
    Variable,
)
from .types import ANY, EMPTY_INTERFACE, WELL_KNOWN_INTERFACES, MethodSig, TypeRef

logger = get_logger(__name__)

ENTRY_POINTS = frozenset({"main", "init"})
TEST_FUNCTION_PREFIXES = ("Test", "Benchmark", "Example", "Fuzz")


class Artifact:
    """Packages of one project keyed by import path.

    Construction resolves the deferred variable and constant types recorded by
    the parser; after that nothing is mutated, so concurrent reads are safe.
    """

    def __init__(
        self,
        root_dir: str,
        module: str,
        packages: dict[str, Package],
        parse_errors: Iterable[ParsingError] = (),
    ) -> None:
        self.root_dir = os.path.abspath(root_dir)
        self.module = module
        self.parse_errors: tuple[ParsingError, ...] = tuple(parse_errors)
        self._packages = {pid: packages[pid] for pid in sorted(packages)}
        self._iface_cache: dict[str, Optional[dict[str, str]]] = {}
        self._resolve_deferred_types()

    def __repr__(self) -> str:
        return f"Artifact(module={self.module!r}, packages={len(self._packages)})"

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def is_application_path(self, package_id: str) -> bool:
        return package_id == self.module or package_id.startswith(self.module + "/")

    def packages(self, application_only: bool = False) -> list[Package]:
        """Packages sorted by ID."""
        if application_only:
            return [p for p in self._packages.values() if p.application]
        return list(self._packages.values())

    def package(self, package_id: str) -> Optional[Package]:
        return self._packages.get(package_id)

    def type(self, name: str) -> Optional[GoType]:
        """Look up a type by qualified name.

        A name whose first path segment contains a dot (``github.com/x/y.T``)
        must match a package ID exactly. Any other name is resolved within the
        project module: ``service.NameService`` matches the application
        package whose ID ends with ``/service``. A short name matching several
        packages is ambiguous and yields None.
        """
        pkg_part, _, type_name = name.rpartition(".")
        if not pkg_part or not type_name:
            return None

        if "/" in pkg_part and "." in pkg_part.split("/", 1)[0]:
            pkg = self._packages.get(pkg_part)
            return pkg.type(type_name) if pkg else None

        candidates = [
            pkg
            for pkg in self.packages(application_only=True)
            if pkg.id == pkg_part or pkg.id.endswith("/" + pkg_part)
        ]
        if not candidates and pkg_part in self._packages:
            candidates = [self._packages[pkg_part]]
        if len(candidates) > 1:
            logger.debug(
                f"Ambiguous type name {name}: {', '.join(p.id for p in candidates)}"
            )
            return None
        if not candidates:
            return None
        return candidates[0].type(type_name)

    def types(self) -> list[GoType]:
        return [t for pkg in self.packages(application_only=True) for t in pkg.types]

    def functions(self) -> list[Function]:
        """Package-level functions of application packages (methods excluded)."""
        return [f for pkg in self.packages(application_only=True) for f in pkg.functions]

    def methods(self) -> list[Function]:
        """Methods declared on application types."""
        return [m for pkg in self.packages(application_only=True) for m in pkg.methods()]

    def variables(self) -> list[Variable]:
        return [v for pkg in self.packages(application_only=True) for v in pkg.variables]

    def go_files(self) -> list[str]:
        """Source and test files of every loaded package."""
        files: list[str] = []
        for pkg in self.packages():
            files.extend(pkg.go_files)
            files.extend(pkg.test_go_files)
        return files

    def lookup_type(self, ref: TypeRef) -> Optional[GoType]:
        """The declaration of a named TypeRef, when its package was parsed."""
        if ref.kind != "named" or not ref.package:
            return None
        pkg = self._packages.get(ref.package)
        return pkg.type(ref.name) if pkg else None

    # ------------------------------------------------------------------
    # Method sets and interface satisfaction
    # ------------------------------------------------------------------

    def method_set(self, typ: GoType, pointer: bool = False) -> Optional[dict[str, str]]:
        """Method name to signature for a value of ``typ`` (or ``*typ``).

        Value method sets hold value-receiver methods only; embedded fields
        promote their methods following Go's selector rules. Embedded types
        from unparsed packages contribute nothing. Returns None for an
        interface whose method set cannot be determined.
        """
        return self._method_set(typ, pointer, frozenset())

    def _method_set(
        self, typ: GoType, pointer: bool, visiting: frozenset[str]
    ) -> Optional[dict[str, str]]:
        if typ.qualified_name in visiting:
            return {}
        visiting = visiting | {typ.qualified_name}

        if typ.is_interface:
            return self._interface_methods(typ, visiting)

        if typ.kind == "alias" and typ.underlying is not None:
            target = self.lookup_type(typ.underlying.deref())
            if target is None:
                return {}
            return self._method_set(target, pointer or typ.underlying.kind == "pointer", visiting)

        result: dict[str, str] = {}
        if typ.kind == "struct":
            for embedded in typ.embedded:
                target = self.lookup_type(embedded.deref())
                if target is None:
                    continue
                promoted = self._method_set(
                    target, pointer or embedded.kind == "pointer", visiting
                )
                for name, signature in (promoted or {}).items():
                    result.setdefault(name, signature)

        for method in typ.methods:
            if pointer or not method.pointer_receiver:
                result[method.name] = method.signature
        return result

    def interface_methods(self, iface: GoType) -> Optional[dict[str, str]]:
        """Method name to signature for explicit and embedded interface methods.

        None when an embedded interface is unknown or when the interface is a
        type-set constraint, which ordinary method sets cannot satisfy.
        """
        key = iface.qualified_name
        if key not in self._iface_cache:
            self._iface_cache[key] = self._interface_methods(iface, frozenset({key}))
        return self._iface_cache[key]

    def _interface_methods(
        self, iface: GoType, visiting: frozenset[str]
    ) -> Optional[dict[str, str]]:
        if iface.union:
            return None
        result: dict[str, str] = {m.name: m.signature for m in iface.methods}
        for embedded in iface.embedded:
            if embedded == ANY or embedded == EMPTY_INTERFACE:
                continue
            target = self.lookup_type(embedded)
            if target is None:
                known = WELL_KNOWN_INTERFACES.get(embedded.qualified_name)
                if known is None:
                    return None
                for sig in known:
                    result.setdefault(sig.name, sig.signature)
                continue
            if target.qualified_name in visiting:
                continue
            if not target.is_interface:
                # embedding a non-interface type makes a constraint
                return None
            nested = self._interface_methods(target, visiting | {target.qualified_name})
            if nested is None:
                return None
            for name, signature in nested.items():
                result.setdefault(name, signature)
        return result

    def implements(self, typ: GoType, iface: GoType, pointer: bool = False) -> bool:
        """Structural satisfaction: every interface method present with the same signature."""
        required = self.interface_methods(iface)
        if required is None:
            return False
        return self._satisfies(typ, [MethodSig(n, s) for n, s in required.items()], pointer)

    def implements_well_known(self, typ: GoType, interface_name: str, pointer: bool = True) -> bool:
        return self._satisfies(typ, WELL_KNOWN_INTERFACES[interface_name], pointer)

    def _satisfies(self, typ: GoType, required: Iterable[MethodSig], pointer: bool) -> bool:
        methods = self.method_set(typ, pointer)
        if methods is None:
            return False
        return all(methods.get(sig.name) == sig.signature for sig in required)

    def embeds(self, typ: GoType, embedded: GoType) -> bool:
        """Whether typ embeds the given type, directly or through other embeddings."""
        return self._embeds(typ, embedded.qualified_name, frozenset())

    def _embeds(self, typ: GoType, target: str, visiting: frozenset[str]) -> bool:
        if typ.qualified_name in visiting:
            return False
        visiting = visiting | {typ.qualified_name}
        for ref in typ.embedded:
            ref = ref.deref()
            if ref.qualified_name == target:
                return True
            nested = self.lookup_type(ref)
            if nested is not None and self._embeds(nested, target, visiting):
                return True
        return False

    # ------------------------------------------------------------------
    # Whole-program facts
    # ------------------------------------------------------------------

    @cached_property
    def _referring_packages(self) -> dict[str, set[str]]:
        index: dict[str, set[str]] = defaultdict(set)
        for pkg in self._packages.values():
            for site in pkg.use_sites:
                index[site.object].add(site.package or pkg.id)
        return index

    @cached_property
    def _member_users(self) -> dict[str, set[str]]:
        index: dict[str, set[str]] = defaultdict(set)
        for pkg in self._packages.values():
            for referrer, name in pkg.member_uses:
                index[name].add(referrer)
        return index

    def referenced_from_outside(self, qualified_name: str, package_id: str) -> bool:
        return any(p != package_id for p in self._referring_packages.get(qualified_name, ()))

    def unused_public_declarations(self) -> list[str]:
        """Exported types, methods and functions no other package refers to."""
        unused: list[str] = []
        for pkg in self.packages(application_only=True):
            for typ in pkg.types:
                if typ.exported and not self.referenced_from_outside(typ.qualified_name, pkg.id):
                    unused.append(typ.display_name)
            for typ in pkg.types:
                if typ.is_interface:
                    continue
                for method in typ.methods:
                    if method.exported and not self._method_used(typ, method):
                        unused.append(method.display_name)
            for fn in pkg.functions:
                if not fn.exported or fn.name in ENTRY_POINTS:
                    continue
                if fn.name.startswith(TEST_FUNCTION_PREFIXES):
                    continue
                if not self.referenced_from_outside(fn.qualified_name, pkg.id):
                    unused.append(fn.display_name)
        return unused

    def _method_used(self, typ: GoType, method: Function) -> bool:
        if any(p != typ.package for p in self._member_users.get(method.name, ())):
            return True
        for name, required in WELL_KNOWN_INTERFACES.items():
            if any(sig.name == method.name for sig in required) and self.implements_well_known(
                typ, name
            ):
                return True
        for pkg in self._packages.values():
            if pkg.id == typ.package:
                continue
            for iface in pkg.types:
                if not iface.is_interface:
                    continue
                methods = self.interface_methods(iface)
                if methods and method.name in methods and self.implements(typ, iface, pointer=True):
                    return True
        return False

    def context_keys_with_public_type(self) -> list[CallSite]:
        """context.WithValue call sites keyed by a built-in or exported type.

        Keys whose type cannot be inferred count as public.
        """
        sites = []
        for pkg in self.packages(application_only=True):
            for call in pkg.context_calls:
                key = call.key.deref()
                if not key.is_known or key.is_builtin or key.exported or key.kind == "interface":
                    sites.append(call)
        return sites

    def unordered_declarations(self) -> list[DeclarationIssue]:
        return [i for pkg in self.packages(application_only=True) for i in pkg.declaration_issues]

    def files_referenced_by_tests(self) -> list[tuple[Package, TestFileReference]]:
        return [
            (pkg, ref)
            for pkg in self.packages(application_only=True)
            for ref in pkg.test_file_references
        ]

    # ------------------------------------------------------------------
    # Deferred type resolution
    # ------------------------------------------------------------------

    def _resolve_deferred_types(self) -> None:
        for pid, pkg in list(self._packages.items()):
            deferred = [v.type for v in pkg.variables] + [c.type for c in pkg.constants]
            deferred += [call.key for call in pkg.context_calls]
            if all(ref.deref().kind not in ("ref", "call") for ref in deferred):
                continue
            variables = tuple(
                dataclasses.replace(v, type=self.resolve(v.type)) for v in pkg.variables
            )
            constants = tuple(
                dataclasses.replace(c, type=self.resolve(c.type)) for c in pkg.constants
            )
            context_calls = tuple(
                dataclasses.replace(call, key=self.resolve(call.key)) for call in pkg.context_calls
            )
            self._packages[pid] = dataclasses.replace(
                pkg, variables=variables, constants=constants, context_calls=context_calls
            )

    def resolve(self, ref: TypeRef, depth: int = 0) -> TypeRef:
        """Resolve a deferred ``ref`` (object reference) or ``call`` TypeRef."""
        if ref.kind == "pointer" and ref.elem is not None and not ref.elem.is_known:
            resolved = self.resolve(ref.elem, depth + 1)
            return dataclasses.replace(ref, elem=resolved) if resolved.is_known else resolved
        if ref.kind not in ("ref", "call") or depth > 16:
            return ref if depth <= 16 else TypeRef(kind="unknown")
        pkg = self._packages.get(ref.package)
        if pkg is None:
            return TypeRef(kind="unknown")

        if ref.kind == "call":
            fn = pkg.function(ref.name)
            if fn is not None:
                if len(fn.returns) == 1:
                    return fn.returns[0].type
                return TypeRef(kind="unknown")
            typ = pkg.type(ref.name)
            if typ is not None:
                return TypeRef(kind="named", package=pkg.id, name=typ.name)
            return TypeRef(kind="unknown")

        for var in pkg.variables:
            if var.name == ref.name:
                return self.resolve(var.type, depth + 1)
        for const in pkg.constants:
            if const.name == ref.name:
                return self.resolve(const.type, depth + 1)
        fn = pkg.function(ref.name)
        if fn is not None:
            return TypeRef(
                kind="func",
                params=tuple(p.type for p in fn.params),
                results=tuple(r.type for r in fn.returns),
                variadic=fn.variadic,
            )
        return TypeRef(kind="unknown")

