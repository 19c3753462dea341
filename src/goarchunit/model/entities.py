"""Immutable entities of the loaded program model.

Entities reference each other by identifier only: a Function names its
package ID and, for methods, its receiver type name; a Package lists the IDs
of the packages it imports.
"""

from __future__ import annotations

import os
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Optional

from ..patterns import is_exported
from .types import CONTEXT, ERROR, TypeRef, signature_string

TEST_FILE_SUFFIX = "_test.go"


@dataclass(frozen=True)
class Param:
    """A parameter or result: name is "" when unnamed."""

    name: str
    type: TypeRef

    @property
    def type_string(self) -> str:
        return str(self.type)


@dataclass(frozen=True)
class Function:
    """A package-level function, a method, or an interface method."""

    name: str
    package: str
    file: str
    line: int
    params: tuple[Param, ...] = ()
    returns: tuple[Param, ...] = ()
    receiver: str = ""
    pointer_receiver: bool = False
    variadic: bool = False

    @property
    def exported(self) -> bool:
        return is_exported(self.name)

    @property
    def is_method(self) -> bool:
        return bool(self.receiver)

    @property
    def full_name(self) -> str:
        """``pkg.F`` for functions, ``(pkg.T).M`` or ``(*pkg.T).M`` for methods."""
        if not self.receiver:
            return f"{self.package}.{self.name}"
        star = "*" if self.pointer_receiver else ""
        return f"({star}{self.package}.{self.receiver}).{self.name}"

    @property
    def qualified_name(self) -> str:
        """``pkg.F`` for functions; use sites refer to this name."""
        return f"{self.package}.{self.name}"

    @property
    def display_name(self) -> str:
        return self.full_name

    @property
    def package_path(self) -> str:
        return self.package

    @property
    def signature(self) -> str:
        """Signature without parameter names, e.g. ``(string, int) error``."""
        return signature_string(
            tuple(p.type for p in self.params), tuple(r.type for r in self.returns), self.variadic
        )

    def context_param_index(self) -> Optional[int]:
        for index, param in enumerate(self.params):
            if param.type == CONTEXT:
                return index
        return None

    def error_return_index(self) -> Optional[int]:
        """Index of the last error result."""
        found = None
        for index, result in enumerate(self.returns):
            if result.type == ERROR:
                found = index
        return found


@dataclass(frozen=True)
class GoType:
    """A declared type name.

    kind is one of ``interface``, ``struct``, ``func``, ``alias`` (``type A = B``)
    or ``named`` (any other underlying type). ``methods`` holds the methods
    declared with this type as receiver, or the explicit methods of an
    interface. ``embedded`` lists embedded fields or embedded interfaces.
    """

    name: str
    package: str
    file: str
    line: int
    kind: str
    underlying: Optional[TypeRef] = None
    methods: tuple[Function, ...] = ()
    embedded: tuple[TypeRef, ...] = ()
    union: bool = False

    @property
    def exported(self) -> bool:
        return is_exported(self.name)

    @property
    def qualified_name(self) -> str:
        return f"{self.package}.{self.name}"

    @property
    def display_name(self) -> str:
        return self.qualified_name

    @property
    def package_path(self) -> str:
        return self.package

    @property
    def is_interface(self) -> bool:
        return self.kind == "interface"

    @property
    def is_func(self) -> bool:
        return self.kind == "func"


@dataclass(frozen=True)
class Variable:
    name: str
    package: str
    file: str
    line: int
    type: TypeRef

    @property
    def exported(self) -> bool:
        return is_exported(self.name)

    @property
    def qualified_name(self) -> str:
        return f"{self.package}.{self.name}"

    @property
    def display_name(self) -> str:
        return self.qualified_name

    @property
    def package_path(self) -> str:
        return self.package


@dataclass(frozen=True)
class Constant:
    name: str
    package: str
    file: str
    line: int
    type: TypeRef

    @property
    def exported(self) -> bool:
        return is_exported(self.name)

    @property
    def qualified_name(self) -> str:
        return f"{self.package}.{self.name}"


@dataclass(frozen=True)
class SourceFile:
    path: str
    package: str

    @property
    def name(self) -> str:
        return os.path.basename(self.path)

    @property
    def display_name(self) -> str:
        return self.name

    @property
    def is_test(self) -> bool:
        return self.name.endswith(TEST_FILE_SUFFIX)

    @property
    def package_path(self) -> str:
        return self.package


@dataclass(frozen=True)
class Layer:
    """A named membership predicate over package IDs."""

    name: str
    root_folder: str

    @property
    def display_name(self) -> str:
        return self.name


@dataclass(frozen=True)
class UseSite:
    """A reference to a package-level object (``pkg/path.Name``) at a position.

    ``package`` is the ID of the referring package; external test files use
    the package ID with a ``_test`` suffix.
    """

    object: str
    file: str
    line: int
    package: str = ""


@dataclass(frozen=True)
class CallSite:
    """A ``context.WithValue`` call and the type of its key argument."""

    file: str
    line: int
    key: TypeRef


@dataclass(frozen=True)
class DeclarationIssue:
    file: str
    line: int
    description: str


@dataclass(frozen=True)
class TestFileReference:
    """A file that a test refers to by path or via ``//go:embed``."""

    __test__ = False

    path: str
    referrer: str


@dataclass(frozen=True)
class Package:
    id: str
    name: str
    dir: str
    go_files: tuple[str, ...] = ()
    test_go_files: tuple[str, ...] = ()
    imports: tuple[str, ...] = ()
    test_imports: tuple[str, ...] = ()
    application: bool = False
    standard: bool = False
    constants: tuple[Constant, ...] = ()
    functions: tuple[Function, ...] = ()
    types: tuple[GoType, ...] = ()
    variables: tuple[Variable, ...] = ()
    init_files: tuple[str, ...] = ()
    use_sites: tuple[UseSite, ...] = ()
    # (referring package ID, selected member name)
    member_uses: frozenset[tuple[str, str]] = field(default_factory=frozenset)
    context_calls: tuple[CallSite, ...] = ()
    declaration_issues: tuple[DeclarationIssue, ...] = ()
    test_file_references: tuple[TestFileReference, ...] = ()

    @property
    def path(self) -> str:
        return self.id

    @property
    def display_name(self) -> str:
        return self.id

    @property
    def package_path(self) -> str:
        return self.id

    def constant_files(self) -> list[str]:
        """Files declaring at least one constant, deduplicated, in source order."""
        seen: dict[str, None] = {}
        for const in self.constants:
            seen.setdefault(const.file, None)
        return list(seen)

    def init_function_files(self) -> list[str]:
        """One entry per receiverless ``init`` function."""
        return list(self.init_files)

    def variables_not_used_in_defining_file(self) -> list[Variable]:
        used_in: dict[str, set[str]] = defaultdict(set)
        for site in self.use_sites:
            used_in[site.object].add(site.file)
        return [
            var for var in self.variables if var.file not in used_in.get(var.qualified_name, ())
        ]

    def type(self, name: str) -> Optional[GoType]:
        for typ in self.types:
            if typ.name == name:
                return typ
        return None

    def function(self, name: str) -> Optional[Function]:
        for fn in self.functions:
            if fn.name == name:
                return fn
        return None

    def methods(self) -> list[Function]:
        return [m for typ in self.types if not typ.is_interface for m in typ.methods]
