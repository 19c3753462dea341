"""Typed, immutable selections of architecture objects.

Selections are produced by an Architecture (or the module-level helpers in
``goarchunit.api``) and turn rule constructors into bound rules:

    >>> arch.layers("Service").should_not_refer(arch.layers("Controller"))
    >>> arch.types(have_name_suffix("Impl")).should_not_be_exported()

A selection whose resolution failed carries a SelectionError; chained
selections inherit it and every rule applied to it returns it unchanged.
"""

from __future__ import annotations

from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Generic,
    Iterator,
    Optional,
    Sequence,
    TypeVar,
    Union,
)

from . import rules
from .matchers import Matcher, combine, object_name
from .model.entities import Function, GoType, Layer, Package, SourceFile, Variable
from .patterns import layer_pattern
from .rules import Rule

if TYPE_CHECKING:
    from .engine import Architecture

T = TypeVar("T")
S = TypeVar("S", bound="Selection")


class Selection(Generic[T]):
    """Objects of one kind, plus the error that prevented resolving them."""

    def __init__(
        self,
        arch: "Architecture",
        objects: Sequence[T] = (),
        error: Optional[Exception] = None,
    ) -> None:
        self._arch = arch
        self._objects: tuple[T, ...] = tuple(objects)
        self._error = error

    def __repr__(self) -> str:
        if self._error is not None:
            return f"{type(self).__name__}(error={self._error!s})"
        return f"{type(self).__name__}({len(self._objects)} objects)"

    def __iter__(self) -> Iterator[T]:
        return iter(self.objects)

    def __len__(self) -> int:
        return len(self.objects)

    @property
    def objects(self) -> tuple[T, ...]:
        """Selected objects.

        Raises:
            SelectionError: if the selection failed to resolve.
        """
        if self._error is not None:
            raise self._error
        return self._objects

    @property
    def error(self) -> Optional[Exception]:
        return self._error

    def _derive(self, cls: type[S], objects: Sequence[Any] = ()) -> S:
        return cls(self._arch, objects, self._error)

    def _filtered(self, cls: type[S], candidates: Sequence[Any], matchers: Sequence[Matcher]) -> S:
        if self._error is not None:
            return self._derive(cls)
        matcher = combine(matchers)
        return cls(self._arch, [c for c in candidates if matcher(c)[0]])

    def apply(self, rule: Rule) -> Rule:
        """Bind a rule to this selection's objects."""

        def check(arch: "Architecture", _objects: Sequence[Any] = ()) -> Optional[Exception]:
            if self._error is not None:
                return self._error
            return rule(arch, self._objects)

        return check

    def name_should(self, matcher: Matcher[T]) -> Rule:
        return self.apply(rules.name_should(matcher))

    def name_should_not(self, matcher: Matcher[T]) -> Rule:
        return self.apply(rules.name_should_not(matcher))

    def skip(self: S, *names: str) -> S:
        """Drop objects by display name (``pkg/path.Name``) or plain name."""
        if self._error is not None:
            return self
        excluded = set(names)
        kept = [
            obj
            for obj in self._objects
            if getattr(obj, "display_name", None) not in excluded
            and object_name(obj) not in excluded
        ]
        return type(self)(self._arch, kept)


class ReferableMixin:
    """Dependency rules for selections of layers, packages and types."""

    objects: tuple[Any, ...]
    apply: Callable[[Rule], Rule]

    def referable_objects(self) -> tuple[Any, ...]:
        return self.objects

    def should_not_refer(self, *forbidden: Any) -> Rule:
        return self.apply(rules.should_not_refer(*forbidden))

    def should_only_refer(self, *allowed: Any) -> Rule:
        return self.apply(rules.should_only_refer(*allowed))

    def should_not_be_referred_by(self, *forbidden: Any) -> Rule:
        return self.apply(rules.should_not_be_referred_by(*forbidden))

    def should_only_be_referred_by(self, *allowed: Any) -> Rule:
        return self.apply(rules.should_only_be_referred_by(*allowed))


class ExportableMixin:
    """Visibility and location rules for types, functions and variables."""

    _arch: "Architecture"
    apply: Callable[[Rule], Rule]

    def should_be_exported(self) -> Rule:
        return self.apply(rules.should_be_exported())

    def should_not_be_exported(self) -> Rule:
        return self.apply(rules.should_not_be_exported())

    def should_reside_in_packages(self, *patterns: str) -> Rule:
        return self.apply(rules.should_reside_in_packages(*patterns))

    def should_reside_in_layers(self, *layers: Union[str, Layer]) -> Rule:
        """Layers may be given by name; unknown names raise UndefinedLayerError."""
        resolved = [self._arch.layer(x) if isinstance(x, str) else x for x in layers]
        return self.apply(rules.should_reside_in_layers(*resolved))


class LayerSelection(ReferableMixin, Selection[Layer]):
    def packages(self, *matchers: Matcher[Package]) -> "PackageSelection":
        if self._error is not None:
            return self._derive(PackageSelection)
        patterns = [layer_pattern(layer.root_folder) for layer in self._objects]
        members = [
            pkg
            for pkg in self._arch.artifact.packages()
            if any(p.match(pkg.id) for p in patterns)
        ]
        return self._filtered(PackageSelection, members, matchers)

    def types(self, *matchers: Matcher[GoType]) -> "TypeSelection":
        return self.packages().types(*matchers)

    def functions(self, *matchers: Matcher[Function]) -> "FunctionSelection":
        return self.packages().functions(*matchers)


class PackageSelection(ReferableMixin, Selection[Package]):
    def types(self, *matchers: Matcher[GoType]) -> "TypeSelection":
        candidates = [t for pkg in self._objects for t in pkg.types]
        return self._filtered(TypeSelection, candidates, matchers)

    def functions(self, *matchers: Matcher[Function]) -> "FunctionSelection":
        candidates = [f for pkg in self._objects for f in pkg.functions]
        return self._filtered(FunctionSelection, candidates, matchers)

    def variables(self, *matchers: Matcher[Variable]) -> "VariableSelection":
        candidates = [v for pkg in self._objects for v in pkg.variables]
        return self._filtered(VariableSelection, candidates, matchers)

    def should_not_exceed_depth(self, max_depth: int) -> Rule:
        return self.apply(rules.should_not_exceed_depth(max_depth))


class TypeSelection(ReferableMixin, ExportableMixin, Selection[GoType]):
    def methods(self, *matchers: Matcher[Function]) -> "FunctionSelection":
        candidates = [m for typ in self._objects for m in typ.methods]
        return self._filtered(FunctionSelection, candidates, matchers)

    def methods_should_be_defined_in_one_file(self) -> Rule:
        return self.apply(rules.methods_should_be_defined_in_one_file())


class FunctionSelection(ExportableMixin, Selection[Function]):
    pass


class VariableSelection(ExportableMixin, Selection[Variable]):
    pass


class FileSelection(Selection[SourceFile]):
    pass
