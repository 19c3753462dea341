"""Rule constructors.

A rule is a callable ``(arch, objects) -> Optional[Exception]``: None when it
passes, a ViolationError when it finds violations, any other exception for a
rule-internal failure. Selections bind their objects to a rule via
``Selection.apply``; global analyzers ignore the objects argument.

Reference rules work on package footprints:

* a Layer resolves to every loaded package whose ID matches its root folder;
* a Package resolves to itself;
* a Type resolves to its owning package;
* a selection of those resolves to the union over its objects.

The dependencies of an item are the direct imports of its footprint.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any, Callable, Iterable, Optional, Sequence

from .exceptions import ViolationCategory, ViolationError
from .logging_config import get_logger
from .matchers import Matcher
from .model.entities import Function, GoType, Layer, Package, SourceFile, Variable
from .patterns import is_exported, is_standard_library, layer_pattern, matches_glob

if TYPE_CHECKING:
    from .engine import Architecture

logger = get_logger(__name__)

Rule = Callable[["Architecture", Sequence[Any]], Optional[Exception]]

_CATEGORY_BY_KIND: dict[type, ViolationCategory] = {
    Layer: ViolationCategory.LAYER,
    Package: ViolationCategory.PACKAGE,
    GoType: ViolationCategory.TYPE,
    Function: ViolationCategory.FUNCTION,
    Variable: ViolationCategory.VARIABLE,
    SourceFile: ViolationCategory.FILE,
}


def category_of(item: Any) -> ViolationCategory:
    """Violation category for rules about this kind of object."""
    try:
        return _CATEGORY_BY_KIND[type(item)]
    except KeyError:
        raise TypeError(f"unsupported architecture object: {type(item).__name__}") from None


def _violations(items: Sequence[Any], messages: list[str]) -> Optional[ViolationError]:
    if not messages:
        return None
    return ViolationError(category_of(items[0]), messages)


def run_rule(rule: Rule, arch: "Architecture", objects: Sequence[Any]) -> list[Exception]:
    """Evaluate one rule; raised errors count as its outcome."""
    try:
        outcome = rule(arch, objects)
    except Exception as e:
        if not isinstance(e, ViolationError):
            logger.debug("Rule raised an error", exc_info=True)
        outcome = e
    if outcome is None:
        return []
    if isinstance(outcome, ChainedOutcome):
        return list(outcome.errors)
    return [outcome]


class ChainedOutcome(Exception):
    """Outcomes of several chained rules, in evaluation order."""

    def __init__(self, errors: list[Exception]):
        self.errors = errors
        super().__init__("; ".join(str(e) for e in errors))


def chain_rules(*rules: Rule) -> Rule:
    """Run rules in order and return all of their outcomes as one."""

    def check(arch: "Architecture", objects: Sequence[Any] = ()) -> Optional[Exception]:
        errors: list[Exception] = []
        for rule in rules:
            errors.extend(run_rule(rule, arch, objects))
        if not errors:
            return None
        if len(errors) == 1:
            return errors[0]
        return ChainedOutcome(errors)

    return check


# ----------------------------------------------------------------------
# Footprints
# ----------------------------------------------------------------------


def referents(item: Any) -> list[Any]:
    """Flatten a referable into individual Layers, Packages and Types.

    Selections raise their captured error instead of resolving.
    """
    objects = getattr(item, "referable_objects", None)
    if objects is not None:
        return list(objects())
    if isinstance(item, (Layer, Package, GoType)):
        return [item]
    raise TypeError(f"not a referable object: {type(item).__name__}")


def layer_packages(arch: "Architecture", layer: Layer) -> list[Package]:
    pattern = layer_pattern(layer.root_folder)
    return [pkg for pkg in arch.artifact.packages() if pattern.match(pkg.id)]


def footprint(arch: "Architecture", item: Any) -> list[str]:
    """Package IDs a referable resolves to, deduplicated in discovery order."""
    ids: dict[str, None] = {}
    for obj in referents(item):
        if isinstance(obj, Layer):
            for pkg in layer_packages(arch, obj):
                ids.setdefault(pkg.id, None)
        elif isinstance(obj, Package):
            ids.setdefault(obj.id, None)
        else:
            ids.setdefault(obj.package, None)
    return list(ids)


def dependencies(arch: "Architecture", item: Any) -> list[str]:
    """Direct imports of every package in the item's footprint."""
    deps: dict[str, None] = {}
    for package_id in footprint(arch, item):
        pkg = arch.artifact.package(package_id)
        if pkg is None:
            continue
        for imported in pkg.imports:
            deps.setdefault(imported, None)
    return list(deps)


def _footprints(arch: "Architecture", items: Iterable[Any]) -> set[str]:
    ids: set[str] = set()
    for item in items:
        ids.update(footprint(arch, item))
    return ids


def _name(item: Any) -> str:
    return getattr(item, "display_name", None) or str(item)


# ----------------------------------------------------------------------
# Reference-graph rules
# ----------------------------------------------------------------------


def should_not_refer(*forbidden: Any) -> Rule:
    def check(arch: "Architecture", items: Sequence[Any]) -> Optional[Exception]:
        forbidden_ids = _footprints(arch, forbidden)
        if not forbidden_ids or not items:
            return None
        messages = []
        for item in items:
            own = set(footprint(arch, item))
            for dep in dependencies(arch, item):
                if dep in forbidden_ids and dep not in own:
                    messages.append(
                        f"arch violation: <{_name(item)}> should not refer to <{dep}>"
                    )
        return _violations(items, messages)

    return check


def should_only_refer(*allowed: Any) -> Rule:
    """Standard-library imports are always allowed."""

    def check(arch: "Architecture", items: Sequence[Any]) -> Optional[Exception]:
        if not items:
            return None
        allowed_ids = _footprints(arch, allowed)
        messages = []
        for item in items:
            own = set(footprint(arch, item))
            for dep in dependencies(arch, item):
                if dep in allowed_ids or dep in own:
                    continue
                if is_standard_library(dep, arch.artifact):
                    continue
                messages.append(
                    f"arch violation: <{_name(item)}> is not allowed to refer to <{dep}>"
                )
        return _violations(items, messages)

    return check


def should_not_be_referred_by(*forbidden: Any) -> Rule:
    def check(arch: "Architecture", items: Sequence[Any]) -> Optional[Exception]:
        targets = _footprints(arch, items)
        if not targets:
            return None
        messages = []
        for referrer in forbidden:
            for obj in referents(referrer):
                for dep in dependencies(arch, obj):
                    if dep in targets:
                        messages.append(
                            "arch violation: a selected item is referred by forbidden "
                            f"referrer <{_name(obj)}> via package <{dep}>"
                        )
        return _violations(items, messages)

    return check


def should_only_be_referred_by(*allowed: Any) -> Rule:
    def check(arch: "Architecture", items: Sequence[Any]) -> Optional[Exception]:
        targets = _footprints(arch, items)
        if not targets:
            return None
        allowed_ids = _footprints(arch, allowed)
        messages = []
        for pkg in arch.artifact.packages():
            if pkg.id in allowed_ids or pkg.id in targets:
                continue
            for dep in pkg.imports:
                if dep in targets:
                    messages.append(
                        f"arch violation: <{dep}> is referred by <{pkg.id}>, "
                        "which is not in the allowed list"
                    )
        return _violations(items, messages)

    return check


# ----------------------------------------------------------------------
# Naming, visibility and location
# ----------------------------------------------------------------------


def name_should(matcher: Matcher[Any]) -> Rule:
    def check(arch: "Architecture", items: Sequence[Any]) -> Optional[Exception]:
        messages = []
        for item in items:
            ok, description = matcher(item)
            if not ok:
                messages.append(f"name <{_name(item)}> should {description}")
        return _violations(items, messages)

    return check


def name_should_not(matcher: Matcher[Any]) -> Rule:
    def check(arch: "Architecture", items: Sequence[Any]) -> Optional[Exception]:
        messages = []
        for item in items:
            ok, description = matcher(item)
            if ok:
                messages.append(f"name <{_name(item)}> should not {description}")
        return _violations(items, messages)

    return check


def should_be_exported() -> Rule:
    def check(arch: "Architecture", items: Sequence[Any]) -> Optional[Exception]:
        messages = [
            f"object <{_name(item)}> should be exported"
            for item in items
            if not is_exported(item.name)
        ]
        return ViolationError(ViolationCategory.NAMING, messages) if messages else None

    return check


def should_not_be_exported() -> Rule:
    def check(arch: "Architecture", items: Sequence[Any]) -> Optional[Exception]:
        messages = [
            f"object <{_name(item)}> should not be exported"
            for item in items
            if is_exported(item.name)
        ]
        return ViolationError(ViolationCategory.NAMING, messages) if messages else None

    return check


def should_reside_in_packages(*patterns: str) -> Rule:
    """Glob match against the package path; ``*`` does not cross ``/``."""

    def check(arch: "Architecture", items: Sequence[Any]) -> Optional[Exception]:
        messages = [
            f"object <{_name(item)}> should reside in packages {','.join(patterns)}"
            for item in items
            if not any(matches_glob(item.package_path, p) for p in patterns)
        ]
        return ViolationError(ViolationCategory.LOCATION, messages) if messages else None

    return check


def should_reside_in_layers(*layers: Layer) -> Rule:
    def check(arch: "Architecture", items: Sequence[Any]) -> Optional[Exception]:
        if not items:
            return None
        members: set[str] = set()
        for layer in layers:
            members.update(pkg.id for pkg in layer_packages(arch, layer))
        names = ",".join(layer.name for layer in layers)
        messages = [
            f"object <{_name(item)}> should reside in layers {names}"
            for item in items
            if item.package_path not in members
        ]
        return ViolationError(ViolationCategory.LOCATION, messages) if messages else None

    return check


# ----------------------------------------------------------------------
# Package and type structure
# ----------------------------------------------------------------------


def package_depth(root_dir: str, pkg: Package) -> Optional[int]:
    """Folder depth below the project root; None for packages outside it."""
    if pkg.go_files:
        pkg_dir = os.path.dirname(pkg.go_files[0])
    elif pkg.dir:
        pkg_dir = pkg.dir
    else:
        return None
    root = os.path.abspath(root_dir)
    pkg_dir = os.path.abspath(pkg_dir)
    if pkg_dir != root and not pkg_dir.startswith(root + os.sep):
        return None
    rel = os.path.relpath(pkg_dir, root).replace(os.sep, "/")
    if rel == ".":
        return 0
    return rel.count("/") + 1


def depth_violations(root_dir: str, packages: Iterable[Package], max_depth: int) -> list[str]:
    messages = []
    for pkg in packages:
        depth = package_depth(root_dir, pkg)
        if depth is not None and depth > max_depth:
            messages.append(
                f"package <{pkg.id}> exceeds max folder depth of {max_depth} (actual: {depth})"
            )
    return messages


def should_not_exceed_depth(max_depth: int) -> Rule:
    def check(arch: "Architecture", items: Sequence[Any]) -> Optional[Exception]:
        messages = depth_violations(arch.artifact.root_dir, items, max_depth)
        return ViolationError(ViolationCategory.PACKAGE, messages) if messages else None

    return check


def methods_should_be_defined_in_one_file() -> Rule:
    def check(arch: "Architecture", items: Sequence[GoType]) -> Optional[Exception]:
        messages = []
        for typ in items:
            if typ.is_interface:
                continue
            files = list(dict.fromkeys(m.file for m in typ.methods))
            if len(files) > 1:
                names = ", ".join(os.path.basename(f) for f in files)
                messages.append(
                    f"type <{typ.display_name}> declares methods in multiple files: {names}"
                )
        return ViolationError(ViolationCategory.TYPE, messages) if messages else None

    return check
