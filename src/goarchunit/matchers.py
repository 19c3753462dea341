"""Predicate combinators over model objects.

A matcher returns a verdict and a description. The description reads as the
tail of a sentence ("have name with suffix 'Service'") so that naming rules
can build violation messages from it directly.

    >>> m = all_of(have_name_prefix("New"), not_(have_name_suffix("Test")))
    >>> m(function)
    (True, "have name with prefix 'New' and not have name with suffix 'Test'")
"""

from __future__ import annotations

import os
import re
from typing import Any, Callable, Protocol, Sequence, TypeVar

from .model.entities import Package, SourceFile
from .patterns import compile_package_pattern, is_snake_case_file

T = TypeVar("T")
T_contra = TypeVar("T_contra", contravariant=True)


class Matcher(Protocol[T_contra]):
    def __call__(self, item: T_contra) -> tuple[bool, str]: ...


def object_name(item: Any) -> str:
    """The name matchers test: a package's import path, otherwise the short name."""
    if isinstance(item, Package):
        return item.id
    return item.name


def _name_matcher(description: str, predicate: Callable[[str], bool]) -> Matcher[Any]:
    def match(item: Any) -> tuple[bool, str]:
        return predicate(object_name(item)), description

    return match


def with_name(name: str) -> Matcher[Any]:
    return _name_matcher(f"have name matching '{name}'", lambda n: n == name)


def have_name_prefix(prefix: str) -> Matcher[Any]:
    return _name_matcher(f"have name with prefix '{prefix}'", lambda n: n.startswith(prefix))


def have_name_suffix(suffix: str) -> Matcher[Any]:
    return _name_matcher(f"have name with suffix '{suffix}'", lambda n: n.endswith(suffix))


def name_matches(pattern: str) -> Matcher[Any]:
    """Regular-expression search against the name."""
    compiled = re.compile(pattern)
    return _name_matcher(f"match regex '{pattern}'", lambda n: bool(compiled.search(n)))


def name_contains(substring: str) -> Matcher[Any]:
    return _name_matcher(f"contain substring '{substring}'", lambda n: substring in n)


def in_package(*patterns: str) -> Matcher[Any]:
    """Objects whose package path matches a package pattern (``service/...``).

    Raises:
        PatternError: if a pattern is malformed.
    """
    compiled = [compile_package_pattern(p) for p in patterns]
    description = f"reside in package matching '{' or '.join(patterns)}'"

    def match(item: Any) -> tuple[bool, str]:
        return any(p.search(item.package_path) for p in compiled), description

    return match


def be_snake_case(item: SourceFile) -> tuple[bool, str]:
    """File names such as ``user_service.go``."""
    return is_snake_case_file(item.name), "be in snake_case"


def match_folder(item: Package) -> tuple[bool, str]:
    """The declared package name equals the last element of its directory."""
    folder = os.path.basename(item.dir.rstrip(os.sep)) if item.dir else item.id.rsplit("/", 1)[-1]
    return item.name == folder, "have name matching its folder"


def all_of(*matchers: Matcher[T]) -> Matcher[T]:
    """Conjunction; stops at the first miss and reports its description."""

    def match(item: T) -> tuple[bool, str]:
        descriptions = []
        for matcher in matchers:
            ok, description = matcher(item)
            if not ok:
                return False, description
            descriptions.append(description)
        return True, " and ".join(descriptions)

    return match


def any_of(*matchers: Matcher[T]) -> Matcher[T]:
    """Disjunction; stops at the first hit."""

    def match(item: T) -> tuple[bool, str]:
        descriptions = []
        for matcher in matchers:
            ok, description = matcher(item)
            if ok:
                return True, description
            descriptions.append(description)
        return False, "not match any of: " + " or ".join(descriptions)

    return match


def not_(matcher: Matcher[T]) -> Matcher[T]:
    def match(item: T) -> tuple[bool, str]:
        ok, description = matcher(item)
        return not ok, "not " + description

    return match


def combine(matchers: Sequence[Matcher[T]]) -> Matcher[T]:
    """A single matcher for a selection: everything when empty, else all_of."""
    if not matchers:
        return lambda item: (True, "any")
    if len(matchers) == 1:
        return matchers[0]
    return all_of(*matchers)
