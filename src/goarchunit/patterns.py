"""Package path patterns and identifier classification.

Package patterns use ``/`` separated segments. A segment is either a
domain-style name (alphanumerics with single internal dots) or the wildcard
``...`` which matches any run of characters, including further segments.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import TYPE_CHECKING

from .exceptions import PatternError

if TYPE_CHECKING:
    from .model.artifact import Artifact

_SEGMENT = re.compile(r"^(?:[a-zA-Z0-9]+(?:\.[a-zA-Z0-9]+)*|\.\.\.)$")
_SNAKE_CASE_FILE = re.compile(r"^[a-z0-9]+(?:_[a-z0-9]+)*$")


def _pattern_body(path: str) -> str:
    trimmed = path.strip("/")
    if not trimmed:
        raise PatternError(path)
    parts = []
    for segment in trimmed.split("/"):
        if not _SEGMENT.match(segment):
            raise PatternError(path)
        parts.append(".*" if segment == "..." else re.escape(segment))
    return "/".join(parts)


@lru_cache(maxsize=512)
def compile_package_pattern(path: str) -> re.Pattern:
    """Compile a package glob into a regex matching trailing sub-paths.

    ``service/...`` matches ``github.com/acme/app/service/user``; use
    ``pattern.search(package_id)``.

    Raises:
        PatternError: if any segment is malformed (``..``, empty segments,
            ``...`` inside a segment, punctuation).
    """
    return re.compile(r"(?:^|/)" + _pattern_body(path) + "$")


@lru_cache(maxsize=512)
def layer_pattern(path: str) -> re.Pattern:
    """Compile a layer root into a regex that must match the whole package ID.

    Unlike package patterns, module paths with ``-`` or ``_`` are accepted and
    ``...`` may also end a segment (``app/svc...`` matches ``app/svcuser``).
    ``app/service/...`` does not match ``app/service`` itself.
    """
    trimmed = path.strip("/")
    if not trimmed or any(not segment for segment in trimmed.split("/")):
        raise PatternError(path)
    parts = [".*".join(re.escape(p) for p in s.split("...")) for s in trimmed.split("/")]
    return re.compile("^" + "/".join(parts) + "$")


@lru_cache(maxsize=512)
def _glob_regex(pattern: str) -> re.Pattern:
    out = []
    i = 0
    while i < len(pattern):
        c = pattern[i]
        if c == "*":
            out.append("[^/]*")
        elif c == "?":
            out.append("[^/]")
        elif c == "[":
            end = pattern.find("]", i + 1)
            if end < 0:
                raise PatternError(pattern)
            body = pattern[i + 1 : end]
            if body.startswith("^"):
                body = "^" + re.escape(body[1:])
            else:
                body = re.escape(body)
            out.append(f"[{body.replace(chr(92) + '-', '-')}]")
            i = end
        elif c == "\\" and i + 1 < len(pattern):
            i += 1
            out.append(re.escape(pattern[i]))
        else:
            out.append(re.escape(c))
        i += 1
    return re.compile("^" + "".join(out) + "$")


def matches_glob(package_path: str, pattern: str) -> bool:
    """Path glob match where ``*`` and ``?`` never cross a ``/``.

    ``github.com/acme/app/*/dto`` matches ``github.com/acme/app/user/dto``
    but not ``github.com/acme/app/a/b/dto``.
    """
    return bool(_glob_regex(pattern).match(package_path))


def is_exported(name: str) -> bool:
    return bool(name) and name[0].isupper()


def is_snake_case(name: str) -> bool:
    """Names containing ``_``; single characters and the blank ``_`` are exempt."""
    if len(name) <= 1:
        return False
    return "_" in name


def is_mixed_caps(name: str) -> bool:
    return not is_snake_case(name)


def is_snake_case_file(file_name: str) -> bool:
    """File base names like ``user_service.go`` (suffixes such as _test allowed)."""
    stem = file_name.rsplit(".", 1)[0] if "." in file_name else file_name
    return bool(_SNAKE_CASE_FILE.match(stem))


def looks_like_standard_library(package_path: str) -> bool:
    """Go's import path heuristic: no dot in the first path segment."""
    first = package_path.split("/", 1)[0]
    return "." not in first


def is_standard_library(package_path: str, artifact: Artifact | None = None) -> bool:
    """Whether an import path belongs to the Go standard library.

    A loaded package's own flag wins; application packages are never standard
    even when the module path has no dot (``module example``).
    """
    if artifact is not None:
        pkg = artifact.package(package_path)
        if pkg is not None:
            return pkg.standard and not pkg.application
        if artifact.is_application_path(package_path):
            return False
    return looks_like_standard_library(package_path)
