"""Process-wide architecture and module-level selectors.

Architecture tests usually load the project once and share it:

    >>> import goarchunit as au
    >>> au.arch_unit(au.arch_layer("App", "example.com/app"),
    ...              au.arch_layer("Internal", "example.com/app/internal/..."))
    >>> au.check(au.layers("App").should_only_refer(au.layers("Internal")))

The first call to arch_unit() loads the project; later calls return the same
Architecture. reset() drops it so that a test harness can load another one.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Optional, Union

from .config import LayerConfig, load_config
from .engine import Architecture
from .exceptions import ArchitectureViolations, NotInitializedError
from .logging_config import get_logger
from .matchers import Matcher
from .rules import Rule
from .selection import (
    FileSelection,
    FunctionSelection,
    LayerSelection,
    PackageSelection,
    TypeSelection,
    VariableSelection,
)

logger = get_logger(__name__)

_arch: Optional[Architecture] = None
_lock = threading.Lock()


def arch_layer(name: str, root_folder: str) -> LayerConfig:
    """Declare a layer; ``root_folder`` may end with the ``...`` wildcard."""
    return LayerConfig(name, root_folder)


def arch_unit(
    *layers: LayerConfig,
    project_root: Union[str, Path] = ".",
    config_file: Optional[Path] = None,
    **overrides,
) -> Architecture:
    """Load the project once and return the shared Architecture.

    Layers given here replace the layers of goarchunit.toml. Arguments of
    calls after the first only go through validation.

    Raises:
        DuplicateLayerError: if two layers share a name or root folder.
        ToolchainError: if the project cannot be listed.
    """
    global _arch
    config = load_config(project_root, config_file, layers=list(layers) or None, **overrides)
    with _lock:
        if _arch is None:
            logger.debug(f"Initializing architecture for {Path(project_root).resolve()}")
            _arch = Architecture.load(project_root, config)
        return _arch


def reset() -> None:
    """Forget the shared Architecture."""
    global _arch
    with _lock:
        _arch = None


def current() -> Architecture:
    """The shared Architecture.

    Raises:
        NotInitializedError: if arch_unit() has not been called.
    """
    if _arch is None:
        raise NotInitializedError()
    return _arch


def layers(*names: str) -> LayerSelection:
    return current().layers(*names)


def packages(*matchers: Matcher) -> PackageSelection:
    return current().packages(*matchers)


def types(*matchers: Matcher) -> TypeSelection:
    return current().types(*matchers)


def types_implementing(interface_name: str, pointer: bool = False) -> TypeSelection:
    return current().types_implementing(interface_name, pointer)


def types_embedding(type_name: str) -> TypeSelection:
    return current().types_embedding(type_name)


def functions(*matchers: Matcher) -> FunctionSelection:
    return current().functions(*matchers)


def methods_of(type_matcher: Matcher) -> FunctionSelection:
    return current().methods_of(type_matcher)


def variables_of_type(type_string: str) -> VariableSelection:
    return current().variables_of_type(type_string)


def source_files(*matchers: Matcher) -> FileSelection:
    return current().source_files(*matchers)


def test_files(*matchers: Matcher) -> FileSelection:
    return current().test_files(*matchers)


test_files.__test__ = False  # type: ignore[attr-defined]


def validate(*rules: Rule) -> Optional[ArchitectureViolations]:
    return current().validate(*rules)


def check(*rules: Rule) -> None:
    current().check(*rules)
