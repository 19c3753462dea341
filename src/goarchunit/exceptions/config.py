"""Configuration errors: layers, settings, initialization order.

These are fatal. They are raised while the architecture is being configured
and are never collected into a violation report.
"""

from typing import Any, List

from .base import ArchUnitError


class ConfigurationError(ArchUnitError):
    """Base class for configuration-related errors."""

    pass


class DuplicateLayerError(ConfigurationError):
    """Raised when two layers share a name or a root folder."""

    def __init__(self, attribute: str, value: str):
        super().__init__(
            f"layer with {attribute} '{value}' is defined more than once",
            details={"attribute": attribute, "value": value},
        )
        self.attribute = attribute
        self.value = value


class UndefinedLayerError(ConfigurationError):
    """Raised when a selection targets layers that were never declared."""

    def __init__(self, names: List[str]):
        super().__init__(f"layers not defined: {', '.join(names)}")
        self.names = names


class InvalidConfigError(ConfigurationError):
    """Raised when configuration values are invalid."""

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(
            f"Invalid configuration for {key}: {value}",
            details={"key": key, "value": str(value), "reason": reason},
        )
        self.key = key
        self.value = value
        self.reason = reason


class NotInitializedError(ConfigurationError):
    """Raised when a selection is made before arch_unit() was called."""

    def __init__(self) -> None:
        super().__init__("goarchunit.arch_unit() must be called before making any selections")
