"""Exception hierarchy for goarchunit."""

from .analysis import (
    AnalysisError,
    FileAccessError,
    ParsingError,
    PatternError,
    SelectionError,
    ToolchainError,
)
from .base import ArchUnitError
from .config import (
    ConfigurationError,
    DuplicateLayerError,
    InvalidConfigError,
    NotInitializedError,
    UndefinedLayerError,
)
from .violations import (
    GENERAL_ERRORS,
    ArchitectureViolations,
    ViolationCategory,
    ViolationError,
    ViolationReport,
)

__all__ = [
    "ArchUnitError",
    "AnalysisError",
    "FileAccessError",
    "ParsingError",
    "PatternError",
    "SelectionError",
    "ToolchainError",
    "ConfigurationError",
    "DuplicateLayerError",
    "InvalidConfigError",
    "NotInitializedError",
    "UndefinedLayerError",
    "GENERAL_ERRORS",
    "ArchitectureViolations",
    "ViolationCategory",
    "ViolationError",
    "ViolationReport",
]
