"""Loading and analysis errors: toolchain, parsing, patterns, selections."""

from pathlib import Path
from typing import Optional, Union

from .base import ArchUnitError


class AnalysisError(ArchUnitError):
    """Base class for analysis-related errors."""

    pass


class ToolchainError(AnalysisError):
    """Raised when the go toolchain cannot list or load the project."""

    def __init__(self, command: str, reason: str):
        super().__init__(
            f"go toolchain failed: {command}",
            details={"command": command, "reason": reason},
        )
        self.command = command
        self.reason = reason


class FileAccessError(AnalysisError):
    """Raised when a file cannot be accessed or read."""

    def __init__(self, filepath: Union[str, Path], reason: str):
        super().__init__(
            f"Cannot access file: {filepath}",
            details={"filepath": str(filepath), "reason": reason},
        )
        self.filepath = filepath
        self.reason = reason


class ParsingError(AnalysisError):
    """Raised when a Go source file contains syntax errors."""

    def __init__(self, filepath: Union[str, Path], reason: str, line: Optional[int] = None):
        details = {"filepath": str(filepath), "reason": reason}
        if line is not None:
            details["line"] = str(line)
        super().__init__(f"Failed to parse go file: {filepath}", details=details)
        self.filepath = filepath
        self.reason = reason
        self.line = line


class PatternError(AnalysisError):
    """Raised when a package path pattern is malformed."""

    def __init__(self, pattern: str):
        super().__init__(f"invalid package paths: {pattern}")
        self.pattern = pattern


class SelectionError(AnalysisError):
    """A resolution failure captured on a selection.

    The error is not raised when the selection is built; every rule applied to
    the selection returns it instead.
    """

    pass
