"""Base exception for goarchunit."""

from typing import Dict, Optional


class ArchUnitError(Exception):
    """Base exception for all goarchunit errors."""

    def __init__(self, message: str, details: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message

    def describe(self, verbose: bool = False) -> str:
        """One-line text for the command line.

        Only the ``reason`` detail is shown unless ``verbose`` is set, in which
        case every detail is appended as in ``str()``.
        """
        if verbose:
            return str(self)
        reason = self.details.get("reason")
        return f"{self.message}: {reason}" if reason else self.message
