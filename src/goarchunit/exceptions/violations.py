"""Violation values and the consolidated violation report."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .base import ArchUnitError


class ViolationCategory(str, Enum):
    """Closed set of violation categories; the stable wire contract of reports."""

    CONTEXT = "Context"
    FILE = "File"
    FOLDER = "Folder"
    FUNCTION = "Function"
    LAYER = "Layer"
    LOCATION = "Location"
    NAMING = "Naming"
    PACKAGE = "Package"
    TYPE = "Type"
    UNUSED_PUBLIC = "UnusedPublic"
    VARIABLE = "Variable"

    def __str__(self) -> str:
        return self.value


@dataclass(eq=False)
class ViolationError(Exception):
    """A rule failure carrying a category and its violation messages.

    Rules usually return it; raising it from a rule has the same effect.
    """

    category: ViolationCategory
    violations: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        super().__init__(str(self))

    def __str__(self) -> str:
        return f"{self.category.value} Conventions: {len(self.violations)} violations found"


GENERAL_ERRORS = "General Errors"


@dataclass
class ViolationReport:
    """All violations of one validate() call, grouped by category."""

    by_category: dict[ViolationCategory, list[str]] = field(default_factory=dict)
    general_errors: list[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.by_category) or bool(self.general_errors)

    @property
    def categories(self) -> list[ViolationCategory]:
        """Categories in deterministic (lexicographic) order."""
        return sorted(self.by_category, key=lambda c: c.value)

    def violations(self, category: ViolationCategory) -> list[str]:
        return list(self.by_category.get(category, []))

    def render(self) -> str:
        lines = ["## Architecture violations found"]
        for category in self.categories:
            lines.append(f"### {category.value} Conventions")
            lines.extend(f"- {v}" for v in self.by_category[category])
        if self.general_errors:
            lines.append(f"### {GENERAL_ERRORS}")
            lines.extend(f"- {e}" for e in self.general_errors)
        return "\n".join(lines) + "\n"

    def __str__(self) -> str:
        return self.render()

    def to_json(self) -> dict:
        return {
            "categories": {c.value: list(self.by_category[c]) for c in self.categories},
            "general_errors": list(self.general_errors),
        }


class ArchitectureViolations(ArchUnitError, AssertionError):
    """Raised by Architecture.check() when the report is not empty."""

    def __init__(self, report: ViolationReport):
        super().__init__(report.render())
        self.report = report
