"""Tests for the goarchunit exception hierarchy and violation report."""

import pytest

from goarchunit.exceptions import (
    AnalysisError,
    ArchitectureViolations,
    ArchUnitError,
    ConfigurationError,
    DuplicateLayerError,
    FileAccessError,
    InvalidConfigError,
    NotInitializedError,
    ParsingError,
    PatternError,
    SelectionError,
    ToolchainError,
    UndefinedLayerError,
    ViolationCategory,
    ViolationError,
    ViolationReport,
)


class TestHierarchy:
    """Test base classes and messages."""

    @pytest.mark.parametrize(
        "error, base",
        [
            (ToolchainError("go list -m -json", "exit 1"), AnalysisError),
            (FileAccessError("a.go", "denied"), AnalysisError),
            (ParsingError("a.go", "syntax error", 3), AnalysisError),
            (PatternError("a/**/b"), AnalysisError),
            (SelectionError("type <x.T> not found in project"), AnalysisError),
            (DuplicateLayerError("name", "App"), ConfigurationError),
            (UndefinedLayerError(["View"]), ConfigurationError),
            (InvalidConfigError("workers", 0, "must be at least 1"), ConfigurationError),
            (NotInitializedError(), ConfigurationError),
        ],
    )
    def test_base_classes(self, error, base):
        """Every error derives from its family and ArchUnitError."""
        assert isinstance(error, base)
        assert isinstance(error, ArchUnitError)

    def test_details_in_str(self):
        """Details are appended to the message."""
        error = ParsingError("a.go", "syntax error", 3)
        assert str(error) == (
            "Failed to parse go file: a.go (filepath=a.go, reason=syntax error, line=3)"
        )
        assert error.line == 3

    def test_plain_message(self):
        """Errors without details print their message only."""
        assert str(PatternError("a/**/b")) == "invalid package paths: a/**/b"
        assert str(UndefinedLayerError(["View", "Dao"])) == "layers not defined: View, Dao"

    def test_describe(self):
        """Command-line text shows the reason; verbose shows every detail."""
        error = ToolchainError("go list -m -json", "exit status 1")
        assert error.describe() == "go toolchain failed: go list -m -json: exit status 1"
        assert error.describe(verbose=True) == str(error)
        assert PatternError("a/**/b").describe() == "invalid package paths: a/**/b"


class TestViolationError:
    """Test rule failure values."""

    def test_summary(self):
        """str() summarizes category and count."""
        error = ViolationError(ViolationCategory.NAMING, ["a", "b"])
        assert str(error) == "Naming Conventions: 2 violations found"

    def test_category_values(self):
        """Category values are the report headings."""
        assert str(ViolationCategory.UNUSED_PUBLIC) == "UnusedPublic"
        assert ViolationCategory("Layer") is ViolationCategory.LAYER


class TestViolationReport:
    """Test report rendering."""

    def _report(self):
        return ViolationReport(
            by_category={
                ViolationCategory.TYPE: ["t1"],
                ViolationCategory.FOLDER: ["f1", "f2"],
            },
            general_errors=["boom"],
        )

    def test_empty_report_is_falsy(self):
        """An empty report is a pass."""
        assert not ViolationReport()

    def test_render(self):
        """Categories are sorted by name; general errors come last."""
        assert self._report().render() == (
            "## Architecture violations found\n"
            "### Folder Conventions\n"
            "- f1\n"
            "- f2\n"
            "### Type Conventions\n"
            "- t1\n"
            "### General Errors\n"
            "- boom\n"
        )

    def test_to_json(self):
        """JSON keeps category order and general errors."""
        assert self._report().to_json() == {
            "categories": {"Folder": ["f1", "f2"], "Type": ["t1"]},
            "general_errors": ["boom"],
        }

    def test_architecture_violations(self):
        """The raised report is an AssertionError rendering the report."""
        report = self._report()
        error = ArchitectureViolations(report)
        assert isinstance(error, AssertionError)
        assert str(error) == report.render()
        assert error.report is report
