"""Architecture: entry points for selections and rule validation."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

from .config import ArchConfig, LayerConfig, check_unique_layers
from .exceptions import (
    GENERAL_ERRORS,
    ArchitectureViolations,
    SelectionError,
    UndefinedLayerError,
    ViolationError,
    ViolationReport,
)
from .logging_config import get_logger
from .matchers import Matcher, combine
from .model.artifact import Artifact
from .model.entities import TEST_FILE_SUFFIX, Function, GoType, Layer, Package, SourceFile
from .rules import Rule, run_rule
from .selection import (
    FileSelection,
    FunctionSelection,
    LayerSelection,
    PackageSelection,
    TypeSelection,
    VariableSelection,
)

logger = get_logger(__name__)


class Architecture:
    """A loaded project together with its declared layers.

    Example:
        >>> arch = Architecture.load(".", layers=[LayerConfig("Service", "app/service/...")])
        >>> arch.check(arch.layers("Service").should_only_refer(arch.layers("Model")))
    """

    def __init__(
        self,
        artifact: Artifact,
        layers: Iterable[Union[LayerConfig, Layer]] = (),
        config: Optional[ArchConfig] = None,
    ) -> None:
        declared = tuple(LayerConfig(layer.name, layer.root_folder) for layer in layers)
        check_unique_layers(declared)
        self.artifact = artifact
        self.config = config or ArchConfig(layers=declared)
        self._layers: dict[str, Layer] = {
            layer.name: Layer(layer.name, layer.root_folder) for layer in declared
        }

    @classmethod
    def load(
        cls,
        project_root: Union[str, Path] = ".",
        config: Optional[ArchConfig] = None,
        layers: Iterable[Union[LayerConfig, Layer]] = (),
    ) -> "Architecture":
        """Load the project under ``project_root`` and declare its layers.

        Layers passed explicitly are added to those of the configuration.

        Raises:
            ToolchainError: if the project cannot be listed.
            DuplicateLayerError: if two layers share a name or root folder.
        """
        from .loader import load

        config = config or ArchConfig()
        declared = list(config.layers) + list(layers)
        artifact = load(project_root, config)
        return cls(artifact, declared, config)

    def __repr__(self) -> str:
        return f"Architecture({self.artifact!r}, layers={list(self._layers)})"

    # ------------------------------------------------------------------
    # Layers
    # ------------------------------------------------------------------

    @property
    def declared_layers(self) -> list[Layer]:
        return list(self._layers.values())

    def layer(self, name: str) -> Layer:
        try:
            return self._layers[name]
        except KeyError:
            raise UndefinedLayerError([name]) from None

    def layers(self, *names: str) -> LayerSelection:
        """Select declared layers by name; no names selects every layer.

        Raises:
            UndefinedLayerError: if any name was not declared.
        """
        if not names:
            return LayerSelection(self, self.declared_layers)
        missing = [n for n in names if n not in self._layers]
        if missing:
            raise UndefinedLayerError(missing)
        return LayerSelection(self, [self._layers[n] for n in names])

    # ------------------------------------------------------------------
    # Selections
    # ------------------------------------------------------------------

    def packages(self, *matchers: Matcher[Package]) -> PackageSelection:
        """Application packages."""
        return self._select(PackageSelection, self.artifact.packages(True), matchers)

    def types(self, *matchers: Matcher[GoType]) -> TypeSelection:
        return self._select(TypeSelection, self.artifact.types(), matchers)

    def types_implementing(self, interface_name: str, pointer: bool = False) -> TypeSelection:
        """Types other than the interface itself whose method set satisfies it.

        With ``pointer=True`` the method set of ``*T`` is used, so pointer
        receiver methods count.
        """
        iface = self.artifact.type(interface_name)
        if iface is None:
            return TypeSelection(
                self, error=SelectionError(f"interface <{interface_name}> not found in project")
            )
        if not iface.is_interface:
            return TypeSelection(
                self, error=SelectionError(f"<{interface_name}> is not an interface")
            )
        implementors = [
            typ
            for typ in self.artifact.types()
            if typ.qualified_name != iface.qualified_name
            and self.artifact.implements(typ, iface, pointer)
        ]
        return TypeSelection(self, implementors)

    def types_embedding(self, type_name: str) -> TypeSelection:
        """Types embedding the named type, directly or through other embedded types."""
        target = self.artifact.type(type_name)
        if target is None:
            return TypeSelection(
                self, error=SelectionError(f"type <{type_name}> not found in project")
            )
        embedding = [t for t in self.artifact.types() if self.artifact.embeds(t, target)]
        return TypeSelection(self, embedding)

    def functions(self, *matchers: Matcher[Function]) -> FunctionSelection:
        """Package-level functions; use methods_of() for methods."""
        return self._select(FunctionSelection, self.artifact.functions(), matchers)

    def methods_of(self, type_matcher: Matcher[GoType]) -> FunctionSelection:
        methods = [
            method
            for typ in self.artifact.types()
            if type_matcher(typ)[0]
            for method in typ.methods
        ]
        return FunctionSelection(self, methods)

    def variables_of_type(self, type_string: str) -> VariableSelection:
        """Variables whose type prints exactly as ``type_string``, e.g. ``*log.Logger``."""
        selected = [v for v in self.artifact.variables() if str(v.type) == type_string]
        return VariableSelection(self, selected)

    def source_files(self, *matchers: Matcher[SourceFile]) -> FileSelection:
        return self._select(FileSelection, self._files(test=False), matchers)

    def test_files(self, *matchers: Matcher[SourceFile]) -> FileSelection:
        return self._select(FileSelection, self._files(test=True), matchers)

    def _files(self, test: bool) -> list[SourceFile]:
        files = []
        for pkg in self.artifact.packages(application_only=True):
            for path in pkg.go_files + pkg.test_go_files:
                if path.endswith(TEST_FILE_SUFFIX) == test:
                    files.append(SourceFile(path, pkg.id))
        return files

    def _select(self, cls, candidates: Sequence, matchers: Sequence[Matcher]):
        matcher = combine(matchers)
        return cls(self, [c for c in candidates if matcher(c)[0]])

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self, *rules: Rule) -> Optional[ArchitectureViolations]:
        """Run rules in order and consolidate their outcomes.

        Returns:
            None when every rule passes, otherwise an ArchitectureViolations
            whose report groups violations by category, with non-violation
            errors under "General Errors".
        """
        report = ViolationReport()
        for rule in rules:
            for error in run_rule(rule, self, ()):
                if isinstance(error, ViolationError):
                    if not error.violations:
                        continue
                    report.by_category.setdefault(error.category, []).extend(error.violations)
                else:
                    report.general_errors.append(str(error))

        if not report:
            return None
        logger.info(
            f"{sum(len(v) for v in report.by_category.values())} violations in "
            f"{len(report.by_category)} categories, "
            f"{len(report.general_errors)} {GENERAL_ERRORS.lower()}"
        )
        return ArchitectureViolations(report)

    def check(self, *rules: Rule) -> None:
        """Like validate(), but raise the report.

        Raises:
            ArchitectureViolations: if any rule fails.
        """
        violations = self.validate(*rules)
        if violations is not None:
            raise violations
