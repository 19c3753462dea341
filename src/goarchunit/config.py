"""Configuration loading and management for goarchunit.

Configuration sources are merged in priority order (lowest to highest):
    1. Defaults (defined in ArchConfig)
    2. Project config (<project root>/goarchunit.toml)
    3. Explicit config file
    4. Environment variables (GOARCHUNIT_* prefix)
    5. Keyword overrides (typically CLI flags)

Example:
    >>> config = load_config(".", max_package_depth=4)
    >>> config.max_package_depth
    4

A project config declares layers as an array of tables::

    max_package_depth = 3

    [[layers]]
    name = "Service"
    root = "github.com/acme/app/service/..."
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Optional, Union, get_type_hints

from .exceptions import DuplicateLayerError, InvalidConfigError

MetadataSource = Literal["auto", "go", "filesystem"]

PROJECT_CONFIG_NAME = "goarchunit.toml"
ENV_PREFIX = "GOARCHUNIT_"

_SOURCES = ("auto", "go", "filesystem")


@dataclass(frozen=True)
class LayerConfig:
    """A named layer and the package path pattern that defines its members."""

    name: str
    root_folder: str

    def __post_init__(self) -> None:
        if not self.name:
            raise InvalidConfigError("layers.name", self.name, "layer name must not be empty")
        if not self.root_folder:
            raise InvalidConfigError(
                "layers.root", self.root_folder, "layer root folder must not be empty"
            )


@dataclass(frozen=True)
class ArchConfig:
    """Configuration for loading a project and running the bundled analyzers.

    Attributes:
        Architecture:
            layers: Ordered layer declarations; names and roots must be unique

        Analyzers:
            max_package_depth: Depth limit used by the bundled best practices
            config_folder: Folder (relative to the project root) for config files

        Loading:
            metadata_source: "go" runs the toolchain, "filesystem" walks go.mod
                and sources directly, "auto" picks "go" when it is on PATH
            go_binary: Toolchain executable
            toolchain_timeout_seconds: Timeout for each toolchain invocation
            workers: Parser threads (None = auto-detect)
            include_dependencies: Parse non-standard dependency packages too
            exclude_dirs: Directory names skipped by filesystem walkers
    """

    layers: tuple[LayerConfig, ...] = ()

    max_package_depth: int = 3
    config_folder: str = "configs"

    metadata_source: MetadataSource = "auto"
    go_binary: str = "go"
    toolchain_timeout_seconds: int = 120
    workers: Optional[int] = None
    include_dependencies: bool = True
    exclude_dirs: tuple[str, ...] = field(
        default_factory=lambda: ("vendor", ".git", "node_modules", "testdata")
    )

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        object.__setattr__(self, "layers", tuple(self.layers))
        object.__setattr__(self, "exclude_dirs", tuple(self.exclude_dirs))

        if self.max_package_depth < 1:
            raise InvalidConfigError(
                "max_package_depth", self.max_package_depth, "must be at least 1"
            )
        if not self.config_folder:
            raise InvalidConfigError("config_folder", self.config_folder, "must not be empty")
        if self.metadata_source not in _SOURCES:
            raise InvalidConfigError(
                "metadata_source", self.metadata_source, f"must be one of {', '.join(_SOURCES)}"
            )
        if self.toolchain_timeout_seconds < 1:
            raise InvalidConfigError(
                "toolchain_timeout_seconds", self.toolchain_timeout_seconds, "must be at least 1"
            )
        if self.workers is not None and self.workers < 1:
            raise InvalidConfigError("workers", self.workers, "must be at least 1")

        check_unique_layers(self.layers)


def check_unique_layers(layers: tuple[LayerConfig, ...]) -> None:
    """Raise DuplicateLayerError on a repeated layer name or root folder."""
    names: set[str] = set()
    roots: set[str] = set()
    for layer in layers:
        if layer.name in names:
            raise DuplicateLayerError("name", layer.name)
        if layer.root_folder in roots:
            raise DuplicateLayerError("root folder", layer.root_folder)
        names.add(layer.name)
        roots.add(layer.root_folder)


def load_config(
    project_root: Union[str, Path] = ".", config_file: Optional[Path] = None, **overrides
) -> ArchConfig:
    """Load configuration with project discovery and merging.

    Args:
        project_root: Directory searched for goarchunit.toml
        config_file: Optional explicit config file path
        **overrides: Direct overrides; None values are ignored

    Raises:
        InvalidConfigError: If a config file is missing or invalid
        DuplicateLayerError: If layers repeat a name or root folder
    """
    merged: dict[str, Any] = {}

    project_config = Path(project_root) / PROJECT_CONFIG_NAME
    if project_config.exists():
        merged.update(_load_toml_file(project_config))

    if config_file is not None:
        config_file = Path(config_file)
        if not config_file.exists():
            raise InvalidConfigError("config_file", config_file, "file not found")
        merged.update(_load_toml_file(config_file))

    merged.update(_load_env_vars())
    merged.update({k: v for k, v in overrides.items() if v is not None})

    if "layers" in merged:
        merged["layers"] = _parse_layers(merged["layers"])
    if "exclude_dirs" in merged:
        merged["exclude_dirs"] = tuple(merged["exclude_dirs"])

    try:
        return ArchConfig(**merged)
    except TypeError as e:
        # Unknown field in config
        raise InvalidConfigError("config", sorted(merged), str(e))


def _parse_layers(raw: Any) -> tuple[LayerConfig, ...]:
    layers = []
    for entry in raw:
        if isinstance(entry, LayerConfig):
            layers.append(entry)
        elif isinstance(entry, dict):
            try:
                layers.append(LayerConfig(name=entry["name"], root_folder=entry["root"]))
            except KeyError as e:
                raise InvalidConfigError("layers", entry, f"missing key {e}")
        elif isinstance(entry, (tuple, list)) and len(entry) == 2:
            layers.append(LayerConfig(name=entry[0], root_folder=entry[1]))
        else:
            raise InvalidConfigError("layers", entry, "expected a table with name and root")
    return tuple(layers)


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from GOARCHUNIT_* environment variables.

    Only scalar fields are read; layers and exclude_dirs come from files.
    """
    type_hints = get_type_hints(ArchConfig)

    result: dict[str, Any] = {}

    for field_name in ArchConfig.__dataclass_fields__:
        env_key = f"{ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))
        if parsed is not None:
            result[field_name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse an environment variable string to the field's type."""
    origin = getattr(type_hint, "__origin__", None)

    args = getattr(type_hint, "__args__", ())
    if origin is Union and type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]
            origin = getattr(type_hint, "__origin__", None)

    if origin is tuple or type_hint is tuple:
        return None

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load a TOML file and return the parsed dict."""
    try:
        import tomllib
    except ModuleNotFoundError:
        import tomli as tomllib  # type: ignore

    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise InvalidConfigError("config_file", path, str(e))
