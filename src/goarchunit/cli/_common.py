"""Shared CLI helpers."""

from pathlib import Path
from typing import Optional

from rich.console import Console

from ..config import ArchConfig, load_config

console = Console()

EXIT_VIOLATIONS = 1
EXIT_FATAL = 2


def resolve_config(
    root: Path,
    config: Optional[Path] = None,
    max_depth: Optional[int] = None,
    config_folder: Optional[str] = None,
    source: Optional[str] = None,
    workers: Optional[int] = None,
) -> ArchConfig:
    """Build configuration from CLI options."""
    overrides = {}
    if max_depth is not None:
        overrides["max_package_depth"] = max_depth
    if config_folder is not None:
        overrides["config_folder"] = config_folder
    if source is not None:
        overrides["metadata_source"] = source
    if workers is not None:
        overrides["workers"] = workers
    return load_config(root, config_file=config, **overrides)
