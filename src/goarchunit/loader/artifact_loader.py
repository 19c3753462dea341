"""Build an Artifact from a Go project root."""

from __future__ import annotations

import os
import shutil
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional, Sequence, Union

from ..config import ArchConfig
from ..exceptions import ParsingError
from ..logging_config import get_logger
from ..model.artifact import Artifact
from ..model.entities import Package
from ..patterns import looks_like_standard_library
from ..scanning.treesitter_parser import TreeSitterParser
from .listing import ModuleInfo, PackageListing
from .parser import PackageParser
from .source_walker import FilesystemSource
from .toolchain import GoToolchain

logger = get_logger(__name__)


class PackageRegistry:
    """Package map shared by parser threads; the first insert of an ID wins."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._packages: dict[str, Package] = {}
        self._errors: list[ParsingError] = []

    def insert(self, package: Package, errors: Sequence[ParsingError] = ()) -> bool:
        with self._lock:
            if package.id in self._packages:
                return False
            self._packages[package.id] = package
            self._errors.extend(errors)
            return True

    def __contains__(self, package_id: str) -> bool:
        with self._lock:
            return package_id in self._packages

    def snapshot(self) -> tuple[dict[str, Package], list[ParsingError]]:
        with self._lock:
            return dict(self._packages), list(self._errors)


def _source(root: str, config: ArchConfig) -> Union[GoToolchain, FilesystemSource]:
    source = config.metadata_source
    if source == "auto":
        source = "go" if shutil.which(config.go_binary) else "filesystem"
        logger.debug(f"Metadata source resolved to {source}")
    if source == "go":
        return GoToolchain(root, config.go_binary, config.toolchain_timeout_seconds)
    return FilesystemSource(root, config.exclude_dirs)


def load(project_root: Union[str, Path], config: Optional[ArchConfig] = None) -> Artifact:
    """Load every package of the project and its imports into an Artifact.

    Raises:
        ToolchainError: if the module or its packages cannot be listed
    """
    config = config or ArchConfig()
    root = str(Path(project_root).resolve())
    source = _source(root, config)

    module: ModuleInfo = source.module()
    listings = source.list_packages()
    logger.info(f"Loading module {module.path} ({len(listings)} packages listed)")

    parser = PackageParser(TreeSitterParser(), module.path)
    registry = PackageRegistry()

    def is_application(listing: PackageListing) -> bool:
        path = listing.import_path
        return path == module.path or path.startswith(module.path + "/")

    to_parse = [
        listing
        for listing in listings
        if not listing.standard
        and (is_application(listing) or config.include_dependencies)
        and (listing.go_files or listing.all_test_files)
    ]

    def parse_one(listing: PackageListing) -> None:
        if listing.import_path in registry:
            return
        package, errors = parser.parse(listing)
        registry.insert(package, errors)

    workers = config.workers or min(32, (os.cpu_count() or 1) + 4)
    with ThreadPoolExecutor(max_workers=workers) as pool:
        # list() re-raises worker exceptions
        list(pool.map(parse_one, to_parse))

    # Listed but unparsed packages (standard library, skipped dependencies)
    for listing in listings:
        if listing.import_path not in registry:
            registry.insert(_stub(listing.import_path, listing))

    packages, errors = registry.snapshot()
    # Imports that no listing covers, e.g. the standard library when walking
    # the filesystem.
    for package in list(packages.values()):
        for imported in package.imports + package.test_imports:
            if imported not in packages:
                packages[imported] = _stub(imported)

    logger.info(
        f"Loaded {sum(1 for p in packages.values() if p.application)} application packages, "
        f"{len(packages)} total"
    )
    for error in errors:
        logger.debug(str(error))
    return Artifact(root, module.path, packages, errors)


def _stub(import_path: str, listing: Optional[PackageListing] = None) -> Package:
    if listing is None:
        return Package(
            id=import_path,
            name=import_path.rsplit("/", 1)[-1],
            dir="",
            standard=looks_like_standard_library(import_path),
        )
    return Package(
        id=import_path,
        name=listing.name or import_path.rsplit("/", 1)[-1],
        dir=listing.dir,
        go_files=tuple(listing.go_files),
        imports=tuple(listing.imports or ()),
        standard=listing.standard,
    )
