"""Package metadata as produced by ``go list`` or the filesystem walker."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ModuleInfo:
    """The main module: its path (``github.com/acme/app``) and directory."""

    path: str
    dir: str


@dataclass(frozen=True)
class PackageListing:
    """Files and imports of one package, before parsing.

    File lists hold absolute paths. ``imports`` is None when the source of
    the listing does not know them; the parser then takes them from the
    import declarations it reads.
    """

    import_path: str
    name: str
    dir: str
    go_files: tuple[str, ...] = ()
    test_go_files: tuple[str, ...] = ()
    xtest_go_files: tuple[str, ...] = ()
    imports: Optional[tuple[str, ...]] = None
    test_imports: Optional[tuple[str, ...]] = None
    standard: bool = False
    module: str = ""

    @property
    def all_test_files(self) -> tuple[str, ...]:
        return self.test_go_files + self.xtest_go_files
