"""Package discovery from go.mod and the directory tree.

Used when the go toolchain is unavailable. Imports are not known up front;
the parser reads them from the import declarations.
"""

from __future__ import annotations

import os
import re
from pathlib import Path

from ..exceptions import FileAccessError, ToolchainError
from ..logging_config import get_logger
from .listing import ModuleInfo, PackageListing

logger = get_logger(__name__)

_MODULE_DIRECTIVE = re.compile(r"^\s*module\s+(\S+)")


class FilesystemSource:
    """Walk a module root and group ``.go`` files per directory."""

    def __init__(self, root: str, exclude_dirs: tuple[str, ...] = ()):
        self.root = str(Path(root).resolve())
        self.exclude_dirs = frozenset(exclude_dirs)

    def module(self) -> ModuleInfo:
        go_mod = os.path.join(self.root, "go.mod")
        try:
            with open(go_mod, encoding="utf-8") as f:
                for line in f:
                    match = _MODULE_DIRECTIVE.match(line)
                    if match:
                        return ModuleInfo(path=match.group(1).strip('"'), dir=self.root)
        except OSError as e:
            raise ToolchainError(f"read {go_mod}", str(e))
        raise ToolchainError(f"read {go_mod}", "no module directive")

    def list_packages(self) -> list[PackageListing]:
        module = self.module().path
        listings = []
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames[:] = sorted(d for d in dirnames if self._descend(dirpath, d))
            go_files = sorted(f for f in filenames if f.endswith(".go"))
            if not go_files:
                continue
            rel = os.path.relpath(dirpath, self.root).replace(os.sep, "/")
            import_path = module if rel == "." else f"{module}/{rel}"
            listings.append(
                PackageListing(
                    import_path=import_path,
                    name="",
                    dir=dirpath,
                    go_files=tuple(
                        os.path.join(dirpath, f) for f in go_files if not f.endswith("_test.go")
                    ),
                    test_go_files=tuple(
                        os.path.join(dirpath, f) for f in go_files if f.endswith("_test.go")
                    ),
                    module=module,
                )
            )
        logger.debug(f"Found {len(listings)} package directories under {self.root}")
        return listings

    def _descend(self, parent: str, name: str) -> bool:
        if name.startswith((".", "_")) or name in self.exclude_dirs:
            return False
        # nested modules are separate projects
        return not os.path.exists(os.path.join(parent, name, "go.mod"))


def read_source(path: str) -> bytes:
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise FileAccessError(path, str(e))
