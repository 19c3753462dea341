"""Package discovery through the ``go`` command."""

from __future__ import annotations

import json
import os
import subprocess
from pathlib import Path
from typing import Any, Iterator

from ..exceptions import ToolchainError
from ..logging_config import get_logger
from .listing import ModuleInfo, PackageListing

logger = get_logger(__name__)


class GoToolchain:
    """Run ``go list`` in a project root and decode its JSON output."""

    def __init__(self, root: str, go_binary: str = "go", timeout: int = 120):
        self.root = str(Path(root).resolve())
        self.go_binary = go_binary
        self.timeout = timeout

    def module(self) -> ModuleInfo:
        """The main module (``go list -m -json``)."""
        raw = self._run("list", "-m", "-json")
        entries = list(decode_json_stream(raw))
        if not entries:
            raise ToolchainError(self._command("list", "-m", "-json"), "no module found")
        main = entries[0]
        return ModuleInfo(path=main["Path"], dir=main.get("Dir", self.root))

    def list_packages(self) -> list[PackageListing]:
        """Every package reachable from ``./...``, tests and dependencies included.

        Test variants (``pkg [pkg.test]``, ``pkg_test``, ``pkg.test``) are not
        returned; their files and imports are recorded on the base package.
        """
        raw = self._run("list", "-e", "-json", "-deps", "-test", "./...")
        listings: dict[str, PackageListing] = {}
        for entry in decode_json_stream(raw):
            if _is_test_variant(entry):
                continue
            listing = _to_listing(entry)
            listings.setdefault(listing.import_path, listing)
            if entry.get("Error"):
                logger.warning(
                    f"go list reported an error for {listing.import_path}: "
                    f"{entry['Error'].get('Err', '')}"
                )
        logger.debug(f"go list returned {len(listings)} packages")
        return list(listings.values())

    def _command(self, *args: str) -> str:
        return " ".join([self.go_binary, *args])

    def _run(self, *args: str) -> str:
        cmd = [self.go_binary, *args]
        logger.info(f"Running {' '.join(cmd)} in {self.root}")
        try:
            result = subprocess.run(
                cmd,
                cwd=self.root,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise ToolchainError(self._command(*args), f"go binary not found: {e}")
        except subprocess.TimeoutExpired:
            raise ToolchainError(self._command(*args), f"timed out after {self.timeout}s")
        if result.returncode != 0:
            raise ToolchainError(self._command(*args), result.stderr.strip())
        return result.stdout


def decode_json_stream(raw: str) -> Iterator[dict[str, Any]]:
    """Decode concatenated JSON objects, as printed by ``go list -json``."""
    decoder = json.JSONDecoder()
    index = 0
    length = len(raw)
    while index < length:
        while index < length and raw[index].isspace():
            index += 1
        if index >= length:
            break
        obj, index = decoder.raw_decode(raw, index)
        yield obj


def _is_test_variant(entry: dict[str, Any]) -> bool:
    import_path = entry.get("ImportPath", "")
    if entry.get("ForTest") or " [" in import_path or import_path.endswith(".test"):
        return True
    return any(name == "_testmain.go" for name in entry.get("GoFiles", []))


def _to_listing(entry: dict[str, Any]) -> PackageListing:
    directory = entry.get("Dir", "")

    def files(key: str) -> tuple[str, ...]:
        return tuple(os.path.join(directory, name) for name in entry.get(key) or [])

    module = entry.get("Module") or {}
    return PackageListing(
        import_path=entry["ImportPath"],
        name=entry.get("Name", ""),
        dir=directory,
        go_files=files("GoFiles") + files("CgoFiles"),
        test_go_files=files("TestGoFiles"),
        xtest_go_files=files("XTestGoFiles"),
        imports=tuple(entry.get("Imports") or []),
        test_imports=tuple(
            sorted(set(entry.get("TestImports") or []) | set(entry.get("XTestImports") or []))
        ),
        standard=bool(entry.get("Standard")),
        module=module.get("Path", ""),
    )
