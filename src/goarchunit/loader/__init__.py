"""Project loading: package discovery, parsing and artifact assembly."""

from .artifact_loader import load
from .listing import ModuleInfo, PackageListing
from .source_walker import FilesystemSource
from .toolchain import GoToolchain

__all__ = ["load", "ModuleInfo", "PackageListing", "FilesystemSource", "GoToolchain"]
