"""Shared test fixtures for goarchunit tests."""

import textwrap
from pathlib import Path

import pytest

import goarchunit
from goarchunit.config import ArchConfig, LayerConfig
from goarchunit.engine import Architecture

MODULE = "example.com/app"
FIXTURES = Path(__file__).parent / "fixtures"


def pytest_configure(config):
    """Register the go marker."""
    config.addinivalue_line("markers", "go: test needs the go toolchain")


def write_project(root: Path, files: dict, module: str = MODULE) -> Path:
    """Write go.mod plus the given files (relative path -> source) under root."""
    root.mkdir(parents=True, exist_ok=True)
    (root / "go.mod").write_text(f"module {module}\n\ngo 1.21\n")
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content).lstrip())
    return root


def load_arch(root: Path, layers=(), **settings) -> Architecture:
    """Load a project from the filesystem, without the go toolchain."""
    config = ArchConfig(metadata_source="filesystem", **settings)
    return Architecture.load(root, config, [LayerConfig(n, r) for n, r in layers])


@pytest.fixture(autouse=True)
def _reset_shared_architecture():
    """Every test starts without a shared architecture."""
    goarchunit.reset()
    yield
    goarchunit.reset()


@pytest.fixture
def go_project(tmp_path):
    """Factory writing a Go module into a temporary directory."""

    def make(files: dict, module: str = MODULE) -> Path:
        return write_project(tmp_path / "project", files, module)

    return make


@pytest.fixture
def layered_root():
    """The layered sample module under tests/fixtures."""
    return FIXTURES / "layered"


@pytest.fixture
def layered_arch(layered_root):
    """The layered sample module with Controller/Service/Repository/Model layers."""
    return load_arch(
        layered_root,
        layers=[
            ("Controller", "example.com/shop/controller"),
            ("Service", "example.com/shop/service"),
            ("Repository", "example.com/shop/repository"),
            ("Model", "example.com/shop/model"),
        ],
    )


@pytest.fixture
def load_project():
    """Loader for projects written with go_project."""
    return load_arch
