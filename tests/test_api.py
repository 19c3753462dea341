"""Tests for api.py - the shared architecture and module-level selectors."""

import pytest

import goarchunit as au
from goarchunit.exceptions import DuplicateLayerError, NotInitializedError


@pytest.fixture
def shop(layered_root):
    """Initialize the shared architecture over the layered sample."""
    return au.arch_unit(
        au.arch_layer("Controller", "example.com/shop/controller"),
        au.arch_layer("Service", "example.com/shop/service"),
        au.arch_layer("Repository", "example.com/shop/repository"),
        project_root=layered_root,
        metadata_source="filesystem",
    )


class TestInitialization:
    """Test arch_unit() and its one-time loading."""

    def test_selections_before_init(self):
        """Selecting before arch_unit() is fatal."""
        with pytest.raises(NotInitializedError) as exc_info:
            au.layers("Service")
        assert "arch_unit() must be called" in str(exc_info.value)

    def test_loads_once(self, shop, layered_root):
        """Later calls return the first Architecture."""
        again = au.arch_unit(
            au.arch_layer("Other", "example.com/shop/model"),
            project_root=layered_root,
            metadata_source="filesystem",
        )
        assert again is shop
        assert au.current() is shop
        assert [layer.name for layer in shop.declared_layers] == [
            "Controller",
            "Service",
            "Repository",
        ]

    def test_later_calls_still_validate(self, shop, layered_root):
        """Duplicate layers are rejected even after loading."""
        with pytest.raises(DuplicateLayerError):
            au.arch_unit(
                au.arch_layer("A", "example.com/shop/model"),
                au.arch_layer("A", "example.com/shop/service"),
                project_root=layered_root,
            )

    def test_reset(self, shop):
        """reset() forgets the shared Architecture."""
        au.reset()
        with pytest.raises(NotInitializedError):
            au.current()


class TestModuleSelectors:
    """Test module-level shortcuts over the shared Architecture."""

    def test_layer_rules(self, shop):
        """Module functions delegate to the shared Architecture."""
        au.check(au.layers("Service").should_not_refer(au.layers("Controller")))
        result = au.validate(au.layers("Controller").should_not_refer(au.layers("Repository")))
        assert result is not None
        assert result.report.violations(au.ViolationCategory.LAYER) == [
            "arch violation: <Controller> should not refer to <example.com/shop/repository>"
        ]

    def test_check_raises(self, shop):
        """check() raises an AssertionError for failing rules."""
        with pytest.raises(AssertionError):
            au.check(au.types().should_be_exported())

    def test_selectors(self, shop):
        """Every selector is available at module level."""
        assert [p.name for p in au.packages(au.with_name("example.com/shop/model"))] == ["model"]
        assert [t.name for t in au.types(au.have_name_suffix("Controller"))] == ["UserController"]
        assert [t.name for t in au.types_implementing("repository.UserRepository", True)] == [
            "memoryRepository"
        ]
        assert [f.name for f in au.functions(au.with_name("main"))] == ["main"]
        assert [m.name for m in au.methods_of(au.with_name("UserService"))] == ["Get"]
        assert len(au.variables_of_type("int")) == 0
        assert len(au.source_files()) == 5
        assert len(au.test_files()) == 0
        assert au.types_embedding("model.Missing").error is not None

    def test_best_practices_through_api(self, shop):
        """Analyzers run through the shared Architecture like any rule."""
        result = au.validate(
            au.package_named_as_folder(allow_main=True), au.error_should_be_last_return()
        )
        assert result is None
