"""Tests for matcher combinators."""

import pytest

from goarchunit.exceptions import PatternError
from goarchunit.matchers import (
    all_of,
    any_of,
    be_snake_case,
    combine,
    have_name_prefix,
    have_name_suffix,
    in_package,
    match_folder,
    name_contains,
    name_matches,
    not_,
    object_name,
    with_name,
)
from goarchunit.model.entities import Function, GoType, Package, SourceFile, Variable
from goarchunit.model.types import basic


@pytest.fixture
def service_type():
    """An exported struct in a service package."""
    return GoType("UserService", "example.com/app/service", "/p/service/user.go", 3, "struct")


class TestNameMatchers:
    """Test matchers over object names."""

    def test_with_name(self, service_type):
        """Exact name match."""
        assert with_name("UserService")(service_type) == (True, "have name matching 'UserService'")
        assert with_name("User")(service_type)[0] is False

    def test_prefix_and_suffix(self, service_type):
        """Prefix and suffix descriptions read as sentence tails."""
        assert have_name_prefix("User")(service_type) == (True, "have name with prefix 'User'")
        assert have_name_suffix("Impl")(service_type) == (False, "have name with suffix 'Impl'")

    def test_regex_and_substring(self, service_type):
        """Regex search and substring containment."""
        assert name_matches(r"^User\w+$")(service_type)[0]
        assert not name_matches(r"^Service")(service_type)[0]
        assert name_contains("erSer")(service_type) == (True, "contain substring 'erSer'")

    def test_package_name_is_its_import_path(self):
        """Matchers see a package's import path as its name."""
        pkg = Package(id="example.com/app/service", name="service", dir="/p/service")
        assert object_name(pkg) == "example.com/app/service"
        assert have_name_suffix("/service")(pkg)[0]

    def test_function_uses_short_name(self):
        """Functions are matched by their plain name, not the qualified one."""
        fn = Function("NewUser", "example.com/app/model", "/p/model/user.go", 9)
        assert have_name_prefix("New")(fn)[0]
        assert not have_name_prefix("example.com")(fn)[0]


class TestSpecialMatchers:
    """Test file, folder and package-path matchers."""

    def test_be_snake_case(self):
        """Source file names must be snake case."""
        assert be_snake_case(SourceFile("/p/user_service.go", "p")) == (True, "be in snake_case")
        assert not be_snake_case(SourceFile("/p/UserService.go", "p"))[0]

    def test_match_folder(self):
        """Package name must equal its directory name."""
        good = Package(id="example.com/app/model", name="model", dir="/p/model")
        bad = Package(id="example.com/app/model", name="models", dir="/p/model/")
        assert match_folder(good) == (True, "have name matching its folder")
        assert not match_folder(bad)[0]

    def test_match_folder_without_dir(self):
        """Without a directory the last path element is used."""
        pkg = Package(id="example.com/app/model", name="model", dir="")
        assert match_folder(pkg)[0]

    def test_in_package(self, service_type):
        """Package path patterns use the ... wildcard."""
        assert in_package("app/service")(service_type)[0]
        assert in_package("model/...", "app/...")(service_type) == (
            True,
            "reside in package matching 'model/... or app/...'",
        )
        assert not in_package("app/model")(service_type)[0]

    def test_in_package_invalid_pattern(self):
        """Malformed patterns fail when the matcher is built."""
        with pytest.raises(PatternError):
            in_package("app/../x")


class TestCombinators:
    """Test all_of, any_of and not_."""

    def test_all_of_joins_descriptions(self, service_type):
        """All hits: descriptions joined with 'and'."""
        matcher = all_of(have_name_prefix("User"), have_name_suffix("Service"))
        assert matcher(service_type) == (
            True,
            "have name with prefix 'User' and have name with suffix 'Service'",
        )

    def test_all_of_reports_first_miss(self, service_type):
        """The first failing matcher's description is reported."""
        calls = []

        def spy(item):
            calls.append(item)
            return True, "spy"

        matcher = all_of(have_name_prefix("Order"), spy)
        assert matcher(service_type) == (False, "have name with prefix 'Order'")
        assert calls == []

    def test_any_of_stops_at_first_hit(self, service_type):
        """The first matching description is reported."""
        matcher = any_of(have_name_suffix("Impl"), have_name_suffix("Service"))
        assert matcher(service_type) == (True, "have name with suffix 'Service'")

    def test_any_of_all_miss(self, service_type):
        """Misses are listed with 'or'."""
        matcher = any_of(have_name_suffix("Impl"), have_name_prefix("Order"))
        assert matcher(service_type) == (
            False,
            "not match any of: have name with suffix 'Impl' or have name with prefix 'Order'",
        )

    def test_not(self, service_type):
        """Negation flips the verdict and prefixes 'not'."""
        assert not_(have_name_suffix("Impl"))(service_type) == (
            True,
            "not have name with suffix 'Impl'",
        )

    def test_combine(self, service_type):
        """No matchers match everything; several are conjunctive."""
        assert combine([])(service_type) == (True, "any")
        single = with_name("UserService")
        assert combine([single]) is single
        assert not combine([single, have_name_suffix("Impl")])(service_type)[0]

    def test_works_on_variables_of_any_kind(self):
        """Matchers only need a name."""
        var = Variable("max_size", "example.com/app", "/p/a.go", 1, basic("int"))
        assert name_contains("_")(var)[0]
