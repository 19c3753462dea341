"""Tests for model/artifact.py - lookups, method sets and whole-program facts."""

import os

import pytest

NAME_SERVICE_GO = """
package service

type NameService interface {
	FirstNameI() string
	LastNameI() string
}

type Named interface {
	NameService
	Extra()
}

type NameServiceImpl struct{}

func (n NameServiceImpl) FirstNameI() string { return "first" }

func (n NameServiceImpl) LastNameI() string { return "last" }

type FullNameImpl struct {
	NameServiceImpl
	Title string
}

type PtrImpl struct{}

func (p *PtrImpl) FirstNameI() string { return "first" }

func (p *PtrImpl) LastNameI() string { return "last" }

type PartialImpl struct{}

func (p PartialImpl) FirstNameI() string { return "first" }

type WrongSignature struct{}

func (w WrongSignature) FirstNameI() int { return 1 }

func (w WrongSignature) LastNameI() string { return "last" }
"""


@pytest.fixture
def service_arch(go_project, load_project):
    """A package with one interface and several candidate implementations."""
    return load_project(go_project({"service/name_service.go": NAME_SERVICE_GO}))


class TestTypeLookup:
    """Test Artifact.type name resolution."""

    def test_short_and_full_names(self, service_arch):
        """Names resolve relative to the module or by full import path."""
        artifact = service_arch.artifact
        short = artifact.type("service.NameService")
        full = artifact.type("example.com/app/service.NameService")
        assert short is not None
        assert short == full
        assert short.is_interface

    def test_unknown_names(self, service_arch):
        """Missing types and malformed names yield None."""
        artifact = service_arch.artifact
        assert artifact.type("service.Missing") is None
        assert artifact.type("NameService") is None
        assert artifact.type("other.NameService") is None

    def test_ambiguous_short_name(self, go_project, load_project):
        """A short package name shared by two packages is ambiguous."""
        root = go_project(
            {
                "a/util/util.go": "package util\n\ntype T struct{}\n",
                "b/util/util.go": "package util\n\ntype T struct{}\n",
            }
        )
        artifact = load_project(root).artifact
        assert artifact.type("util.T") is None
        assert artifact.type("a/util.T") is not None
        assert artifact.type("example.com/app/b/util.T").package == "example.com/app/b/util"


class TestFiles:
    """Test file listing."""

    def test_go_files_sorted_by_package(self, layered_arch):
        """Files of all loaded packages, in package ID order."""
        assert [os.path.basename(f) for f in layered_arch.artifact.go_files()] == [
            "main.go",
            "user_controller.go",
            "user.go",
            "user_repository.go",
            "user_service.go",
        ]


class TestMethodSets:
    """Test method sets and interface satisfaction."""

    def test_promoted_methods(self, service_arch):
        """Embedded struct methods are promoted."""
        artifact = service_arch.artifact
        full = artifact.type("service.FullNameImpl")
        assert set(artifact.method_set(full)) == {"FirstNameI", "LastNameI"}

    def test_pointer_receivers_only_in_pointer_set(self, service_arch):
        """Pointer-receiver methods belong to *T only."""
        artifact = service_arch.artifact
        ptr = artifact.type("service.PtrImpl")
        assert artifact.method_set(ptr) == {}
        assert set(artifact.method_set(ptr, pointer=True)) == {"FirstNameI", "LastNameI"}

    def test_embedded_interface_methods(self, service_arch):
        """Interfaces include the methods of embedded interfaces."""
        artifact = service_arch.artifact
        named = artifact.type("service.Named")
        assert set(artifact.interface_methods(named)) == {"FirstNameI", "LastNameI", "Extra"}

    def test_implements(self, service_arch):
        """Satisfaction needs every method with an identical signature."""
        artifact = service_arch.artifact
        iface = artifact.type("service.NameService")

        def implements(name, pointer=False):
            return artifact.implements(artifact.type(f"service.{name}"), iface, pointer)

        assert implements("NameServiceImpl")
        assert implements("FullNameImpl")
        assert not implements("PtrImpl")
        assert implements("PtrImpl", pointer=True)
        assert not implements("PartialImpl")
        assert not implements("WrongSignature")

    def test_embeds(self, service_arch):
        """Embedding is found directly and through other embedded types."""
        artifact = service_arch.artifact
        impl = artifact.type("service.NameServiceImpl")
        assert artifact.embeds(artifact.type("service.FullNameImpl"), impl)
        assert not artifact.embeds(artifact.type("service.PtrImpl"), impl)


class TestUnusedPublicDeclarations:
    """Test detection of exported declarations nobody imports."""

    def test_unused_types_methods_and_functions(self, go_project, load_project):
        """Only declarations referenced from other packages count as used."""
        root = go_project(
            {
                "lib/lib.go": """
                package lib

                type Used struct{}

                type Unused struct{}

                func (u Used) Do() {}

                func (u Used) String() string { return "used" }

                func (u Used) Idle() {}

                func Exported() Used { return Used{} }

                func Orphan() {}
                """,
                "main.go": """
                package main

                import "example.com/app/lib"

                func main() {
                	var v lib.Used = lib.Exported()
                	v.Do()
                }
                """,
            }
        )
        artifact = load_project(root).artifact
        assert artifact.unused_public_declarations() == [
            "example.com/app/lib.Unused",
            "(example.com/app/lib.Used).Idle",
            "example.com/app/lib.Orphan",
        ]


class TestContextKeys:
    """Test context.WithValue key classification."""

    def test_builtin_and_exported_keys(self, go_project, load_project):
        """String and exported-type keys are reported; private types are not."""
        root = go_project(
            {
                "ctxkeys/keys.go": """
                package ctxkeys

                import "context"

                type key struct{}
                type PublicKey string

                var userKey = key{}

                func With(ctx context.Context, v string) context.Context {
                	ctx = context.WithValue(ctx, "user", v)
                	ctx = context.WithValue(ctx, PublicKey("x"), v)
                	ctx = context.WithValue(ctx, userKey, v)
                	return context.WithValue(ctx, key{}, v)
                }
                """
            }
        )
        artifact = load_project(root).artifact
        calls = artifact.context_keys_with_public_type()
        assert [(os.path.basename(c.file), c.line) for c in calls] == [
            ("keys.go", 11),
            ("keys.go", 12),
        ]
        assert [str(c.key) for c in calls] == ["string", "example.com/app/ctxkeys.PublicKey"]

    def test_uninferred_key_type_is_public(self, go_project, load_project):
        """A key whose type comes from an unparsed package is reported."""
        root = go_project(
            {
                "ctxkeys/keys.go": """
                package ctxkeys

                import (
                	"context"
                	"net/http"
                )

                func With(ctx context.Context) context.Context {
                	return context.WithValue(ctx, http.ServerContextKey, 1)
                }
                """
            }
        )
        calls = load_project(root).artifact.context_keys_with_public_type()
        assert [c.line for c in calls] == [9]


class TestImplementingSelection:
    """Test types_implementing over a service package."""

    def test_exact_implementors(self, go_project, load_project):
        """Both structs satisfying the interface are selected, nothing else."""
        root = go_project(
            {
                "service/name_service.go": """
                package service

                type NameService interface {
                	FirstNameI() string
                	LastNameI() string
                }

                type NameServiceImpl struct{}

                func (n NameServiceImpl) FirstNameI() string { return "first" }

                func (n NameServiceImpl) LastNameI() string { return "last" }

                type FullNameImpl struct{}

                func (f FullNameImpl) FirstNameI() string { return "full" }

                func (f FullNameImpl) LastNameI() string { return "name" }

                type Unrelated struct{}

                func (u Unrelated) FirstNameI() string { return "" }
                """
            }
        )
        arch = load_project(root)
        selection = arch.types_implementing("service.NameService")
        assert selection.error is None
        assert {t.name for t in selection} == {"NameServiceImpl", "FullNameImpl"}
