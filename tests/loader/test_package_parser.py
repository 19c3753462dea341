"""Tests for loader/parser.py - Go sources to model packages."""

import os

import pytest

from goarchunit.exceptions import ParsingError

APP_GO = """
package app

import (
	"context"
	"errors"

	"example.com/app/model"
)

const (
	Limit = 10
	label = "app"
)

var (
	ErrMissing = errors.New("missing")
	counter    int
	current    = &model.User{}
	timeout    = Limit
)

type Handler func(ctx context.Context) error

type Alias = model.User

type Store interface {
	Get(ctx context.Context, key string) (string, error)
}

func Lookup(ctx context.Context, ids ...int) (*model.User, error) {
	counter++
	if len(ids) > 0 && label != "" {
		return current, nil
	}
	return nil, ErrMissing
}

func init() {}
"""

USER_GO = """
package model

type User struct {
	Name string
}

func (u User) String() string { return u.Name }

func (u *User) Rename(name string) { u.Name = name }
"""


@pytest.fixture
def app_arch(go_project, load_project):
    """A two-package module: the root package and model."""
    root = go_project({"app.go": APP_GO, "model/user.go": USER_GO})
    return load_project(root)


class TestDeclarations:
    """Test package-level declarations."""

    def test_package_identity(self, app_arch):
        """The root package is an application package named by its clause."""
        pkg = app_arch.artifact.package("example.com/app")
        assert pkg is not None
        assert pkg.name == "app"
        assert pkg.application
        assert not pkg.standard
        assert [os.path.basename(f) for f in pkg.go_files] == ["app.go"]

    def test_imports_from_declarations(self, app_arch):
        """Without go list, imports come from import declarations, sorted."""
        pkg = app_arch.artifact.package("example.com/app")
        assert pkg.imports == ("context", "errors", "example.com/app/model")

    def test_standard_library_stubs(self, app_arch):
        """Imported standard packages are present but not parsed."""
        context = app_arch.artifact.package("context")
        assert context is not None
        assert context.standard
        assert not context.application
        assert context.types == ()

    def test_constants(self, app_arch):
        """Constant types follow untyped defaults."""
        pkg = app_arch.artifact.package("example.com/app")
        assert [(c.name, str(c.type)) for c in pkg.constants] == [
            ("Limit", "int"),
            ("label", "string"),
        ]
        assert [os.path.basename(f) for f in pkg.constant_files()] == ["app.go"]

    def test_variable_types(self, app_arch):
        """Declared and inferred variable types print like go/types."""
        pkg = app_arch.artifact.package("example.com/app")
        assert [(v.name, str(v.type)) for v in pkg.variables] == [
            ("ErrMissing", "error"),
            ("counter", "int"),
            ("current", "*example.com/app/model.User"),
            ("timeout", "int"),
        ]

    def test_init_is_not_a_function(self, app_arch):
        """init functions are recorded per file, not as functions."""
        pkg = app_arch.artifact.package("example.com/app")
        assert [f.name for f in pkg.functions] == ["Lookup"]
        assert [os.path.basename(f) for f in pkg.init_function_files()] == ["app.go"]

    def test_function_signature(self, app_arch):
        """Parameters and results keep order, names and variadic marker."""
        fn = app_arch.artifact.package("example.com/app").function("Lookup")
        assert [(p.name, p.type_string) for p in fn.params] == [
            ("ctx", "context.Context"),
            ("ids", "[]int"),
        ]
        assert fn.variadic
        assert [r.type_string for r in fn.returns] == ["*example.com/app/model.User", "error"]
        assert fn.signature == "(context.Context, ...int) (*example.com/app/model.User, error)"
        assert fn.full_name == "example.com/app.Lookup"
        assert fn.context_param_index() == 0
        assert fn.error_return_index() == 1

    def test_type_kinds(self, app_arch):
        """Type declarations are classified by their underlying type."""
        pkg = app_arch.artifact.package("example.com/app")
        kinds = {t.name: t.kind for t in pkg.types}
        assert kinds == {"Handler": "func", "Alias": "alias", "Store": "interface"}
        store = pkg.type("Store")
        assert [m.name for m in store.methods] == ["Get"]
        assert store.methods[0].signature == "(context.Context, string) (string, error)"

    def test_methods_attach_to_receiver(self, app_arch):
        """Methods are recorded on their receiver type with pointer flag."""
        user = app_arch.artifact.type("model.User")
        assert user is not None
        assert [(m.name, m.pointer_receiver) for m in user.methods] == [
            ("String", False),
            ("Rename", True),
        ]
        assert user.methods[1].full_name == "(*example.com/app/model.User).Rename"

    def test_package_functions_exclude_methods(self, app_arch):
        """Methods are not package-level functions."""
        names = [f.name for f in app_arch.artifact.functions()]
        assert "String" not in names
        assert {m.name for m in app_arch.artifact.methods()} == {"String", "Rename"}


class TestUseSites:
    """Test reference collection."""

    def test_unused_variable_in_defining_file(self, app_arch):
        """Variables referenced only in their declaration are reported."""
        pkg = app_arch.artifact.package("example.com/app")
        assert [v.name for v in pkg.variables_not_used_in_defining_file()] == ["timeout"]

    def test_qualified_references(self, app_arch):
        """Selectors through imports name the imported object."""
        artifact = app_arch.artifact
        assert artifact.referenced_from_outside(
            "example.com/app/model.User", "example.com/app/model"
        )
        assert not artifact.referenced_from_outside("example.com/app.counter", "example.com/app")

    def test_local_bindings_are_not_uses(self, go_project, load_project):
        """Parameters, := names, range variables and local declarations shadow."""
        root = go_project(
            {
                "a.go": """
                package app

                var (
                	limit = 3
                	size  = 4
                	count = 5
                	total = 6
                	mode  = 7
                )

                func f(limit int) int { return limit }

                func g() int {
                	size := 1
                	for count := range []int{1, 2} {
                		size += count
                	}
                	var total = size
                	if mode := total; mode > 0 {
                		return mode
                	}
                	return total
                }
                """,
                "b.go": (
                    "package app\n\n"
                    "func h() int { return limit + size + count + total + mode + f(g()) }\n"
                ),
            }
        )
        pkg = load_project(root).artifact.package("example.com/app")
        assert {v.name for v in pkg.variables_not_used_in_defining_file()} == {
            "limit",
            "size",
            "count",
            "total",
            "mode",
        }

    def test_closures_see_package_variables(self, go_project, load_project):
        """A shadow in one function does not hide uses in another."""
        root = go_project(
            {
                "a.go": """
                package app

                var limit = 3

                func f(limit int) int { return limit }

                func g() func() int {
                	return func() int { return limit }
                }
                """
            }
        )
        pkg = load_project(root).artifact.package("example.com/app")
        assert pkg.variables_not_used_in_defining_file() == []

    def test_external_test_package_counts_as_outside(self, go_project, load_project):
        """References from package lib_test are external to lib."""
        root = go_project(
            {
                "lib/lib.go": """
                package lib

                func Helper() int { return 1 }
                """,
                "lib/lib_test.go": """
                package lib_test

                import (
                	"testing"

                	"example.com/app/lib"
                )

                func TestHelper(t *testing.T) {
                	if lib.Helper() != 1 {
                		t.Fail()
                	}
                }
                """,
            }
        )
        arch = load_project(root)
        assert arch.artifact.referenced_from_outside(
            "example.com/app/lib.Helper", "example.com/app/lib"
        )
        assert arch.artifact.unused_public_declarations() == []


class TestSyntaxErrors:
    """Test parse error handling."""

    def test_broken_file_is_recorded(self, go_project, load_project):
        """A syntax error is recorded and the rest of the project loads."""
        root = go_project(
            {
                "ok/ok.go": "package ok\n\nfunc Fine() {}\n",
                "broken/broken.go": "package broken\n\nfunc Broken( {\n",
            }
        )
        arch = load_project(root)
        assert arch.artifact.package("example.com/app/ok").function("Fine") is not None
        errors = arch.artifact.parse_errors
        assert len(errors) == 1
        assert isinstance(errors[0], ParsingError)
        assert str(errors[0].filepath).endswith("broken.go")
        assert errors[0].reason == "syntax error"


class TestDeclarationOrder:
    """Test declaration order issues."""

    def _issues(self, go_project, load_project, source):
        arch = load_project(go_project({"a/a.go": source}))
        return [(i.line, i.description) for i in arch.artifact.unordered_declarations()]

    def test_ordered_file(self, go_project, load_project):
        """Imports, one const block, one var block, then functions."""
        source = """
        package a

        import "fmt"

        const (
        	X = 1
        	Y = 2
        )

        var (
        	z = 3
        	w = 4
        )

        func F() { fmt.Println(X, Y, z, w) }
        """
        assert self._issues(go_project, load_project, source) == []

    def test_const_after_var(self, go_project, load_project):
        """A const block after a var block is reported."""
        source = """
        package a

        var v = 1

        const c = 2
        """
        assert self._issues(go_project, load_project, source) == [
            (5, "const declaration should come before var, type and func declarations")
        ]

    def test_var_after_func(self, go_project, load_project):
        """A var after a function is reported."""
        source = """
        package a

        func F() {}

        var v = 1
        """
        assert self._issues(go_project, load_project, source) == [
            (5, "var declaration should come before type and func declarations")
        ]

    def test_multiple_const_blocks(self, go_project, load_project):
        """Two const declarations must be merged."""
        source = """
        package a

        const a = 1
        const b = 2
        """
        assert self._issues(go_project, load_project, source) == [
            (4, "multiple const declarations should be grouped into a single block")
        ]

    def test_single_parenthesized_var(self, go_project, load_project):
        """A lone var must not use a block."""
        source = """
        package a

        var (
        	v = 1
        )
        """
        assert self._issues(go_project, load_project, source) == [
            (3, "single var declaration should not be in a parenthesized block")
        ]

    def test_only_first_issue_per_file(self, go_project, load_project):
        """Scanning stops at the first problem of a file."""
        source = """
        package a

        const a = 1
        const b = 2
        const c = 3
        """
        assert len(self._issues(go_project, load_project, source)) == 1

    def test_embed_directive_exempts_declaration(self, go_project, load_project):
        """Declarations annotated with go:embed are skipped."""
        source = """
        package a

        import _ "embed"

        var x = 1

        //go:embed data.txt
        var data string
        """
        assert self._issues(go_project, load_project, source) == []


class TestTestFileReferences:
    """Test files referenced from tests."""

    def test_read_file_literal(self, go_project, load_project):
        """os.ReadFile with an existing relative path is recorded."""
        root = go_project(
            {
                "svc/svc.go": "package svc\n",
                "svc/input.txt": "data\n",
                "svc/svc_test.go": """
                package svc

                import (
                	"os"
                	"path/filepath"
                	"testing"
                )

                func TestRead(t *testing.T) {
                	_, _ = os.ReadFile("input.txt")
                	_, _ = os.Open(filepath.Join("testdata", "missing.txt"))
                	_, _ = os.ReadFile("svc.go")
                }
                """,
            }
        )
        arch = load_project(root)
        refs = arch.artifact.files_referenced_by_tests()
        assert len(refs) == 1
        pkg, ref = refs[0]
        assert pkg.id == "example.com/app/svc"
        assert ref.path == os.path.join(str(root.resolve()), "svc", "input.txt")
        assert ref.referrer.endswith("svc_test.go")

    def test_embed_directive(self, go_project, load_project):
        """go:embed targets in tests are recorded, directories expanded."""
        root = go_project(
            {
                "svc/svc.go": "package svc\n",
                "svc/testdata/golden/one.json": "{}\n",
                "svc/svc_test.go": """
                package svc

                import "embed"

                //go:embed testdata/golden
                var golden embed.FS
                """,
            }
        )
        arch = load_project(root)
        paths = [ref.path for _, ref in arch.artifact.files_referenced_by_tests()]
        assert paths == [
            os.path.join(str(root.resolve()), "svc", "testdata", "golden", "one.json")
        ]
