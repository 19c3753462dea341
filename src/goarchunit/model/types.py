"""Structural type references for Go declarations.

A TypeRef is what the parser knows about the type of a parameter, result,
variable or constant. Named types are identified by package path and name so
entities never point at each other directly. ``str(ref)`` follows the
formatting of Go's ``types.Type.String()``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..patterns import is_exported

BASIC_TYPES = frozenset(
    {
        "bool",
        "string",
        "int",
        "int8",
        "int16",
        "int32",
        "int64",
        "uint",
        "uint8",
        "uint16",
        "uint32",
        "uint64",
        "uintptr",
        "byte",
        "rune",
        "float32",
        "float64",
        "complex64",
        "complex128",
    }
)

# Predeclared named types; they live in the universe scope (no package).
UNIVERSE_NAMED = frozenset({"error", "comparable"})

KINDS = (
    "basic",
    "named",
    "pointer",
    "slice",
    "array",
    "map",
    "chan",
    "func",
    "struct",
    "interface",
    "param",
    "unknown",
    # deferred kinds, resolved against the artifact after loading
    "ref",
    "call",
)


@dataclass(frozen=True)
class TypeRef:
    kind: str
    name: str = ""
    package: str = ""
    elem: Optional[TypeRef] = None
    key: Optional[TypeRef] = None
    length: str = ""
    params: tuple[TypeRef, ...] = ()
    results: tuple[TypeRef, ...] = ()
    variadic: bool = False
    direction: str = ""
    args: tuple[TypeRef, ...] = ()
    text: str = ""

    def __str__(self) -> str:
        kind = self.kind
        if kind == "basic" or kind == "param":
            return self.name
        if kind == "named":
            base = f"{self.package}.{self.name}" if self.package else self.name
            if self.args:
                base += "[" + ", ".join(str(a) for a in self.args) + "]"
            return base
        if kind == "pointer":
            return f"*{self.elem}"
        if kind == "slice":
            return f"[]{self.elem}"
        if kind == "array":
            return f"[{self.length}]{self.elem}"
        if kind == "map":
            return f"map[{self.key}]{self.elem}"
        if kind == "chan":
            if self.direction == "recv":
                return f"<-chan {self.elem}"
            if self.direction == "send":
                return f"chan<- {self.elem}"
            return f"chan {self.elem}"
        if kind == "func":
            return "func" + signature_string(self.params, self.results, self.variadic)
        if kind in ("struct", "interface"):
            return self.text
        return "invalid type"

    @property
    def is_named(self) -> bool:
        return self.kind == "named"

    @property
    def is_known(self) -> bool:
        return self.kind not in ("unknown", "ref", "call")

    @property
    def is_builtin(self) -> bool:
        """True for basic types and predeclared named types such as error."""
        return self.kind == "basic" or (self.kind == "named" and not self.package)

    @property
    def exported(self) -> bool:
        return self.kind == "named" and bool(self.package) and is_exported(self.name)

    @property
    def qualified_name(self) -> str:
        """package/path.Name for named types, without type arguments."""
        if self.kind != "named":
            return ""
        return f"{self.package}.{self.name}" if self.package else self.name

    def deref(self) -> TypeRef:
        if self.kind == "pointer" and self.elem is not None:
            return self.elem
        return self


def signature_string(
    params: tuple[TypeRef, ...], results: tuple[TypeRef, ...], variadic: bool = False
) -> str:
    """Render ``(params) results`` without parameter names."""
    rendered = [str(p) for p in params]
    if variadic and rendered:
        last = params[-1]
        rendered[-1] = "..." + str(last.elem if last.kind == "slice" else last)
    out = "(" + ", ".join(rendered) + ")"
    if len(results) == 1:
        out += " " + str(results[0])
    elif results:
        out += " (" + ", ".join(str(r) for r in results) + ")"
    return out


def basic(name: str) -> TypeRef:
    return TypeRef(kind="basic", name=name)


def named(package: str, name: str, args: tuple[TypeRef, ...] = ()) -> TypeRef:
    return TypeRef(kind="named", package=package, name=name, args=args)


def pointer(elem: TypeRef) -> TypeRef:
    return TypeRef(kind="pointer", elem=elem)


def slice_of(elem: TypeRef) -> TypeRef:
    return TypeRef(kind="slice", elem=elem)


UNKNOWN = TypeRef(kind="unknown")
ERROR = named("", "error")
ANY = TypeRef(kind="interface", text="any")
EMPTY_INTERFACE = TypeRef(kind="interface", text="interface{}")
CONTEXT = named("context", "Context")

UNTYPED_DEFAULTS = {
    "int_literal": "int",
    "float_literal": "float64",
    "imaginary_literal": "complex128",
    "rune_literal": "rune",
    "interpreted_string_literal": "string",
    "raw_string_literal": "string",
    "true": "bool",
    "false": "bool",
}


@dataclass(frozen=True)
class MethodSig:
    """A method as seen by interface satisfaction: its name and signature."""

    name: str
    signature: str


def _sig(name: str, params: tuple[TypeRef, ...], results: tuple[TypeRef, ...]) -> MethodSig:
    return MethodSig(name, signature_string(params, results))


_BYTES = slice_of(basic("byte"))
_INT = basic("int")

# Interfaces from the standard library whose implementations are used
# implicitly (fmt, io, encoding/json, net/http, sort).
WELL_KNOWN_INTERFACES: dict[str, frozenset[MethodSig]] = {
    "error": frozenset({_sig("Error", (), (basic("string"),))}),
    "fmt.Stringer": frozenset({_sig("String", (), (basic("string"),))}),
    "fmt.GoStringer": frozenset({_sig("GoString", (), (basic("string"),))}),
    "io.Reader": frozenset({_sig("Read", (_BYTES,), (_INT, ERROR))}),
    "io.Writer": frozenset({_sig("Write", (_BYTES,), (_INT, ERROR))}),
    "io.Closer": frozenset({_sig("Close", (), (ERROR,))}),
    "encoding/json.Marshaler": frozenset({_sig("MarshalJSON", (), (_BYTES, ERROR))}),
    "encoding/json.Unmarshaler": frozenset({_sig("UnmarshalJSON", (_BYTES,), (ERROR,))}),
    "encoding.TextMarshaler": frozenset({_sig("MarshalText", (), (_BYTES, ERROR))}),
    "encoding.TextUnmarshaler": frozenset({_sig("UnmarshalText", (_BYTES,), (ERROR,))}),
    "net/http.Handler": frozenset(
        {
            _sig(
                "ServeHTTP",
                (named("net/http", "ResponseWriter"), pointer(named("net/http", "Request"))),
                (),
            )
        }
    ),
    "sort.Interface": frozenset(
        {
            _sig("Len", (), (_INT,)),
            _sig("Less", (_INT, _INT), (basic("bool"),)),
            _sig("Swap", (_INT, _INT), ()),
        }
    ),
}
