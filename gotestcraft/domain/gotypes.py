"""
Resolved Go type model.

A small, immutable mirror of the parts of ``go/types`` that scaffold
generation needs: packages, named/alias types, composite types, function
signatures and package-level function objects. Printing goes through a
qualifier callback so that the same type can be rendered differently
depending on the destination file's imports.
"""

from __future__ import annotations

import unicodedata
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Union

Qualifier = Callable[["Package"], str]

NUMERIC_KINDS = frozenset(
    {
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
        "float32",
        "float64",
        "complex64",
        "complex128",
        "byte",
        "rune",
    }
)


@dataclass(frozen=True)
class Package:
    """A Go package identified by import path, with its declared name."""

    path: str
    name: str


@dataclass(frozen=True)
class Basic:
    name: str


@dataclass(frozen=True)
class Named:
    """
    A defined type.

    ``package`` is None for universe types such as ``error``. The underlying
    type is informational (used for zero values) and is not part of identity.
    """

    name: str
    package: Package | None = None
    type_args: tuple[GoType, ...] = ()
    underlying: GoType | None = field(default=None, compare=False, repr=False)

    @property
    def exported(self) -> bool:
        return is_exported(self.name)


@dataclass(frozen=True)
class Alias:
    name: str
    package: Package | None
    target: GoType


@dataclass(frozen=True)
class Pointer:
    elem: GoType


@dataclass(frozen=True)
class Slice:
    elem: GoType


@dataclass(frozen=True)
class Array:
    length: str
    elem: GoType


@dataclass(frozen=True)
class Map:
    key: GoType
    value: GoType


@dataclass(frozen=True)
class Chan:
    elem: GoType
    direction: str = "both"  # "both", "send" or "recv"


@dataclass(frozen=True)
class Var:
    """A parameter, result, receiver or struct field."""

    name: str
    type: GoType
    embedded: bool = False


@dataclass(frozen=True)
class Signature:
    params: tuple[Var, ...] = ()
    results: tuple[Var, ...] = ()
    variadic: bool = False
    recv: Var | None = None


@dataclass(frozen=True)
class Struct:
    fields: tuple[Var, ...] = ()


@dataclass(frozen=True)
class Interface:
    methods: tuple[tuple[str, Signature], ...] = ()
    embeddeds: tuple[GoType, ...] = ()


@dataclass(frozen=True)
class TypeParam:
    name: str


GoType = Union[
    Basic,
    Named,
    Alias,
    Pointer,
    Slice,
    Array,
    Map,
    Chan,
    Signature,
    Struct,
    Interface,
    TypeParam,
]


@dataclass(frozen=True)
class Func:
    """A package-level function or method object."""

    name: str
    package: Package
    signature: Signature

    @property
    def exported(self) -> bool:
        return is_exported(self.name)


# Universe scope.
STRING = Basic("string")
ERROR_TYPE = Named(
    "error",
    None,
    underlying=Interface(methods=(("Error", Signature(results=(Var("", STRING),))),)),
)
ANY = Alias("any", None, Interface())

TESTING_PACKAGE = Package("testing", "testing")
CONTEXT_PACKAGE = Package("context", "context")


def is_exported(name: str) -> bool:
    """Report whether name starts with an upper-case letter."""
    return bool(name) and unicodedata.category(name[0]) == "Lu"


def unalias(t: GoType) -> GoType:
    while isinstance(t, Alias):
        t = t.target
    return t


def underlying(t: GoType) -> GoType | None:
    """Return the underlying type, or None when it is not known."""
    t = unalias(t)
    if isinstance(t, Named):
        if t.underlying is None:
            return None
        return underlying(t.underlying)
    return t


def receiver_named(var: Var) -> tuple[bool, Named | None]:
    """
    Strip at most one pointer from var's type and return the named type.

    Returns (is_ptr, named); named is None when the type is not a defined
    type after unaliasing.
    """
    t = var.type
    is_ptr = False
    if isinstance(t, Pointer):
        t = t.elem
        is_ptr = True
    t = unalias(t)
    if isinstance(t, Named):
        return is_ptr, t
    return is_ptr, None


def is_context_type(t: GoType) -> bool:
    return (
        isinstance(t, Named)
        and t.package is not None
        and t.package.path == CONTEXT_PACKAGE.path
        and t.name == "Context"
    )


def identical(a: GoType, b: GoType) -> bool:
    """Report whether two types are identical, ignoring parameter names."""
    a, b = unalias(a), unalias(b)
    if type(a) is not type(b):
        return False
    if isinstance(a, Named):
        pa = a.package.path if a.package else None
        pb = b.package.path if b.package else None
        return (
            a.name == b.name
            and pa == pb
            and len(a.type_args) == len(b.type_args)
            and all(identical(x, y) for x, y in zip(a.type_args, b.type_args))
        )
    if isinstance(a, (Pointer, Slice)):
        return identical(a.elem, b.elem)
    if isinstance(a, Array):
        return a.length == b.length and identical(a.elem, b.elem)
    if isinstance(a, Map):
        return identical(a.key, b.key) and identical(a.value, b.value)
    if isinstance(a, Chan):
        return a.direction == b.direction and identical(a.elem, b.elem)
    if isinstance(a, Signature):
        return (
            a.variadic == b.variadic
            and _identical_vars(a.params, b.params, names=False)
            and _identical_vars(a.results, b.results, names=False)
        )
    if isinstance(a, Struct):
        return _identical_vars(a.fields, b.fields, names=True)
    if isinstance(a, Interface):
        if len(a.methods) != len(b.methods) or len(a.embeddeds) != len(b.embeddeds):
            return False
        return all(
            ma[0] == mb[0] and identical(ma[1], mb[1])
            for ma, mb in zip(sorted(a.methods, key=_first), sorted(b.methods, key=_first))
        ) and all(identical(x, y) for x, y in zip(a.embeddeds, b.embeddeds))
    return a == b


def _first(item: tuple[str, Signature]) -> str:
    return item[0]


def _identical_vars(xs: tuple[Var, ...], ys: tuple[Var, ...], names: bool) -> bool:
    if len(xs) != len(ys):
        return False
    for x, y in zip(xs, ys):
        if names and (x.name != y.name or x.embedded != y.embedded):
            return False
        if not identical(x.type, y.type):
            return False
    return True


def type_string(t: GoType, qf: Qualifier | None = None) -> str:
    """Render t as Go source, qualifying package-level names with qf."""
    if isinstance(t, Basic):
        return t.name
    if isinstance(t, (Named, Alias)):
        name = _qualified(t.name, t.package, qf)
        if isinstance(t, Named) and t.type_args:
            name += "[" + ", ".join(type_string(a, qf) for a in t.type_args) + "]"
        return name
    if isinstance(t, TypeParam):
        return t.name
    if isinstance(t, Pointer):
        return "*" + type_string(t.elem, qf)
    if isinstance(t, Slice):
        return "[]" + type_string(t.elem, qf)
    if isinstance(t, Array):
        return f"[{t.length}]" + type_string(t.elem, qf)
    if isinstance(t, Map):
        return f"map[{type_string(t.key, qf)}]{type_string(t.value, qf)}"
    if isinstance(t, Chan):
        prefix = {"send": "chan<- ", "recv": "<-chan "}.get(t.direction, "chan ")
        elem = type_string(t.elem, qf)
        # chan (<-chan T) needs parentheses to stay unambiguous.
        if t.direction == "both" and isinstance(t.elem, Chan) and t.elem.direction == "recv":
            elem = f"({elem})"
        return prefix + elem
    if isinstance(t, Signature):
        return "func" + signature_string(t, qf)
    if isinstance(t, Struct):
        parts = []
        for f in t.fields:
            if f.embedded:
                parts.append(type_string(f.type, qf))
            else:
                parts.append(f"{f.name} {type_string(f.type, qf)}")
        return "struct{" + "; ".join(parts) + "}"
    if isinstance(t, Interface):
        parts = [type_string(e, qf) for e in t.embeddeds]
        parts.extend(name + signature_string(sig, qf) for name, sig in t.methods)
        return "interface{" + "; ".join(parts) + "}"
    raise TypeError(f"unsupported Go type: {t!r}")


def signature_string(sig: Signature, qf: Qualifier | None = None) -> str:
    """Render the parameter and result lists of sig (without "func")."""
    params = _tuple_string(sig.params, sig.variadic, qf)
    if not sig.results:
        return params
    if len(sig.results) == 1 and not sig.results[0].name:
        return f"{params} {type_string(sig.results[0].type, qf)}"
    return f"{params} {_tuple_string(sig.results, False, qf)}"


def _tuple_string(vars_: tuple[Var, ...], variadic: bool, qf: Qualifier | None) -> str:
    parts = []
    for i, v in enumerate(vars_):
        t = v.type
        if variadic and i == len(vars_) - 1 and isinstance(t, Slice):
            typ = "..." + type_string(t.elem, qf)
        else:
            typ = type_string(t, qf)
        parts.append(f"{v.name} {typ}" if v.name else typ)
    return "(" + ", ".join(parts) + ")"


def _qualified(name: str, pkg: Package | None, qf: Qualifier | None) -> str:
    if pkg is None:
        return name
    prefix = qf(pkg) if qf is not None else pkg.path
    return f"{prefix}.{name}" if prefix else name


def zero_string(t: GoType, qf: Qualifier | None = None) -> str:
    """Return a Go expression for the zero value of t."""
    if isinstance(t, Basic):
        if t.name == "bool":
            return "false"
        if t.name in NUMERIC_KINDS:
            return "0"
        if t.name == "string":
            return '""'
        return "nil"
    if isinstance(t, (Pointer, Slice, Chan, Map, Signature, Interface)):
        return "nil"
    if isinstance(t, (Array, Struct)):
        return type_string(t, qf) + "{}"
    if isinstance(t, TypeParam):
        return f"*new({type_string(t, qf)})"
    # Named or alias: decided by the underlying type.
    under = underlying(t)
    if under is None:
        return f"*new({type_string(t, qf)})"
    if isinstance(under, (Struct, Array)):
        return type_string(t, qf) + "{}"
    return zero_string(under, qf)
