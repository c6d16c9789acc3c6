"""Global fixtures and utilities for the gotestcraft test suite.

Package views are assembled directly from gotypes model objects so that the
scaffold pipeline can be exercised without a Go toolchain or a parser.
"""

from pathlib import Path

import pytest

from gotestcraft.domain.edits import ImportFix, TextEdit
from gotestcraft.domain.gotypes import (
    ERROR_TYPE,
    Basic,
    Func,
    Named,
    Package,
    Pointer,
    Signature,
    Struct,
    Var,
)
from gotestcraft.domain.package_view import (
    DepInfo,
    FuncDecl,
    ImportSpec,
    PackageView,
    ParsedFile,
)

INT = Basic("int")
BOOL = Basic("bool")
STRING_T = Basic("string")

MATHX = Package("example.com/mathx", "mathx")
SUBJECT_PATH = Path("/work/mathx/add.go")
TEST_PATH = Path("/work/mathx/add_test.go")


# ================================================================================
# Builders
# ================================================================================


def func_decl(src: bytes, header: str, fn: Func, recv_type_name: str | None = None) -> FuncDecl:
    """Locate the declaration starting with header in src, ending at its closing brace."""
    start = src.index(header.encode())
    end = src.index(b"\n}", start) + 2
    return FuncDecl(
        name=fn.name, start=start, end=end, recv_type_name=recv_type_name, func=fn
    )


def parsed_file(
    path: Path,
    src: str,
    package_name: str,
    imports: list[ImportSpec] | None = None,
    decls: list[tuple[str, Func, str | None]] | None = None,
) -> ParsedFile:
    data = src.encode()
    return ParsedFile(
        path=path,
        src=data,
        package_name=package_name,
        package_start=data.find(b"package "),
        imports=imports or [],
        decls=[func_decl(data, header, fn, recv) for header, fn, recv in decls or []],
    )


def package_view(
    files: list[ParsedFile],
    funcs: list[Func],
    package: Package = MATHX,
    deps: dict[str, DepInfo] | None = None,
) -> PackageView:
    return PackageView(
        id=package.path,
        package=package,
        files=files,
        scope={fn.name: fn for fn in funcs if fn.signature.recv is None},
        deps_by_import_path=deps or {},
    )


# ================================================================================
# Fake ports
# ================================================================================


class FakePackagePort:
    def __init__(self, view: PackageView) -> None:
        self.view = view
        self.calls: list[Path] = []

    def package_for_file(self, path: Path) -> PackageView:
        self.calls.append(path)
        return self.view


class FakeFileReader:
    def __init__(self, files: dict[Path, bytes] | None = None) -> None:
        self.files = files or {}

    def read_file(self, path: Path) -> bytes:
        if path not in self.files:
            raise FileNotFoundError(path)
        return self.files[path]


class FakeGoParser:
    """Returns pre-built headers keyed by path."""

    def __init__(self, headers: dict[Path, ParsedFile] | None = None) -> None:
        self.headers = headers or {}

    def parse_header(self, path: Path, src: bytes) -> ParsedFile:
        return self.headers[path]


class FakeImportFixer:
    """Inserts one spec line per fix right after the package clause line."""

    def __init__(self) -> None:
        self.requests: list[list[ImportFix]] = []

    def compute_import_edits(self, src: bytes, fixes: list[ImportFix]) -> list[TextEdit]:
        self.requests.append(list(fixes))
        at = src.index(b"\n") + 1
        text = "".join(
            f'import {fix.name + " " if fix.name else ""}"{fix.path}"\n' for fix in fixes
        )
        return [TextEdit(start=at, end=at, new_text=text)]


# ================================================================================
# mathx fixtures
# ================================================================================

ADD_SRC = """package mathx

func Add(a, b int) (int, error) {
	return a + b, nil
}
"""

SET_SRC = """package mathx

type Set struct{ m map[int]bool }

func NewSet() *Set {
	return &Set{m: map[int]bool{}}
}

func (s *Set) Contains(x int) bool {
	return s.m[x]
}
"""


@pytest.fixture
def add_func():
    return Func(
        "Add",
        MATHX,
        Signature(
            params=(Var("a", INT), Var("b", INT)),
            results=(Var("", INT), Var("", ERROR_TYPE)),
        ),
    )


@pytest.fixture
def add_view(add_func):
    subject = parsed_file(SUBJECT_PATH, ADD_SRC, "mathx", decls=[("func Add", add_func, None)])
    return package_view([subject], [add_func])


@pytest.fixture
def set_type():
    return Named("Set", MATHX, underlying=Struct((Var("m", INT),)))


@pytest.fixture
def set_funcs(set_type):
    new_set = Func("NewSet", MATHX, Signature(results=(Var("", Pointer(set_type)),)))
    contains = Func(
        "Contains",
        MATHX,
        Signature(
            params=(Var("x", INT),),
            results=(Var("", BOOL),),
            recv=Var("s", Pointer(set_type)),
        ),
    )
    return new_set, contains


@pytest.fixture
def set_view(set_funcs):
    new_set, contains = set_funcs
    subject = parsed_file(
        SUBJECT_PATH,
        SET_SRC,
        "mathx",
        decls=[("func NewSet", new_set, None), ("func (s *Set) Contains", contains, "Set")],
    )
    return package_view([subject], [new_set, contains])
