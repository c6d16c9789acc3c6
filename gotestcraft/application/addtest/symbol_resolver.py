"""
Symbol resolver service for locating the function under test.

Resolves a file position to its enclosing top-level function or method
declaration, using the type-checked package provided by PackageViewPort,
and validates that a test can be generated for it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from ...domain.errors import (
    InvalidTarget,
    NoEnclosingFunction,
    ResolutionError,
    UnexportedTarget,
)
from ...domain.gotypes import Alias, Func, Named, Pointer, is_exported
from ...domain.package_view import FuncDecl, PackageView, ParsedFile
from ...ports.package_port import PackageViewPort

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedTarget:
    """The declaration selected for test generation."""

    decl: FuncDecl
    func: Func


class SymbolResolver:
    """
    Service for resolving the function or method enclosing a position.

    Fails early on packages that cannot be trusted to produce compiling
    code: packages with parse or type errors and synthetic packages.
    """

    def __init__(self, package_port: PackageViewPort) -> None:
        """
        Initialize the symbol resolver.

        Args:
            package_port: Port providing type-checked package views
        """
        self._packages = package_port

    def load(self, path: Path) -> tuple[PackageView, ParsedFile]:
        """
        Load and validate the package containing path.

        Returns:
            The package view and the parsed subject file

        Raises:
            InvalidTarget: If the package is synthetic, has errors or does
                not contain the file
        """
        view = self._packages.package_for_file(path)

        if view.is_command_line_arguments:
            raise InvalidTarget("current file in command-line-arguments package")
        if view.parse_errors:
            raise InvalidTarget(f"package has parse errors: {view.parse_errors[0]}")
        if view.type_errors:
            raise InvalidTarget(f"package has type errors: {view.type_errors[0]}")

        file = view.file_for(path)
        if file is None:
            raise InvalidTarget(f"{path} does not belong to package {view.package.path}")

        logger.debug("Loaded package %s for %s", view.package.path, path)
        return view, file

    def find_declaration(self, file: ParsedFile, start: int, end: int) -> ResolvedTarget:
        """
        Find the top-level function declaration enclosing [start, end).

        Raises:
            NoEnclosingFunction: If no declaration encloses the range
            ResolutionError: If the declaration has no type information
        """
        if start > end:
            start, end = end, start
        for decl in file.decls:
            if decl.start <= start and end <= decl.end:
                if decl.func is None:
                    raise ResolutionError(f"no type information for {decl.name}")
                return ResolvedTarget(decl=decl, func=decl.func)
        raise NoEnclosingFunction("no enclosing function")

    def check_visibility(self, target: ResolvedTarget, package_name: str) -> None:
        """
        Reject targets an external ``<package_name>_test`` package cannot see.

        Raises:
            UnexportedTarget: If the function or its receiver type is unexported
        """
        decl, fn = target.decl, target.func
        if not fn.exported:
            raise UnexportedTarget(
                f"cannot add test of unexported function {decl.name} "
                f"to external test package {package_name}_test"
            )
        if fn.signature.recv is not None and not is_exported(decl.recv_type_name or ""):
            raise UnexportedTarget(
                f"cannot add external test for method {decl.recv_type_name}.{decl.name} "
                "as receiver type is not exported"
            )


def receiver_type_of(fn: Func) -> Named | Alias:
    """
    Return the receiver's type with one pointer removed, preserving aliases.

    Raises:
        ResolutionError: If the receiver is neither a named nor an alias type
    """
    recv = fn.signature.recv
    if recv is None:
        raise ResolutionError(f"{fn.name} is not a method")
    t = recv.type
    if isinstance(t, Pointer):
        t = t.elem
    if not isinstance(t, (Named, Alias)):
        raise ResolutionError("the receiver type is neither named type nor alias type")
    return t


def derive_test_name(fn: Func) -> str:
    """
    Return the name of the test function for fn.

    Methods produce Test[_]Type_Method and functions Test[_]Func, where the
    underscore marks an unexported receiver type or function.
    """
    name = "Test"
    if fn.signature.recv is not None:
        # Based on the topmost alias or named type, never an alias' target.
        t = receiver_type_of(fn)
        if not is_exported(t.name):
            name += "_"
        name += t.name + "_"
    elif not fn.exported:
        name += "_"
    return name + fn.name


def fresh_test_name(name: str, taken: set[str]) -> str:
    """Return name, or name with the smallest numeric suffix not in taken."""
    if name not in taken:
        return name
    n = 2
    while f"{name}{n}" in taken:
        n += 1
    return f"{name}{n}"
