"""
Package Port interface definitions.

These ports expose already-parsed, already-typed Go source to the scaffold
pipeline. Implementations may cache freely; callers never mutate the
returned views.
"""

from pathlib import Path

from typing_extensions import Protocol

from ..domain.package_view import PackageView, ParsedFile


class PackageViewPort(Protocol):
    """Interface for retrieving the type-checked package of a source file."""

    def package_for_file(self, path: Path) -> PackageView:
        """
        Return the narrowest package containing the given file.

        Args:
            path: Path to a Go source file

        Returns:
            PackageView with syntax, type information and dependency graph

        Raises:
            InvalidTarget: If no package can be loaded for the file
        """
        ...


class GoParserPort(Protocol):
    """Interface for parsing a single Go file's header and declarations."""

    def parse_header(self, path: Path, src: bytes) -> ParsedFile:
        """
        Parse the package clause, imports and top-level declarations.

        Args:
            path: Path of the file being parsed
            src: File contents

        Returns:
            ParsedFile; package_name is None when the clause is missing
        """
        ...
