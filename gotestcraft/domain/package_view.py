"""
Read-only view of a parsed and type-checked Go package.

These structures describe what the package loader collaborator hands to the
scaffold pipeline. Offsets are byte offsets into the file's source.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from .gotypes import Func, Package

COMMAND_LINE_ARGUMENTS = "command-line-arguments"


@dataclass(frozen=True)
class ImportSpec:
    """One import; ``name`` is None when the import is not renamed."""

    path: str
    name: str | None = None


@dataclass(frozen=True)
class CommentGroup:
    start: int
    end: int
    texts: tuple[str, ...]


@dataclass(frozen=True)
class FuncDecl:
    """
    A top-level function or method declaration.

    ``func`` is the type-checked object defined by the declaration's name, or
    None when the declaration could not be typed.
    """

    name: str
    start: int
    end: int
    recv_type_name: str | None = None
    func: Func | None = None


@dataclass
class ParsedFile:
    path: Path
    src: bytes
    package_name: str | None
    package_start: int = -1
    doc: CommentGroup | None = None
    comments: list[CommentGroup] = field(default_factory=list)
    imports: list[ImportSpec] = field(default_factory=list)
    decls: list[FuncDecl] = field(default_factory=list)
    parse_errors: list[str] = field(default_factory=list)

    @property
    def file_end(self) -> int:
        return len(self.src)

    @property
    def func_names(self) -> set[str]:
        """Names of top-level non-method functions declared in the file."""
        return {d.name for d in self.decls if d.recv_type_name is None}


@dataclass
class PackageView:
    """
    A type-checked package.

    ``scope`` maps package-level names to function objects (methods are not
    in scope). ``deps_by_import_path`` maps each import path used by the
    package to the resolved package id and name.
    """

    id: str
    package: Package
    files: list[ParsedFile] = field(default_factory=list)
    parse_errors: list[str] = field(default_factory=list)
    type_errors: list[str] = field(default_factory=list)
    scope: dict[str, Func] = field(default_factory=dict)
    deps_by_import_path: dict[str, DepInfo] = field(default_factory=dict)

    @property
    def is_command_line_arguments(self) -> bool:
        return self.id == COMMAND_LINE_ARGUMENTS

    def file_for(self, path: Path) -> ParsedFile | None:
        target = Path(path).resolve()
        for pf in self.files:
            if Path(pf.path).resolve() == target:
                return pf
        return None


@dataclass(frozen=True)
class DepInfo:
    """A dependency resolved from an import path."""

    id: str
    name: str


def import_path_to_assumed_name(import_path: str) -> str:
    """
    Guess the package name of an import path.

    Uses the last path element, skipping a trailing major-version element
    (".../v2"), dropping a "go-" prefix and cutting at the first character
    that cannot appear in an identifier.
    """
    parts = import_path.rstrip("/").split("/")
    base = parts[-1]
    if base.startswith("v") and base[1:].isdigit() and len(parts) > 1:
        base = parts[-2]
    base = base.removeprefix("go-")
    for i, ch in enumerate(base):
        if not (ch.isalnum() or ch == "_"):
            return base[:i]
    return base
