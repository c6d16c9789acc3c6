"""
Edit assembly for the destination test file.

Decides whether the companion ``_test.go`` file must be created or extended,
computes the header and import edits and appends the rendered scaffold at
the end of the file.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from ...domain.edits import DocumentChange, ImportFix, TextEdit
from ...domain.errors import PackageMismatch
from ...domain.models import ImportInfo
from ...domain.package_view import PackageView, ParsedFile
from ...ports.file_port import FileReaderPort
from ...ports.import_fix_port import ImportFixPort
from ...ports.package_port import GoParserPort
from .qualifier import collect_imports

logger = logging.getLogger(__name__)

_DIRECTIVE_RE = re.compile(r"^//[a-z0-9]+:[a-z0-9]")
_DIRECTIVE_PREFIXES = ("//line ", "//export ", "//extern ", "//sys ", "//sysnb ")


def is_directive(comment: str) -> bool:
    """Report whether a // comment is a compiler or tool directive."""
    return comment.startswith(_DIRECTIVE_PREFIXES) or bool(_DIRECTIVE_RE.match(comment))


def copyright_header(file: ParsedFile) -> str:
    """
    Return the subject file's copyright comment, or "" when it has none.

    Only the first comment group qualifies, and only when it precedes the
    package clause, is not the package doc comment, does not start with a
    directive and mentions "copyright".
    """
    if not file.comments:
        return ""
    group = file.comments[0]
    if file.package_start >= 0 and group.start >= file.package_start:
        return ""
    if file.doc is not None and group.start == file.doc.start:
        return ""
    if not group.texts or is_directive(group.texts[0]):
        return ""
    if "copyright" not in group.texts[0].lower():
        return ""
    return file.src[group.start : group.end].decode("utf-8", errors="replace")


@dataclass
class Destination:
    """
    The companion test file of a subject file.

    ``parsed`` is None when the file does not exist yet. ``xtest`` records
    whether the generated code lives in the external ``<pkg>_test`` package.
    """

    path: Path
    parsed: ParsedFile | None
    xtest: bool = True
    imports: dict[str, ImportInfo] = field(default_factory=dict)

    @property
    def exists(self) -> bool:
        return self.parsed is not None

    @property
    def eof(self) -> int:
        return self.parsed.file_end if self.parsed is not None else 0

    @property
    def declared_funcs(self) -> set[str]:
        return self.parsed.func_names if self.parsed is not None else set()


class EditAssembler:
    """Turn a rendered scaffold into the ordered change set for the test file."""

    def __init__(
        self,
        file_reader: FileReaderPort,
        parser: GoParserPort,
        import_fixer: ImportFixPort,
        test_file_suffix: str = "_test.go",
    ) -> None:
        self._reader = file_reader
        self._parser = parser
        self._import_fixer = import_fixer
        self._suffix = test_file_suffix

    def test_path_for(self, subject: Path) -> Path:
        base = subject.name.removesuffix(".go")
        return subject.with_name(base + self._suffix)

    def destination_for(self, subject: ParsedFile, view: PackageView) -> Destination:
        """
        Inspect the companion test file of subject.

        Raises:
            PackageMismatch: If the existing test file declares another package
        """
        path = self.test_path_for(Path(subject.path))
        try:
            src = self._reader.read_file(path)
        except FileNotFoundError:
            logger.debug("Test file %s does not exist; it will be created", path)
            return Destination(path=path, parsed=None, xtest=True)

        parsed = self._parser.parse_header(path, src)
        if not parsed.package_name:
            raise PackageMismatch(f"missing package declaration in test file {path}")

        if parsed.package_name == subject.package_name:
            xtest = False
        elif parsed.package_name == f"{subject.package_name}_test":
            xtest = True
        else:
            raise PackageMismatch(
                f"invalid package declaration {parsed.package_name!r} in test file {path}"
            )

        return Destination(
            path=path,
            parsed=parsed,
            xtest=xtest,
            imports=collect_imports(parsed, view),
        )

    def assemble(
        self,
        destination: Destination,
        subject: ParsedFile,
        extra_imports: dict[str, ImportInfo],
        scaffold: str,
    ) -> list[DocumentChange]:
        """
        Build the ordered change set.

        A new file gets a create change followed by one edit change holding
        the header, the import block and the scaffold. An existing file gets
        one edit change holding the import edits and the scaffold appended at
        end of file.
        """
        changes: list[DocumentChange] = []
        edits: list[TextEdit] = []

        if destination.parsed is None:
            changes.append(DocumentChange.create(destination.path))
            edits.append(TextEdit(new_text=self.new_file_header(subject)))
            if extra_imports:
                edits.append(TextEdit(new_text=import_block(extra_imports)))
        else:
            fixes = [
                ImportFix(path=path, name=info.name if info.renamed else "")
                for path, info in sorted(extra_imports.items())
            ]
            if fixes:
                edits.extend(
                    self._import_fixer.compute_import_edits(destination.parsed.src, fixes)
                )

        eof = destination.eof
        edits.append(TextEdit(start=eof, end=eof, new_text=scaffold))
        changes.append(DocumentChange.edit(destination.path, edits))
        return changes

    def new_file_header(self, subject: ParsedFile) -> str:
        header = copyright_header(subject)
        if header:
            # One empty line between copyright header and package decl.
            header += "\n\n"
        return header + f"package {subject.package_name}_test\n"


def import_block(imports: dict[str, ImportInfo]) -> str:
    """Render imports for a new file; paths are sorted for determinism."""

    def spec(path: str) -> str:
        info = imports[path]
        return f'{info.name} "{path}"' if info.renamed else f'"{path}"'

    paths = sorted(imports)
    if len(paths) == 1:
        return f"\nimport {spec(paths[0])}\n"
    return "\nimport (\n" + "".join(f"\t{spec(p)}\n" for p in paths) + ")\n"
