"""
Writer adapter that applies document changes to disk.

Edits of one document are applied from the highest offset down so that
earlier offsets stay valid. Edits sharing an offset keep their listed order
in the resulting text.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ...domain.edits import DocumentChange, TextEdit


class EditWriterError(Exception):
    """Exception raised when document changes cannot be applied."""

    pass


def apply_edits(src: bytes, edits: list[TextEdit]) -> bytes:
    """
    Apply edits, whose offsets all refer to src, and return the new content.

    Raises:
        EditWriterError: If an edit lies outside src or edits overlap
    """
    ordered = sorted(
        enumerate(edits), key=lambda item: (item[1].start, item[0]), reverse=True
    )
    out = src
    limit = len(src)
    for _, edit in ordered:
        if edit.end > len(src):
            raise EditWriterError(
                f"edit [{edit.start}, {edit.end}) is outside the document ({len(src)} bytes)"
            )
        if edit.end > limit:
            raise EditWriterError(f"overlapping edit at [{edit.start}, {edit.end})")
        out = out[: edit.start] + edit.new_text.encode("utf-8") + out[edit.end :]
        limit = edit.start
    return out


class EditWriterAdapter:
    """
    WriterPort implementation over the local filesystem.

    In dry-run mode the resulting contents are computed and kept in
    ``previews`` but nothing is written.
    """

    def __init__(self, dry_run: bool = False) -> None:
        self.dry_run = dry_run
        self.logger = logging.getLogger(__name__)
        self.previews: dict[Path, str] = {}

    def apply(self, changes: list[DocumentChange], dry_run: bool = False) -> list[Path]:
        """
        Apply changes in order and return the paths of the touched documents.

        Raises:
            EditWriterError: If a document cannot be created or edited
        """
        dry_run = dry_run or self.dry_run
        contents: dict[Path, bytes] = {}
        touched: list[Path] = []

        for change in changes:
            path = Path(change.path)
            if change.kind == "create":
                if path.exists():
                    raise EditWriterError(f"cannot create {path}: file exists")
                contents[path] = b""
            else:
                if path not in contents:
                    try:
                        contents[path] = path.read_bytes()
                    except OSError as e:
                        raise EditWriterError(f"cannot read {path}: {e}") from e
                contents[path] = apply_edits(contents[path], change.edits)
            if path not in touched:
                touched.append(path)

        for path in touched:
            text = contents[path].decode("utf-8", errors="replace")
            self.previews[path] = text
            if dry_run:
                self.logger.info("Dry run: would write %s (%d bytes)", path, len(contents[path]))
                continue
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_bytes(contents[path])
            except OSError as e:
                raise EditWriterError(f"cannot write {path}: {e}") from e
            self.logger.info("Wrote %s", path)
        return touched
