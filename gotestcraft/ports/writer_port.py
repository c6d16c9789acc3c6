"""Writer Port interface definition."""

from pathlib import Path

from typing_extensions import Protocol

from ..domain.edits import DocumentChange


class WriterPort(Protocol):
    """Interface for applying document changes to the workspace."""

    def apply(self, changes: list[DocumentChange], dry_run: bool = False) -> list[Path]:
        """
        Apply the changes in order.

        Args:
            changes: Ordered document changes
            dry_run: Compute results without touching the filesystem

        Returns:
            Paths of the files written (or that would be written)
        """
        ...
