"""Import Fix Port interface definition."""

from typing_extensions import Protocol

from ..domain.edits import ImportFix, TextEdit


class ImportFixPort(Protocol):
    """Interface for merging new imports into an existing Go file."""

    def compute_import_edits(self, src: bytes, fixes: list[ImportFix]) -> list[TextEdit]:
        """
        Compute the edits that add the requested imports to src.

        Imports already present are not duplicated and unrelated imports are
        not reordered.

        Args:
            src: Current file contents
            fixes: Import paths to add, with an optional explicit name

        Returns:
            Text edits against src
        """
        ...
