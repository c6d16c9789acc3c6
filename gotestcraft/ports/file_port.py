"""File Port interface definition."""

from pathlib import Path

from typing_extensions import Protocol


class FileReaderPort(Protocol):
    """Interface for reading (possibly cached) file contents."""

    def read_file(self, path: Path) -> bytes:
        """
        Read a file's contents.

        Raises:
            FileNotFoundError: If the file does not exist. Callers rely on this
                to tell "create a new file" apart from other read failures.
        """
        ...
