"""Filesystem implementation of FileReaderPort."""

from pathlib import Path


class FilesystemReader:
    """Read files from the local filesystem."""

    def read_file(self, path: Path) -> bytes:
        """
        Return the raw bytes of path.

        Raises:
            FileNotFoundError: If the file does not exist
        """
        return Path(path).read_bytes()
