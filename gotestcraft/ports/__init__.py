"""
Port interfaces for the gotestcraft system.

This module contains the interface definitions using Python Protocols
to define contracts between the application layer and adapters.
"""

from .file_port import FileReaderPort
from .import_fix_port import ImportFixPort
from .package_port import GoParserPort, PackageViewPort
from .writer_port import WriterPort

__all__ = [
    "FileReaderPort",
    "GoParserPort",
    "ImportFixPort",
    "PackageViewPort",
    "WriterPort",
]
