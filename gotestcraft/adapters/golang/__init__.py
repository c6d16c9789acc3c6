"""Go source adapters backed by tree-sitter."""

from .import_fixer import GoImportFixer
from .package_loader import GoPackageLoader
from .treesitter_parser import TreeSitterGoParser

__all__ = ["GoImportFixer", "GoPackageLoader", "TreeSitterGoParser"]
