"""Dependency injection container for CLI commands."""

from typing import Any

from ..adapters.golang.import_fixer import GoImportFixer
from ..adapters.golang.package_loader import GoPackageLoader
from ..adapters.golang.treesitter_parser import TreeSitterGoParser
from ..adapters.io.edit_writer import EditWriterAdapter
from ..adapters.io.file_reader import FilesystemReader
from ..application.add_test_usecase import AddTestUseCase
from ..config.models import GoTestCraftConfig


class DependencyError(Exception):
    """Raised when dependency injection fails."""

    pass


def create_dependency_container(
    config: GoTestCraftConfig, dry_run: bool = False
) -> dict[str, Any]:
    """
    Create a dependency injection container with all required services.

    Args:
        config: gotestcraft configuration
        dry_run: Whether the writer should only preview changes

    Returns:
        Dictionary containing all service instances

    Raises:
        DependencyError: If dependency creation fails
    """
    try:
        container: dict[str, Any] = {"config": config}

        # One parser instance shared by every Go adapter
        parser = TreeSitterGoParser()
        container["go_parser"] = parser
        container["package_loader"] = GoPackageLoader(parser)
        container["import_fixer"] = GoImportFixer(
            parser, local_prefix=config.imports.local_prefix
        )
        container["file_reader"] = FilesystemReader()
        container["writer_adapter"] = EditWriterAdapter(dry_run=dry_run)

        container["add_test_usecase"] = AddTestUseCase(
            package_port=container["package_loader"],
            file_reader=container["file_reader"],
            parser=parser,
            import_fixer=container["import_fixer"],
            config=config,
        )
        return container

    except Exception as e:
        raise DependencyError(f"Failed to create dependency container: {e}") from e
