"""
Add Test Use Case - thin orchestrator for scaffold generation.

Resolves the function or method enclosing a source range, builds its render
context and returns the document changes that add a table-driven test to the
companion _test.go file. Nothing is written here; applying the changes is the
caller's business (see WriterPort).
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..config.models import GoTestCraftConfig
from ..domain.edits import DocumentChange
from ..domain.errors import AddTestError
from ..ports.file_port import FileReaderPort
from ..ports.import_fix_port import ImportFixPort
from ..ports.package_port import GoParserPort, PackageViewPort
from .addtest.edit_assembler import EditAssembler
from .addtest.qualifier import Qualifier, collect_imports
from .addtest.renderer import ScaffoldRenderer
from .addtest.symbol_resolver import SymbolResolver, derive_test_name, fresh_test_name
from .addtest.test_info_builder import TestInfoBuilder

logger = logging.getLogger(__name__)


class AddTestUseCase:
    """
    Core use case for adding a test scaffold.

    Delegates to focused services:
    - SymbolResolver: package loading and declaration lookup
    - EditAssembler: destination inspection and edit placement
    - Qualifier: import resolution shared by every rendered type
    - TestInfoBuilder: render context for the target
    - ScaffoldRenderer: the test function text
    """

    def __init__(
        self,
        package_port: PackageViewPort,
        file_reader: FileReaderPort,
        parser: GoParserPort,
        import_fixer: ImportFixPort,
        config: GoTestCraftConfig | None = None,
    ):
        """
        Initialize the use case with its ports.

        Args:
            package_port: Port providing type-checked package views
            file_reader: Port reading the destination test file
            parser: Port parsing the destination test file header
            import_fixer: Port computing import edits for existing files
            config: Configuration (defaults when None)
        """
        self._config = config or GoTestCraftConfig()
        self._resolver = SymbolResolver(package_port)
        self._assembler = EditAssembler(
            file_reader,
            parser,
            import_fixer,
            test_file_suffix=self._config.generation.test_file_suffix,
        )
        self._renderer = ScaffoldRenderer(indent=self._config.generation.indent)

    def add_test(self, path: Path, start: int, end: int) -> list[DocumentChange]:
        """
        Compute the changes adding a test for the declaration enclosing [start, end).

        Args:
            path: Go source file containing the target
            start: Start byte offset of the selection
            end: End byte offset of the selection

        Returns:
            Ordered document changes; a create change precedes the edits
            when the test file is new

        Raises:
            AddTestError: If no test can be generated; no changes are produced
        """
        try:
            return self._add_test(Path(path), start, end)
        except AddTestError as e:
            logger.error("Cannot add test for %s: %s", path, e)
            raise

    def _add_test(self, path: Path, start: int, end: int) -> list[DocumentChange]:
        view, subject = self._resolver.load(path)

        # Dot imports in the subject file are rejected before anything else.
        file_imports = collect_imports(subject, view)

        destination = self._assembler.destination_for(subject, view)
        target = self._resolver.find_declaration(subject, start, end)

        if destination.xtest:
            self._resolver.check_visibility(target, view.package.name)

        test_name = derive_test_name(target.func)
        if self._config.generation.fresh_test_name:
            test_name = fresh_test_name(test_name, destination.declared_funcs)

        qualifier = Qualifier(
            view.package,
            destination.xtest,
            file_imports,
            destination.imports,
        )
        info = TestInfoBuilder(view, qualifier, destination.xtest).build(
            target.func, test_name
        )
        scaffold = self._renderer.render(info)

        changes = self._assembler.assemble(
            destination, subject, qualifier.extra_imports, scaffold
        )
        logger.info(
            "Generated %s for %s in %s (%s)",
            test_name,
            target.decl.name,
            destination.path,
            "new file" if not destination.exists else "existing file",
        )
        return changes
