"""
Qualifier and import resolution for generated test code.

Three import maps take part in resolving a package reference:

- ``file_imports``: imports of the subject file (foo.go)
- ``test_imports``: imports already present in the destination (foo_test.go)
- ``extra_imports``: imports the generated code needs and the destination
  lacks; only ever appended to

The qualifier is the single place deciding how a package is referenced, so
one rendering pass never uses two names for the same import path.
"""

from __future__ import annotations

import logging

from ...domain.errors import InvalidTarget, UnsupportedImportForm
from ...domain.gotypes import Package
from ...domain.models import ImportInfo
from ...domain.package_view import (
    COMMAND_LINE_ARGUMENTS,
    PackageView,
    ParsedFile,
    import_path_to_assumed_name,
)

logger = logging.getLogger(__name__)


def collect_imports(file: ParsedFile, view: PackageView) -> dict[str, ImportInfo]:
    """
    Map every import path of file to the local name it is bound to.

    Blank imports bind nothing and are skipped. Unrenamed imports take the
    package name recorded in the dependency graph, or a guess from the path
    when the dependency is unknown.

    Raises:
        UnsupportedImportForm: If the file contains a dot import
        InvalidTarget: If an import resolves to a synthetic package
    """
    imports: dict[str, ImportInfo] = {}
    for spec in file.imports:
        if spec.name == ".":
            raise UnsupportedImportForm(
                f'"add a test for func" does not support files containing dot imports '
                f'({file.path.name} imports "{spec.path}")'
            )
        if spec.name == "_":
            continue
        if spec.name is not None:
            imports[spec.path] = ImportInfo(name=spec.name, renamed=True)
            continue

        dep = view.deps_by_import_path.get(spec.path)
        if dep is None:
            imports[spec.path] = ImportInfo(name=import_path_to_assumed_name(spec.path))
        elif dep.id == COMMAND_LINE_ARGUMENTS:
            raise InvalidTarget("can not import command-line-arguments package")
        else:
            imports[spec.path] = ImportInfo(name=dep.name)
    return imports


class Qualifier:
    """
    Decide the printed qualifier of a package inside the destination file.

    Resolution order:
      1. Same-package (white-box) test and the subject package: unqualified.
      2. Already imported by the destination file: its local name.
      3. Imported by the subject file: reuse that name and record the import
         as newly required.
      4. Otherwise: the package's own name, recorded as newly required.

    A newly required import never reuses a local name already bound to a
    different path in the destination; such names get a numeric suffix and
    are recorded as renamed.
    """

    def __init__(
        self,
        subject: Package,
        xtest: bool,
        file_imports: dict[str, ImportInfo],
        test_imports: dict[str, ImportInfo] | None = None,
    ) -> None:
        self._subject = subject
        self._xtest = xtest
        self._file_imports = file_imports
        self._test_imports = test_imports or {}
        self._extra_imports: dict[str, ImportInfo] = {}

    @property
    def extra_imports(self) -> dict[str, ImportInfo]:
        """Imports the generated code requires, keyed by import path."""
        return dict(self._extra_imports)

    def __call__(self, pkg: Package) -> str:
        if not self._xtest and pkg.path == self._subject.path:
            return ""

        local = self._test_imports.get(pkg.path)
        if local is not None:
            return local.name

        local = self._extra_imports.get(pkg.path)
        if local is not None:
            return local.name

        local = self._file_imports.get(pkg.path)
        if local is None:
            local = ImportInfo(name=pkg.name)
        local = self._unbound(pkg.path, local)
        self._extra_imports[pkg.path] = local
        logger.debug("Import %s required as %s", pkg.path, local.name)
        return local.name

    def _unbound(self, path: str, info: ImportInfo) -> ImportInfo:
        bound = {i.name for p, i in self._test_imports.items() if p != path}
        bound.update(i.name for p, i in self._extra_imports.items() if p != path)
        if info.name not in bound:
            return info
        n = 2
        while f"{info.name}{n}" in bound:
            n += 1
        return ImportInfo(name=f"{info.name}{n}", renamed=True)
