"""
Error taxonomy for test scaffold generation.

Every failure is raised synchronously to the caller; none are retried
internally and no partial edit set is ever produced.
"""


class AddTestError(Exception):
    """Base exception for gotestcraft domain errors."""

    pass


class InvalidTarget(AddTestError):
    """The package is unusable: parse/type errors or a synthetic package."""


class NoEnclosingFunction(AddTestError):
    """The selected range is not inside a function or method declaration."""


class UnexportedTarget(AddTestError):
    """An external test package cannot reference the selected declaration."""


class UnsupportedImportForm(AddTestError):
    """A file uses an import form that cannot be re-qualified (dot imports)."""


class PackageMismatch(AddTestError):
    """The destination test file declares an incompatible package."""


class ResolutionError(AddTestError):
    """Type information is missing or inconsistent for a resolved declaration."""


class RenderError(AddTestError):
    """The render context does not fit the scaffold template."""
