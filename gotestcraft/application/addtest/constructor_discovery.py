"""
Constructor discovery for method receivers.

A "constructor" is any package-level function returning the receiver's named
type (optionally behind one pointer), possibly followed by an error. The
search is a ranked scan over an explicit, name-sorted candidate list, so the
result never depends on declaration enumeration order.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ...domain.gotypes import ERROR_TYPE, Func, Named, identical, receiver_named
from ...domain.package_view import PackageView

logger = logging.getLogger(__name__)


def scope_candidates(view: PackageView) -> list[Func]:
    """Package-level (non-method) functions of view, sorted by name."""
    return [
        view.scope[name]
        for name in sorted(view.scope)
        if view.scope[name].signature.recv is None
    ]


def is_constructor_of(fn: Func, want: Named, xtest: bool) -> bool:
    """Report whether fn qualifies as a constructor for want."""
    sig = fn.signature
    if sig.recv is not None:
        return False
    # Unexported constructors are not visible from an x_test package.
    if xtest and not fn.exported:
        return False
    if len(sig.results) not in (1, 2):
        return False
    _, got = receiver_named(sig.results[0])
    if got is None or not identical(got, want):
        return False
    if len(sig.results) == 2 and not identical(sig.results[1].type, ERROR_TYPE):
        return False
    return True


def discover_constructor(
    candidates: Iterable[Func], want: Named, type_name: str, xtest: bool
) -> Func | None:
    """
    Select the best constructor for want among candidates.

    The first qualifying candidate is kept unless a later one is named
    "New" + type_name (case-insensitively), which is always preferred.

    Args:
        candidates: Functions to consider, in a stable order
        want: The receiver's named type
        type_name: Name of the receiver type as written (alias-preserving)
        xtest: Whether the test lives in an external test package

    Returns:
        The selected constructor or None when nothing qualifies
    """
    canonical = ("new" + type_name).casefold()
    selected: Func | None = None
    for fn in candidates:
        if not is_constructor_of(fn, want, xtest):
            continue
        if selected is None:
            selected = fn
        # Functions named NewType win over signature-only matches.
        if fn.name.casefold() == canonical:
            selected = fn

    if selected is not None:
        logger.debug("Selected constructor %s for %s", selected.name, type_name)
    return selected
