"""Services of the add-test pipeline."""

from .constructor_discovery import discover_constructor, scope_candidates
from .edit_assembler import Destination, EditAssembler
from .qualifier import Qualifier, collect_imports
from .renderer import ScaffoldRenderer
from .symbol_resolver import SymbolResolver, derive_test_name, fresh_test_name
from .test_info_builder import TestInfoBuilder

__all__ = [
    "Destination",
    "EditAssembler",
    "Qualifier",
    "ScaffoldRenderer",
    "SymbolResolver",
    "TestInfoBuilder",
    "collect_imports",
    "derive_test_name",
    "discover_constructor",
    "fresh_test_name",
    "scope_candidates",
]
