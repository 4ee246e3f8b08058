"""codenav - heuristic code intelligence.

Workspace symbol search and call hierarchies for editors, backed by a
language server when one is available and by regex pattern tables when
it is not.
"""

from codenav.analysis import extract_functions, get_pattern_table
from codenav.core import CodenavConfig, CodenavError, RootResolutionError, load_config
from codenav.hierarchy import CallGraphBuilder, HierarchyTree
from codenav.kinds import SymbolKind, kind_from_number, number_from_kind
from codenav.search import SymbolCache, SymbolIndex, fuzzy_score, rank_symbols
from codenav.sources import LocalFileSystem
from codenav.types import CallEdge, CallHierarchyItem, Direction, SymbolRecord

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "extract_functions",
    "get_pattern_table",
    "CodenavConfig",
    "CodenavError",
    "RootResolutionError",
    "load_config",
    "CallGraphBuilder",
    "HierarchyTree",
    "SymbolKind",
    "kind_from_number",
    "number_from_kind",
    "SymbolCache",
    "SymbolIndex",
    "fuzzy_score",
    "rank_symbols",
    "LocalFileSystem",
    "CallEdge",
    "CallHierarchyItem",
    "Direction",
    "SymbolRecord",
]
