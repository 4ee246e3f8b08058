"""Call hierarchy: heuristic call graph and the lazy hierarchy tree."""

from codenav.hierarchy.graph import CallGraphBuilder
from codenav.hierarchy.tree import HierarchyTree

__all__ = [
    "CallGraphBuilder",
    "HierarchyTree",
]
