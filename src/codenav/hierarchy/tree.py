"""Lazy call hierarchy tree.

Nodes live in an arena keyed by item id. Each node carries an explicit
state (see ``CallEdge.state``):

    COLLAPSED --expand--> LOADING --fetch done--> LOADED
    LOADED --collapse--> COLLAPSED (children retained)

Every expand re-fetches, even when children were loaded before, so the
tree always shows live data. A failed fetch still ends in LOADED (with no
children) so renderers never spin forever.
"""

from __future__ import annotations

import logging

from codenav.hierarchy.graph import CallGraphBuilder
from codenav.types import CallEdge, CallHierarchyItem, Direction

logger = logging.getLogger(__name__)


class HierarchyTree:
    """Call hierarchy rooted at one symbol, expanded on demand.

    Args:
        builder: Computes edges for the root and for each expansion.
        direction: Initial direction of the view.

    """

    def __init__(self, builder: CallGraphBuilder, direction: Direction = Direction.INCOMING) -> None:
        self._builder = builder
        self._direction = direction
        self._root: CallHierarchyItem | None = None
        self._anchor: tuple[str, int, int] | None = None
        self._edges: list[CallEdge] = []
        self._nodes: dict[str, CallEdge] = {}
        self._selected_id: str | None = None

    @property
    def root(self) -> CallHierarchyItem | None:
        return self._root

    @property
    def direction(self) -> Direction:
        return self._direction

    @property
    def edges(self) -> list[CallEdge]:
        """First-level edges of the current root."""
        return self._edges

    @property
    def selected_id(self) -> str | None:
        return self._selected_id

    def node(self, node_id: str) -> CallEdge | None:
        """Return the node registered under node_id, if any."""
        return self._nodes.get(node_id)

    # =========================================================================
    # Root lifecycle
    # =========================================================================

    async def open(self, path: str, line: int, column: int = 0) -> list[CallEdge]:
        """Resolve the root at a cursor position and load the first level.

        Raises:
            RootResolutionError: If no root symbol exists at the cursor.

        """
        root = await self._builder.prepare(path, line, column)
        self._anchor = (path, line, column)
        self._root = root
        return await self._load_first_level()

    async def set_direction(self, direction: Direction) -> list[CallEdge]:
        """Switch direction, reloading the first level for the current root."""
        if direction == self._direction:
            return self._edges
        self._direction = direction
        if self._root is None:
            return self._edges
        return await self._load_first_level()

    async def refresh(self) -> list[CallEdge]:
        """Re-resolve the root from the last cursor position and reload."""
        if self._anchor is None:
            return self._edges
        path, line, column = self._anchor
        return await self.open(path, line, column)

    async def _load_first_level(self) -> list[CallEdge]:
        if self._root is None:
            return []
        self._nodes.clear()
        self._selected_id = None
        self._edges = []
        edges = await self._builder.build_first_level(self._root, self._direction)
        self._edges = edges
        self._register(edges)
        logger.debug(
            "Loaded %d %s edges for %s", len(edges), self._direction.value, self._root.name
        )
        return edges

    # =========================================================================
    # Node state
    # =========================================================================

    async def expand(self, node_id: str) -> list[CallEdge]:
        """Fetch and show the children of a node.

        Args:
            node_id: Id of the node to expand.

        Returns:
            The node's children after the fetch (empty for unknown ids).

        """
        edge = self._nodes.get(node_id)
        if edge is None:
            return []
        if edge.loading:
            # Only one fetch per node in flight
            return edge.children or []

        edge.loading = True
        children: list[CallEdge] = []
        try:
            children = await self._builder.fetch_children(edge.item, edge.direction)
        except Exception as e:
            logger.debug("Failed to load children for %s: %s", edge.item.name, e)

        if edge.children:
            self._unregister(edge.children)
        edge.children = children
        edge.expanded = True
        edge.loading = False
        # The tree may have been reloaded while the fetch was in flight
        if self._nodes.get(node_id) is edge:
            self._register(children)
        return children

    def collapse(self, node_id: str) -> None:
        """Hide a node's children without discarding them."""
        edge = self._nodes.get(node_id)
        if edge is not None:
            edge.expanded = False

    async def toggle(self, node_id: str) -> None:
        """Collapse an expanded node, expand a collapsed one."""
        edge = self._nodes.get(node_id)
        if edge is None:
            return
        if edge.expanded:
            self.collapse(node_id)
        else:
            await self.expand(node_id)

    def expand_all(self) -> None:
        """Show every node whose children were loaded before. Never fetches."""
        for edge in self._nodes.values():
            if edge.children is not None:
                edge.expanded = True

    def collapse_all(self) -> None:
        for edge in self._nodes.values():
            edge.expanded = False

    def select(self, node_id: str | None) -> None:
        """Mark a node as selected (None clears the selection)."""
        if node_id is not None and node_id not in self._nodes:
            return
        self._selected_id = node_id

    def visible_nodes(self) -> list[tuple[int, CallEdge]]:
        """Flatten the tree into (depth, edge) pairs, following expanded nodes."""
        visible: list[tuple[int, CallEdge]] = []

        def walk(edges: list[CallEdge], depth: int) -> None:
            for edge in edges:
                visible.append((depth, edge))
                if edge.expanded and edge.children:
                    walk(edge.children, depth + 1)

        walk(self._edges, 0)
        return visible

    # =========================================================================
    # Arena bookkeeping
    # =========================================================================

    def _register(self, edges: list[CallEdge]) -> None:
        for edge in edges:
            self._nodes[edge.id] = edge
            if edge.children:
                self._register(edge.children)

    def _unregister(self, edges: list[CallEdge]) -> None:
        for edge in edges:
            self._nodes.pop(edge.id, None)
            if edge.children:
                self._unregister(edge.children)
            if self._selected_id == edge.id:
                self._selected_id = None
