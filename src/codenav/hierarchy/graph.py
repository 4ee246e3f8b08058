"""Call graph construction for the call hierarchy.

The language server is authoritative: when a provider is configured and
answers with a non-empty result, that result is used as-is (no file or
caller caps). Otherwise the builder falls back to heuristics over
extracted definitions:

- Outgoing: calls inside the root's definition, grouped by callee name and
  resolved to same-file definitions when possible.
- Incoming: definitions in the anchor file that call the root by name,
  then the same search over up to ``incoming_file_cap`` project files of
  the anchor's language.

Resolution is by name only: a call may be attributed to a same-named
function in another scope.
"""

from __future__ import annotations

import asyncio
import logging

from codenav.analysis.extractor import extract_functions
from codenav.analysis.patterns import get_pattern_table
from codenav.core.config import CallGraphConfig
from codenav.core.exceptions import CodenavError, RootResolutionError
from codenav.kinds import SymbolKind, kind_from_number, number_from_kind
from codenav.sources import (
    ContentSource,
    LanguageServerProvider,
    ProviderCall,
    ProviderItem,
    TreeSource,
    collect_code_files,
    file_extension,
)
from codenav.types import (
    CallEdge,
    CallHierarchyItem,
    CallSite,
    Direction,
    FunctionDefinition,
    generate_item_id,
    path_to_uri,
    uri_to_path,
)

logger = logging.getLogger(__name__)


class CallGraphBuilder:
    """Builds one level of call edges for a call hierarchy item.

    Args:
        content_source: Reads file content.
        tree_source: Enumerates project files for cross-file incoming search.
            None disables the cross-file search.
        provider: Optional language server provider.
        project_root: Project root for cross-file search.
        config: Call graph limits.

    """

    def __init__(
        self,
        content_source: ContentSource,
        tree_source: TreeSource | None = None,
        provider: LanguageServerProvider | None = None,
        project_root: str | None = None,
        config: CallGraphConfig | None = None,
    ) -> None:
        self._content_source = content_source
        self._tree_source = tree_source
        self._provider = provider
        self._project_root = project_root
        self._config = config or CallGraphConfig()
        self.last_incoming_truncated = False

    # =========================================================================
    # Root resolution
    # =========================================================================

    async def prepare(self, path: str, line: int, column: int = 0) -> CallHierarchyItem:
        """Resolve the call hierarchy root at a cursor position.

        Args:
            path: File containing the cursor.
            line: 0-indexed cursor line.
            column: 0-indexed cursor column.

        Returns:
            Root CallHierarchyItem.

        Raises:
            RootResolutionError: If the file cannot be read or no definition
                encloses the cursor line.

        """
        path = uri_to_path(path)
        server_item = await self._prepare_with_provider(path, line, column)
        if server_item is not None:
            return server_item

        try:
            content = await self._content_source.read_file(path)
        except (CodenavError, OSError) as e:
            raise RootResolutionError(f"Cannot read {path}: {e}", path=path, line=line) from e

        for definition in extract_functions(content, path):
            if definition.start_line <= line <= definition.end_line:
                return _item_for_definition(definition, path_to_uri(path))

        raise RootResolutionError("No function found at cursor position", path=path, line=line)

    async def _prepare_with_provider(
        self, path: str, line: int, column: int
    ) -> CallHierarchyItem | None:
        if self._provider is None:
            return None
        try:
            items = await self._provider.prepare_call_hierarchy(path, line, column)
        except Exception as e:
            logger.debug("LSP call hierarchy not available for %s: %s", path, e)
            return None
        if not items:
            return None
        return _item_from_provider(items[0])

    # =========================================================================
    # Edges
    # =========================================================================

    async def build_first_level(
        self, root: CallHierarchyItem, direction: Direction
    ) -> list[CallEdge]:
        """Compute the edges one level away from root.

        Used both for the first level of a new hierarchy and for every node
        expansion.

        Args:
            root: Item whose callers/callees are wanted.
            direction: INCOMING or OUTGOING.

        Returns:
            New, collapsed CallEdge objects.

        """
        server_edges = await self._edges_from_provider(root, direction)
        if server_edges:
            return server_edges

        path = root.path
        try:
            content = await self._content_source.read_file(path)
        except (CodenavError, OSError) as e:
            logger.debug("Cannot read anchor file %s: %s", path, e)
            return []

        definitions = extract_functions(content, path)
        if direction == Direction.OUTGOING:
            return self._outgoing_edges(root, definitions)

        edges = _incoming_edges(root.name, definitions, root.uri)
        edges.extend(await self._search_project_for_incoming(root))
        return edges

    async def fetch_children(self, item: CallHierarchyItem, direction: Direction) -> list[CallEdge]:
        """Compute one level of edges for a node expansion."""
        return await self.build_first_level(item, direction)

    def _outgoing_edges(
        self, root: CallHierarchyItem, definitions: list[FunctionDefinition]
    ) -> list[CallEdge]:
        source = _find_definition(root, definitions)
        if source is None:
            return []

        groups: dict[str, list[CallSite]] = {}
        for call in source.calls:
            groups.setdefault(call.name, []).append(call)

        edges: list[CallEdge] = []
        for name, calls in groups.items():
            target = next((d for d in definitions if d.name == name), None)
            if target is not None:
                item = _item_for_definition(target, root.uri)
            else:
                first = calls[0]
                item = CallHierarchyItem(
                    id=generate_item_id(),
                    name=name,
                    kind=SymbolKind.FUNCTION,
                    uri=root.uri,
                    range=first.range,
                    selection_range=first.range,
                )
            edges.append(
                CallEdge(
                    item=item,
                    from_ranges=[call.range for call in calls],
                    direction=Direction.OUTGOING,
                )
            )
        return edges

    async def _search_project_for_incoming(self, root: CallHierarchyItem) -> list[CallEdge]:
        self.last_incoming_truncated = False
        if self._tree_source is None or self._project_root is None:
            return []

        anchor_path = root.path
        anchor_table = get_pattern_table(anchor_path)
        try:
            tree = await self._tree_source.list_tree(self._project_root, self._config.tree_depth)
        except (CodenavError, OSError) as e:
            logger.debug("Failed to search project for incoming calls: %s", e)
            return []

        # Same language only
        extensions = anchor_table.extensions or {file_extension(anchor_path)}
        files = collect_code_files(tree, extensions)
        cap = self._config.incoming_file_cap
        if len(files) > cap:
            self.last_incoming_truncated = True
            logger.info(
                "Incoming call search for %s limited to %d of %d files",
                root.name,
                cap,
                len(files),
            )
            files = files[:cap]

        candidates = [path for path in files if path != anchor_path]
        contents = await asyncio.gather(*(self._read_or_none(path) for path in candidates))

        edges: list[CallEdge] = []
        for path, content in zip(candidates, contents):
            if content is None:
                continue
            definitions = extract_functions(content, path)
            edges.extend(_incoming_edges(root.name, definitions, path_to_uri(path)))
        return edges

    async def _read_or_none(self, path: str) -> str | None:
        try:
            return await self._content_source.read_file(path)
        except (CodenavError, OSError) as e:
            logger.debug("Skipping %s: %s", path, e)
            return None

    async def _edges_from_provider(
        self, root: CallHierarchyItem, direction: Direction
    ) -> list[CallEdge]:
        if self._provider is None:
            return []
        request = _item_to_provider(root)
        try:
            if direction == Direction.INCOMING:
                calls = await self._provider.incoming_calls(request)
            else:
                calls = await self._provider.outgoing_calls(request)
        except Exception as e:
            logger.debug("Failed to fetch %s calls from LSP: %s", direction.value, e)
            return []
        return [_edge_from_provider(call, direction) for call in calls or []]


# =============================================================================
# Conversions
# =============================================================================


def _find_definition(
    root: CallHierarchyItem, definitions: list[FunctionDefinition]
) -> FunctionDefinition | None:
    """Pick the definition named like root, preferring the one at root's line."""
    named = [d for d in definitions if d.name == root.name]
    for definition in named:
        if definition.start_line == root.selection_range.start.line:
            return definition
    return named[0] if named else None


def _incoming_edges(
    root_name: str, definitions: list[FunctionDefinition], uri: str
) -> list[CallEdge]:
    edges: list[CallEdge] = []
    for definition in definitions:
        if definition.name == root_name:
            continue
        calls = [call for call in definition.calls if call.name == root_name]
        if not calls:
            continue
        edges.append(
            CallEdge(
                item=_item_for_definition(definition, uri),
                from_ranges=[call.range for call in calls],
                direction=Direction.INCOMING,
            )
        )
    return edges


def _item_for_definition(definition: FunctionDefinition, uri: str) -> CallHierarchyItem:
    return CallHierarchyItem(
        id=generate_item_id(),
        name=definition.name,
        kind=definition.kind,
        uri=uri,
        range=definition.range,
        selection_range=definition.selection_range,
    )


def _item_from_provider(item: ProviderItem) -> CallHierarchyItem:
    return CallHierarchyItem(
        id=generate_item_id(),
        name=item.name,
        kind=kind_from_number(item.kind),
        uri=path_to_uri(item.uri),
        range=item.range,
        selection_range=item.selection_range,
    )


def _item_to_provider(item: CallHierarchyItem) -> ProviderItem:
    return ProviderItem(
        name=item.name,
        kind=number_from_kind(item.kind),
        uri=item.uri,
        range=item.range,
        selection_range=item.selection_range,
    )


def _edge_from_provider(call: ProviderCall, direction: Direction) -> CallEdge:
    item = _item_from_provider(call.item)
    from_ranges = list(call.from_ranges) or [item.selection_range]
    return CallEdge(item=item, from_ranges=from_ranges, direction=direction)
