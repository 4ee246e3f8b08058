"""Workspace symbol index.

Resolution order for ``search(project_root, query)``:

1. Language server workspace symbols, when a provider is configured and
   returns at least one symbol (cached as well).
2. The single-slot cache, when it holds a fresh non-empty entry for the
   same project. The query is not re-applied; callers rank the full set.
3. A fresh heuristic build: enumerate the tree, keep code files (capped),
   extract every file concurrently, flatten definitions into records.

Unreadable files are skipped; a build never fails as a whole.
"""

from __future__ import annotations

import asyncio
import logging

from codenav.analysis.extractor import extract_symbols, find_container_name, split_lines
from codenav.analysis.patterns import get_pattern_table
from codenav.core.config import SymbolIndexConfig
from codenav.core.exceptions import CodenavError
from codenav.kinds import SymbolKind, kind_from_number
from codenav.search.cache import SymbolCache
from codenav.sources import (
    ContentSource,
    LanguageServerProvider,
    ProviderSymbol,
    TreeSource,
    collect_code_files,
)
from codenav.types import SymbolRecord, relative_path

logger = logging.getLogger(__name__)


class SymbolIndex:
    """Project-wide symbol search with LSP-first, heuristic fallback."""

    def __init__(
        self,
        content_source: ContentSource,
        tree_source: TreeSource,
        provider: LanguageServerProvider | None = None,
        cache: SymbolCache | None = None,
        config: SymbolIndexConfig | None = None,
    ) -> None:
        self._content_source = content_source
        self._tree_source = tree_source
        self._provider = provider
        self._config = config or SymbolIndexConfig()
        self._cache = cache or SymbolCache(ttl_ms=self._config.cache_ttl_ms)

    @property
    def cache(self) -> SymbolCache:
        return self._cache

    def invalidate(self) -> None:
        """Forget cached symbols (e.g. after the project changed)."""
        self._cache.invalidate()

    async def search(self, project_root: str, query: str = "") -> list[SymbolRecord]:
        """Return all known symbols for project_root.

        Args:
            project_root: Project root directory.
            query: Forwarded to the language server; heuristic results are
                not filtered by it.

        Returns:
            Symbol records (possibly empty).

        """
        server_symbols = await self._query_provider(project_root, query)
        if server_symbols:
            self._cache.put(project_root, server_symbols)
            return server_symbols

        cached = self._cache.get(project_root)
        if cached is not None:
            logger.debug("Symbol cache hit for %s (%d symbols)", project_root, len(cached))
            return cached

        symbols = await self.build(project_root)
        self._cache.put(project_root, symbols)
        return symbols

    async def build(self, project_root: str) -> list[SymbolRecord]:
        """Scan the project heuristically, ignoring provider and cache."""
        try:
            tree = await self._tree_source.list_tree(project_root, self._config.tree_depth)
        except (CodenavError, OSError) as e:
            logger.warning("Cannot enumerate project %s: %s", project_root, e)
            return []

        files = collect_code_files(tree, self._config.code_extensions)
        if len(files) > self._config.max_files:
            logger.debug(
                "Project has %d code files, indexing first %d",
                len(files),
                self._config.max_files,
            )
            files = files[: self._config.max_files]

        per_file = await asyncio.gather(*(self._index_file(project_root, path) for path in files))
        symbols = [symbol for file_symbols in per_file for symbol in file_symbols]

        logger.info("Indexed %d symbols from %d files in %s", len(symbols), len(files), project_root)
        return symbols

    async def _index_file(self, project_root: str, path: str) -> list[SymbolRecord]:
        try:
            content = await self._content_source.read_file(path)
        except (CodenavError, OSError) as e:
            logger.debug("Skipping %s: %s", path, e)
            return []

        table = get_pattern_table(path)
        lines = split_lines(content)
        file_path = relative_path(path, project_root)

        records: list[SymbolRecord] = []
        for definition in extract_symbols(content, path):
            container = None
            if definition.kind == SymbolKind.METHOD:
                container = find_container_name(lines, definition.start_line, table)
            records.append(
                SymbolRecord(
                    name=definition.name,
                    kind=definition.kind,
                    file_path=file_path,
                    range=definition.range,
                    container_name=container,
                )
            )
        return records

    async def _query_provider(self, project_root: str, query: str) -> list[SymbolRecord]:
        if self._provider is None:
            return []
        try:
            results = await self._provider.workspace_symbols(project_root, query)
        except Exception as e:
            logger.debug("Workspace symbols unavailable, falling back to heuristics: %s", e)
            return []
        return [_from_provider(symbol, project_root) for symbol in results or []]


def _from_provider(symbol: ProviderSymbol, project_root: str) -> SymbolRecord:
    return SymbolRecord(
        name=symbol.name,
        kind=kind_from_number(symbol.kind),
        file_path=relative_path(symbol.uri, project_root),
        range=symbol.range,
        container_name=symbol.container_name,
    )
