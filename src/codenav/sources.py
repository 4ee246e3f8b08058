"""External collaborators consumed by the engine.

The engine never touches the file system or a language server directly;
it talks to these protocols:

- ContentSource: ``read_file(path) -> text`` (raises ContentReadError)
- TreeSource: ``list_tree(root, depth) -> FileTreeNode``
- LanguageServerProvider: authoritative call hierarchy and workspace
  symbols (raises ProviderError, or returns empty results)

LocalFileSystem is the default ContentSource/TreeSource over the real disk.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from codenav.core.config import FileSystemConfig
from codenav.core.exceptions import ContentReadError
from codenav.types import Range

logger = logging.getLogger(__name__)


# =============================================================================
# Value types exchanged with collaborators
# =============================================================================


@dataclass(frozen=True, slots=True)
class FileTreeNode:
    """One entry of a project file tree.

    Attributes:
        name: Entry name (last path component).
        path: Full path of the entry.
        is_file: True for regular files.
        is_directory: True for directories.
        children: Child entries (empty for files or depth-cut directories).

    """

    name: str
    path: str
    is_file: bool
    is_directory: bool
    children: tuple[FileTreeNode, ...] = ()

    def iter_files(self) -> Iterator[FileTreeNode]:
        """Yield file entries depth-first, in child order."""
        for child in self.children:
            if child.is_file:
                yield child
            if child.is_directory:
                yield from child.iter_files()


@dataclass(frozen=True, slots=True)
class ProviderItem:
    """A call hierarchy item as reported by a language server (numeric kind)."""

    name: str
    kind: int
    uri: str
    range: Range
    selection_range: Range


@dataclass(frozen=True, slots=True)
class ProviderCall:
    """An incoming/outgoing call reported by a language server.

    An empty ``from_ranges`` means the server did not report call sites; the
    engine then uses the item's selection range.
    """

    item: ProviderItem
    from_ranges: tuple[Range, ...] = ()


@dataclass(frozen=True, slots=True)
class ProviderSymbol:
    """A workspace symbol as reported by a language server (numeric kind)."""

    name: str
    kind: int
    uri: str
    range: Range
    container_name: str | None = None


# =============================================================================
# Protocols
# =============================================================================


class ContentSource(Protocol):
    """Reads file content."""

    async def read_file(self, path: str) -> str: ...


class TreeSource(Protocol):
    """Enumerates a project's file tree."""

    async def list_tree(self, root: str, depth: int) -> FileTreeNode: ...


class LanguageServerProvider(Protocol):
    """Authoritative code intelligence backed by a language server.

    Implementations raise ProviderError when the server is missing, not
    ready, or fails a request, and may return empty results when it knows
    nothing. Callers log either case at debug level and fall back to the
    heuristic pattern tables. Any other exception is treated the same way.
    """

    async def prepare_call_hierarchy(
        self, path: str, line: int, column: int
    ) -> list[ProviderItem]: ...

    async def incoming_calls(self, item: ProviderItem) -> list[ProviderCall]: ...

    async def outgoing_calls(self, item: ProviderItem) -> list[ProviderCall]: ...

    async def workspace_symbols(self, root: str, query: str) -> list[ProviderSymbol]: ...


# =============================================================================
# Helpers
# =============================================================================


def file_extension(path: str) -> str:
    """Return the lowercase extension of path without the dot ("" if none)."""
    name = path.replace("\\", "/").rsplit("/", 1)[-1]
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[-1].lower()


def collect_code_files(tree: FileTreeNode, extensions: Iterable[str]) -> list[str]:
    """Collect paths of files under tree whose extension is in extensions.

    Args:
        tree: Root node of the project tree.
        extensions: Allowed extensions without leading dot.

    Returns:
        File paths in depth-first tree order.

    """
    allowed = {ext.lower() for ext in extensions}
    return [node.path for node in tree.iter_files() if file_extension(node.name) in allowed]


# =============================================================================
# Local file system
# =============================================================================


class LocalFileSystem:
    """ContentSource and TreeSource over the local disk.

    Blocking I/O runs in worker threads so many reads can be in flight at
    once while the regex work stays on the event loop.
    """

    def __init__(self, config: FileSystemConfig | None = None) -> None:
        self._config = config or FileSystemConfig()
        self._skip_dirs = frozenset(self._config.skip_dirs)

    async def read_file(self, path: str) -> str:
        return await asyncio.to_thread(self._read_text, Path(path))

    async def list_tree(self, root: str, depth: int) -> FileTreeNode:
        return await asyncio.to_thread(self._build_tree, Path(root), depth)

    def _read_text(self, path: Path) -> str:
        try:
            size = path.stat().st_size
            if size > self._config.max_file_size:
                raise ContentReadError(
                    f"File exceeds {self._config.max_file_size} bytes: {path}", path=str(path)
                )
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ContentReadError(f"Cannot read {path}: {e}", path=str(path)) from e

    def _build_tree(self, root: Path, depth: int) -> FileTreeNode:
        try:
            resolved_root = root.resolve()
        except OSError as e:
            raise ContentReadError(f"Cannot resolve project root {root}: {e}", path=str(root)) from e
        if not resolved_root.is_dir():
            raise ContentReadError(f"Project root is not a directory: {root}", path=str(root))
        return FileTreeNode(
            name=root.name,
            path=str(root),
            is_file=False,
            is_directory=True,
            children=self._children(root, resolved_root, depth),
        )

    def _children(self, directory: Path, resolved_root: Path, depth: int) -> tuple[FileTreeNode, ...]:
        if depth <= 0:
            return ()
        try:
            entries = sorted(directory.iterdir(), key=lambda p: p.name)
        except OSError as e:
            logger.debug("Cannot list %s: %s", directory, e)
            return ()

        nodes: list[FileTreeNode] = []
        for entry in entries:
            # Symlinks may point outside the project
            if entry.is_symlink() and not _is_within_root(entry, resolved_root):
                continue
            if entry.is_dir():
                if entry.name in self._skip_dirs:
                    continue
                nodes.append(
                    FileTreeNode(
                        name=entry.name,
                        path=str(entry),
                        is_file=False,
                        is_directory=True,
                        children=self._children(entry, resolved_root, depth - 1),
                    )
                )
            elif entry.is_file():
                nodes.append(
                    FileTreeNode(name=entry.name, path=str(entry), is_file=True, is_directory=False)
                )
        return tuple(nodes)


def _is_within_root(path: Path, root: Path) -> bool:
    """Return True when the resolved path stays within the resolved root."""
    try:
        path.resolve().relative_to(root)
    except (OSError, ValueError):
        return False
    return True
