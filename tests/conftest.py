"""Shared fixtures for codenav tests.

In-memory collaborators:

- FakeFileSystem: ContentSource + TreeSource over a ``{path: text}`` dict,
  counting reads and tree listings.
- FakeProvider: LanguageServerProvider returning canned results, or
  raising ProviderError when ``fail=True``.
"""

from dataclasses import dataclass, field

import pytest

from codenav.core.exceptions import ContentReadError, ProviderError
from codenav.sources import FileTreeNode, ProviderCall, ProviderItem, ProviderSymbol


class FakeFileSystem:
    """In-memory project rooted at ``root``."""

    def __init__(
        self,
        files: dict[str, str],
        root: str = "/proj",
        unreadable: set[str] | None = None,
    ) -> None:
        self.root = root
        self.files = files
        self.unreadable = unreadable or set()
        self.reads: list[str] = []
        self.tree_calls = 0

    async def read_file(self, path: str) -> str:
        self.reads.append(path)
        if path in self.unreadable or path not in self.files:
            raise ContentReadError(f"Cannot read {path}", path=path)
        return self.files[path]

    async def list_tree(self, root: str, depth: int) -> FileTreeNode:
        self.tree_calls += 1
        paths = sorted(set(self.files) | self.unreadable)
        return _build_node(root, root.rsplit("/", 1)[-1], paths, depth)


def _build_node(path: str, name: str, all_paths: list[str], depth: int) -> FileTreeNode:
    prefix = path.rstrip("/") + "/"
    children: dict[str, FileTreeNode] = {}
    if depth > 0:
        for candidate in all_paths:
            if not candidate.startswith(prefix):
                continue
            head, _, rest = candidate[len(prefix):].partition("/")
            if head in children:
                continue
            child_path = prefix + head
            if rest:
                children[head] = _build_node(child_path, head, all_paths, depth - 1)
            else:
                children[head] = FileTreeNode(
                    name=head, path=child_path, is_file=True, is_directory=False
                )
    return FileTreeNode(
        name=name,
        path=path,
        is_file=False,
        is_directory=True,
        children=tuple(children[key] for key in sorted(children)),
    )


@dataclass
class FakeProvider:
    """Canned language server."""

    prepared: list[ProviderItem] = field(default_factory=list)
    incoming: list[ProviderCall] = field(default_factory=list)
    outgoing: list[ProviderCall] = field(default_factory=list)
    symbols: list[ProviderSymbol] = field(default_factory=list)
    fail: bool = False
    requests: list[str] = field(default_factory=list)

    def _record(self, name: str) -> None:
        self.requests.append(name)
        if self.fail:
            raise ProviderError(f"{name} failed")

    async def prepare_call_hierarchy(self, path: str, line: int, column: int) -> list[ProviderItem]:
        self._record("prepare")
        return self.prepared

    async def incoming_calls(self, item: ProviderItem) -> list[ProviderCall]:
        self._record("incoming")
        return self.incoming

    async def outgoing_calls(self, item: ProviderItem) -> list[ProviderCall]:
        self._record("outgoing")
        return self.outgoing

    async def workspace_symbols(self, root: str, query: str) -> list[ProviderSymbol]:
        self._record("symbols")
        return self.symbols


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


@pytest.fixture
def make_fs():
    """Factory for FakeFileSystem instances."""

    def _make(files: dict[str, str], **kwargs) -> FakeFileSystem:
        return FakeFileSystem(files, **kwargs)

    return _make


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
