"""Tests for the lazy HierarchyTree."""

import asyncio

import pytest
import pytest_asyncio

from codenav.core.exceptions import RootResolutionError
from codenav.hierarchy.graph import CallGraphBuilder
from codenav.hierarchy.tree import HierarchyTree
from codenav.kinds import SymbolKind
from codenav.types import (
    CallEdge,
    CallHierarchyItem,
    Direction,
    NodeState,
    Range,
    generate_item_id,
)


def _item(name: str) -> CallHierarchyItem:
    return CallHierarchyItem(
        id=generate_item_id(),
        name=name,
        kind=SymbolKind.FUNCTION,
        uri=f"file:///proj/{name}.ts",
        range=Range.from_coords(0, 0, 2, 1),
        selection_range=Range.from_coords(0, 9, 0, 9 + len(name)),
    )


class StubBuilder:
    """Builder returning two fresh children per fetch, named after the parent."""

    def __init__(self) -> None:
        self.fetches: list[tuple[str, Direction]] = []
        self.fail_on: set[str] = set()
        self.gate: asyncio.Event | None = None

    async def prepare(self, path: str, line: int, column: int = 0) -> CallHierarchyItem:
        if line < 0:
            raise RootResolutionError("No function found at cursor position", path=path, line=line)
        return _item("root")

    async def build_first_level(self, root: CallHierarchyItem, direction: Direction) -> list[CallEdge]:
        return await self.fetch_children(root, direction)

    async def fetch_children(self, item: CallHierarchyItem, direction: Direction) -> list[CallEdge]:
        self.fetches.append((item.name, direction))
        if self.gate is not None:
            await self.gate.wait()
        if item.name in self.fail_on:
            raise RuntimeError("server went away")
        prefix = "root" if item.name == "root" else item.name
        return [
            CallEdge(item=_item(f"{prefix}_{i}"), from_ranges=[Range.from_coords(1, 2, 1, 6)], direction=direction)
            for i in range(2)
        ]


@pytest.fixture
def stub() -> StubBuilder:
    return StubBuilder()


@pytest_asyncio.fixture
async def tree(stub: StubBuilder) -> HierarchyTree:
    hierarchy = HierarchyTree(stub)
    await hierarchy.open("/proj/root.ts", 0)
    return hierarchy


class TestOpen:
    """Tests for root lifecycle."""

    @pytest.mark.asyncio
    async def test_open_loads_first_level(self, tree: HierarchyTree, stub: StubBuilder) -> None:
        assert tree.root is not None
        assert tree.root.name == "root"
        assert [e.item.name for e in tree.edges] == ["root_0", "root_1"]
        assert all(e.state == NodeState.COLLAPSED for e in tree.edges)
        assert stub.fetches == [("root", Direction.INCOMING)]

    @pytest.mark.asyncio
    async def test_open_failure_propagates(self, stub: StubBuilder) -> None:
        hierarchy = HierarchyTree(stub)
        with pytest.raises(RootResolutionError):
            await hierarchy.open("/proj/root.ts", -1)
        assert hierarchy.root is None
        assert hierarchy.edges == []

    @pytest.mark.asyncio
    async def test_set_direction_reloads(self, tree: HierarchyTree, stub: StubBuilder) -> None:
        old_ids = [e.id for e in tree.edges]
        edges = await tree.set_direction(Direction.OUTGOING)
        assert tree.direction == Direction.OUTGOING
        assert all(e.direction == Direction.OUTGOING for e in edges)
        assert all(tree.node(node_id) is None for node_id in old_ids)
        assert stub.fetches[-1] == ("root", Direction.OUTGOING)

    @pytest.mark.asyncio
    async def test_same_direction_is_noop(self, tree: HierarchyTree, stub: StubBuilder) -> None:
        await tree.set_direction(Direction.INCOMING)
        assert len(stub.fetches) == 1

    @pytest.mark.asyncio
    async def test_direction_before_open_does_not_fetch(self, stub: StubBuilder) -> None:
        hierarchy = HierarchyTree(stub)
        assert await hierarchy.set_direction(Direction.OUTGOING) == []
        assert stub.fetches == []

    @pytest.mark.asyncio
    async def test_refresh_rebuilds(self, tree: HierarchyTree, stub: StubBuilder) -> None:
        first_root = tree.root
        await tree.refresh()
        assert tree.root is not first_root
        assert len(stub.fetches) == 2

    @pytest.mark.asyncio
    async def test_refresh_before_open_does_not_fetch(self, stub: StubBuilder) -> None:
        hierarchy = HierarchyTree(stub)
        assert await hierarchy.refresh() == []
        assert hierarchy.root is None
        assert stub.fetches == []


class TestExpandCollapse:
    """Tests for per-node state transitions."""

    @pytest.mark.asyncio
    async def test_expand_loads_children(self, tree: HierarchyTree) -> None:
        node = tree.edges[0]
        children = await tree.expand(node.id)
        assert [c.item.name for c in children] == ["root_0_0", "root_0_1"]
        assert node.state == NodeState.LOADED
        assert node.expanded is True
        assert node.loading is False
        assert tree.node(children[0].id) is children[0]

    @pytest.mark.asyncio
    async def test_collapse_retains_children(self, tree: HierarchyTree) -> None:
        node = tree.edges[0]
        children = await tree.expand(node.id)
        tree.collapse(node.id)
        assert node.state == NodeState.COLLAPSED
        assert node.children == children

    @pytest.mark.asyncio
    async def test_re_expand_refetches(self, tree: HierarchyTree, stub: StubBuilder) -> None:
        node = tree.edges[0]
        first = await tree.expand(node.id)
        tree.collapse(node.id)
        second = await tree.expand(node.id)
        assert stub.fetches.count(("root_0", Direction.INCOMING)) == 2
        assert {c.id for c in first}.isdisjoint(c.id for c in second)
        assert all(tree.node(c.id) is None for c in first)

    @pytest.mark.asyncio
    async def test_fetch_failure_marks_loaded_with_no_children(
        self, tree: HierarchyTree, stub: StubBuilder
    ) -> None:
        node = tree.edges[1]
        stub.fail_on.add("root_1")
        children = await tree.expand(node.id)
        assert children == []
        assert node.expanded is True
        assert node.loading is False
        assert node.children == []
        assert node.state == NodeState.LOADED

    @pytest.mark.asyncio
    async def test_single_fetch_in_flight(self, tree: HierarchyTree, stub: StubBuilder) -> None:
        node = tree.edges[0]
        stub.gate = asyncio.Event()

        first = asyncio.create_task(tree.expand(node.id))
        await asyncio.sleep(0)
        assert node.state == NodeState.LOADING
        assert await tree.expand(node.id) == []

        stub.gate.set()
        await first
        assert stub.fetches.count(("root_0", Direction.INCOMING)) == 1
        assert node.state == NodeState.LOADED

    @pytest.mark.asyncio
    async def test_result_for_discarded_node_not_registered(
        self, tree: HierarchyTree, stub: StubBuilder
    ) -> None:
        node = tree.edges[0]
        gate = asyncio.Event()
        stub.gate = gate
        pending = asyncio.create_task(tree.expand(node.id))
        await asyncio.sleep(0)

        stub.gate = None
        await tree.refresh()
        assert tree.node(node.id) is None

        gate.set()
        children = await pending
        assert len(children) == 2
        assert node.expanded is True
        assert all(tree.node(c.id) is None for c in children)

    @pytest.mark.asyncio
    async def test_unknown_node(self, tree: HierarchyTree) -> None:
        assert await tree.expand("ch-0-missing") == []
        tree.collapse("ch-0-missing")
        await tree.toggle("ch-0-missing")

    @pytest.mark.asyncio
    async def test_toggle(self, tree: HierarchyTree) -> None:
        node = tree.edges[0]
        await tree.toggle(node.id)
        assert node.expanded is True
        await tree.toggle(node.id)
        assert node.expanded is False
        assert node.children is not None


class TestBulkAndView:
    """Tests for expand_all/collapse_all, selection and flattening."""

    @pytest.mark.asyncio
    async def test_visible_nodes_follow_expansion(self, tree: HierarchyTree) -> None:
        first = tree.edges[0]
        await tree.expand(first.id)
        visible = [(depth, edge.item.name) for depth, edge in tree.visible_nodes()]
        assert visible == [(0, "root_0"), (1, "root_0_0"), (1, "root_0_1"), (0, "root_1")]

        tree.collapse(first.id)
        assert [e.item.name for _, e in tree.visible_nodes()] == ["root_0", "root_1"]

    @pytest.mark.asyncio
    async def test_expand_all_never_fetches(self, tree: HierarchyTree, stub: StubBuilder) -> None:
        first = tree.edges[0]
        await tree.expand(first.id)
        tree.collapse_all()
        assert all(not e.expanded for _, e in tree.visible_nodes())

        fetches = len(stub.fetches)
        tree.expand_all()
        assert first.expanded is True
        assert tree.edges[1].expanded is False
        assert len(stub.fetches) == fetches

    @pytest.mark.asyncio
    async def test_select(self, tree: HierarchyTree) -> None:
        node = tree.edges[1]
        tree.select(node.id)
        assert tree.selected_id == node.id
        tree.select("ch-0-missing")
        assert tree.selected_id == node.id
        tree.select(None)
        assert tree.selected_id is None

    @pytest.mark.asyncio
    async def test_reload_clears_selection(self, tree: HierarchyTree) -> None:
        tree.select(tree.edges[0].id)
        await tree.set_direction(Direction.OUTGOING)
        assert tree.selected_id is None


class TestWithCallGraphBuilder:
    """End-to-end: tree over the heuristic builder."""

    @pytest.mark.asyncio
    async def test_outgoing_two_levels(self, make_fs) -> None:
        fs = make_fs(
            {
                "/proj/app.ts": (
                    "function main() {\n"
                    "  setup();\n"
                    "}\n"
                    "function setup() {\n"
                    "  loadConfig();\n"
                    "}\n"
                )
            }
        )
        hierarchy = HierarchyTree(CallGraphBuilder(fs), direction=Direction.OUTGOING)
        edges = await hierarchy.open("/proj/app.ts", 1)
        assert [e.item.name for e in edges] == ["setup"]

        children = await hierarchy.expand(edges[0].id)
        assert [c.item.name for c in children] == ["loadConfig"]
