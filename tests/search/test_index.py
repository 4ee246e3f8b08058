"""Tests for SymbolIndex."""

import logging

import pytest

from codenav.core.config import SymbolIndexConfig
from codenav.kinds import SymbolKind
from codenav.search.cache import SymbolCache
from codenav.search.index import SymbolIndex
from codenav.search.ranking import rank_symbols
from codenav.sources import ProviderSymbol
from codenav.types import Range

PROJECT_FILES = {
    "/proj/src/users.ts": (
        "export class UserStore {\n"
        "  loadUser(id) {\n"
        "    return fetchUser(id);\n"
        "  }\n"
        "}\n"
        "export function fetchUser(id) {\n"
        "  return api.get(id);\n"
        "}\n"
    ),
    "/proj/tools/build.py": "def compile_all():\n    run_step()\n\ndef run_step():\n    pass\n",
    "/proj/README.md": "function notCode() {}\n",
}


class TestBuild:
    """Tests for heuristic index builds."""

    @pytest.mark.asyncio
    async def test_indexes_code_files_only(self, make_fs) -> None:
        fs = make_fs(PROJECT_FILES)
        index = SymbolIndex(fs, fs)
        symbols = await index.build("/proj")
        names = {s.name for s in symbols}
        assert names == {"UserStore", "loadUser", "fetchUser", "compile_all", "run_step"}
        assert "/proj/README.md" not in fs.reads

    @pytest.mark.asyncio
    async def test_records_are_project_relative_with_containers(self, make_fs) -> None:
        fs = make_fs(PROJECT_FILES)
        symbols = await SymbolIndex(fs, fs).build("/proj")
        load_user = next(s for s in symbols if s.name == "loadUser")
        assert load_user.kind == SymbolKind.METHOD
        assert load_user.file_path == "src/users.ts"
        assert load_user.container_name == "UserStore"
        assert load_user.range.start.line == 1
        fetch_user = next(s for s in symbols if s.name == "fetchUser")
        assert fetch_user.container_name is None

    @pytest.mark.asyncio
    async def test_unreadable_files_are_skipped(self, make_fs) -> None:
        fs = make_fs(PROJECT_FILES, unreadable={"/proj/src/broken.ts"})
        symbols = await SymbolIndex(fs, fs).build("/proj")
        assert "/proj/src/broken.ts" in fs.reads
        assert {s.name for s in symbols} >= {"fetchUser", "compile_all"}

    @pytest.mark.asyncio
    async def test_file_cap(self, make_fs) -> None:
        files = {f"/proj/m{i:03d}.py": f"def func_{i:03d}():\n    pass\n" for i in range(10)}
        fs = make_fs(files)
        index = SymbolIndex(fs, fs, config=SymbolIndexConfig(max_files=3))
        symbols = await index.build("/proj")
        assert [s.name for s in symbols] == ["func_000", "func_001", "func_002"]

    @pytest.mark.asyncio
    async def test_tree_failure_returns_empty(self, make_fs, caplog: pytest.LogCaptureFixture) -> None:
        fs = make_fs({})

        async def broken_tree(root: str, depth: int):
            raise OSError("permission denied")

        fs.list_tree = broken_tree
        with caplog.at_level(logging.WARNING):
            assert await SymbolIndex(fs, fs).build("/proj") == []
        assert "Cannot enumerate project" in caplog.text

    @pytest.mark.asyncio
    async def test_constants_and_variables_indexed(self, make_fs) -> None:
        fs = make_fs({
            "/proj/src/config.ts": (
                "export const MAX_RETRIES = 3;\n"
                "let counter = 0;\n"
                "export function connect() {\n"
                "}\n"
            ),
            "/proj/app/settings.py": "TIMEOUT = 30\n",
        })
        symbols = await SymbolIndex(fs, fs).build("/proj")

        max_retries = next(s for s in symbols if s.name == "MAX_RETRIES")
        assert max_retries.kind == SymbolKind.CONSTANT
        assert max_retries.range.start.line == max_retries.range.end.line == 0

        assert [r.symbol.name for r in rank_symbols(symbols, "$max")] == ["MAX_RETRIES"]
        assert [r.symbol.name for r in rank_symbols(symbols, "$")] == ["counter", "MAX_RETRIES", "TIMEOUT"]


class TestSearch:
    """Tests for provider/cache/build resolution order."""

    @pytest.mark.asyncio
    async def test_cached_within_ttl_then_rescans(self, make_fs, clock) -> None:
        fs = make_fs(PROJECT_FILES)
        index = SymbolIndex(fs, fs, cache=SymbolCache(clock=clock))

        first = await index.search("/proj")
        clock.advance(10_000)
        second = await index.search("/proj", "load")
        assert second is first
        assert fs.tree_calls == 1

        clock.advance(20_000)
        third = await index.search("/proj")
        assert fs.tree_calls == 2
        assert third is not first

    @pytest.mark.asyncio
    async def test_invalidate_forces_rescan(self, make_fs) -> None:
        fs = make_fs(PROJECT_FILES)
        index = SymbolIndex(fs, fs)
        await index.search("/proj")
        index.invalidate()
        await index.search("/proj")
        assert fs.tree_calls == 2

    @pytest.mark.asyncio
    async def test_empty_build_is_not_served_from_cache(self, make_fs) -> None:
        fs = make_fs({"/proj/notes.txt": "nothing"})
        index = SymbolIndex(fs, fs)
        assert await index.search("/proj") == []
        assert await index.search("/proj") == []
        assert fs.tree_calls == 2

    @pytest.mark.asyncio
    async def test_provider_results_preferred(self, make_fs, fake_provider) -> None:
        fake_provider.symbols = [
            ProviderSymbol(
                name="Server",
                kind=23,
                uri="file:///proj/src/server.rs",
                range=Range.from_coords(4, 0, 20, 1),
                container_name="net",
            ),
            ProviderSymbol(name="weird", kind=99, uri="/proj/x.rs", range=Range.from_coords(0, 0, 0, 5)),
        ]
        fs = make_fs(PROJECT_FILES)
        index = SymbolIndex(fs, fs, provider=fake_provider)

        symbols = await index.search("/proj", "Serv")
        assert [s.name for s in symbols] == ["Server", "weird"]
        assert symbols[0].kind == SymbolKind.STRUCT
        assert symbols[0].file_path == "src/server.rs"
        assert symbols[0].container_name == "net"
        assert symbols[1].kind == SymbolKind.FUNCTION
        assert fs.tree_calls == 0
        assert index.cache.get("/proj") is symbols

    @pytest.mark.asyncio
    async def test_provider_failure_falls_back(self, make_fs, fake_provider) -> None:
        fake_provider.fail = True
        fs = make_fs(PROJECT_FILES)
        symbols = await SymbolIndex(fs, fs, provider=fake_provider).search("/proj")
        assert "fetchUser" in {s.name for s in symbols}
        assert fake_provider.requests == ["symbols"]

    @pytest.mark.asyncio
    async def test_empty_provider_result_falls_back(self, make_fs, fake_provider) -> None:
        fs = make_fs(PROJECT_FILES)
        symbols = await SymbolIndex(fs, fs, provider=fake_provider).search("/proj")
        assert "compile_all" in {s.name for s in symbols}

    @pytest.mark.asyncio
    async def test_unexpected_provider_exception_falls_back(
        self, make_fs, fake_provider, caplog: pytest.LogCaptureFixture
    ) -> None:
        async def crash(root: str, query: str) -> list[ProviderSymbol]:
            raise RuntimeError("socket closed")

        fake_provider.workspace_symbols = crash
        fs = make_fs(PROJECT_FILES)
        with caplog.at_level(logging.DEBUG, logger="codenav.search.index"):
            symbols = await SymbolIndex(fs, fs, provider=fake_provider).search("/proj")
        assert "fetchUser" in {s.name for s in symbols}
        assert "socket closed" in caplog.text
