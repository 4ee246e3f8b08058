"""codenav command line interface.

Commands:
    codenav symbols PROJECT [QUERY]   ranked workspace symbol search
    codenav calls FILE LINE           call hierarchy at a cursor position
"""

import asyncio
import logging
from pathlib import Path

import typer
from rich.table import Table
from rich.tree import Tree

from codenav.cli_utils import (
    EXIT_CONFIG_ERROR,
    EXIT_ERROR,
    _error,
    _info,
    _setup_logging,
    _validate_file_path,
    _validate_project_path,
    _warning,
    console,
)
from codenav.core.config import CodenavConfig, load_config
from codenav.core.exceptions import ConfigError, RootResolutionError
from codenav.hierarchy import CallGraphBuilder, HierarchyTree
from codenav.search import SymbolIndex, rank_symbols
from codenav.sources import LocalFileSystem
from codenav.types import CallEdge, CallHierarchyItem, Direction, relative_path

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="codenav",
    help="Heuristic code navigation: symbol search and call hierarchies",
    no_args_is_help=True,
)


def _load_config_or_exit(config_path: str | None) -> CodenavConfig:
    try:
        return load_config(Path(config_path) if config_path else None)
    except ConfigError as e:
        _error(str(e))
        raise typer.Exit(code=EXIT_CONFIG_ERROR) from None


# =============================================================================
# symbols
# =============================================================================


@app.command("symbols")
def symbols_command(
    project: str = typer.Argument(..., help="Path to project directory"),
    query: str = typer.Argument(
        "",
        help="Fuzzy query; prefix with @ (classes), # (functions), $ (variables) or : (types)",
    ),
    limit: int = typer.Option(50, "--limit", "-n", min=1, help="Maximum results to show"),
    config: str | None = typer.Option(None, "--config", "-c", help="Path to codenav YAML config"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only show errors"),
) -> None:
    """Search project symbols.

    Examples:
        codenav symbols . getPath
        codenav symbols src "@Config" --limit 10

    """
    _setup_logging(verbose=verbose, quiet=quiet)
    project_path = _validate_project_path(project)
    settings = _load_config_or_exit(config)

    filesystem = LocalFileSystem(settings.filesystem)
    index = SymbolIndex(filesystem, filesystem, config=settings.symbol_index)
    symbols = asyncio.run(index.search(str(project_path), query))
    ranked = rank_symbols(symbols, query, limit=limit)

    if not ranked:
        _warning(f"No symbols matching '{query}'" if query else "No symbols found")
        return

    table = Table(title=f"Symbols ({len(ranked)} of {len(symbols)})")
    table.add_column("Name", style="bold")
    table.add_column("Kind", style="cyan")
    table.add_column("Container", style="dim")
    table.add_column("Location")
    table.add_column("Score", justify="right")
    for entry in ranked:
        symbol = entry.symbol
        table.add_row(
            symbol.name,
            symbol.kind.value,
            symbol.container_name or "",
            f"{symbol.file_path}:{symbol.range.start.line + 1}",
            str(entry.score),
        )
    console.print(table)


# =============================================================================
# calls
# =============================================================================


@app.command("calls")
def calls_command(
    file: str = typer.Argument(..., help="Source file containing the symbol"),
    line: int = typer.Argument(..., min=1, help="1-based line of the cursor"),
    column: int = typer.Option(1, "--column", min=1, help="1-based column of the cursor"),
    direction: Direction = typer.Option(
        Direction.INCOMING, "--direction", "-d", help="incoming (callers) or outgoing (callees)"
    ),
    depth: int = typer.Option(1, "--depth", min=1, help="Levels to expand"),
    project: str | None = typer.Option(
        None, "--project", "-p", help="Project root for cross-file search (default: file's directory)"
    ),
    config: str | None = typer.Option(None, "--config", "-c", help="Path to codenav YAML config"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only show errors"),
) -> None:
    """Show the call hierarchy of the function at FILE:LINE.

    Examples:
        codenav calls src/app.ts 42
        codenav calls app.py 10 --direction outgoing --depth 3

    """
    _setup_logging(verbose=verbose, quiet=quiet)
    file_path = _validate_file_path(file)
    project_path = _validate_project_path(project) if project else file_path.parent
    settings = _load_config_or_exit(config)

    filesystem = LocalFileSystem(settings.filesystem)
    builder = CallGraphBuilder(
        filesystem,
        filesystem,
        project_root=str(project_path),
        config=settings.call_graph,
    )
    tree = HierarchyTree(builder, direction=direction)

    try:
        asyncio.run(_open_and_expand(tree, str(file_path), line - 1, column - 1, depth))
    except RootResolutionError as e:
        _error(str(e))
        _info("Place the cursor inside a function body and try again.")
        raise typer.Exit(code=EXIT_ERROR) from None

    root = tree.root
    if root is None:
        _error(f"No symbol found at {file_path}:{line}:{column}")
        raise typer.Exit(code=EXIT_ERROR)
    console.print(_render_tree(root, tree.edges, str(project_path), direction))
    if not tree.edges:
        _info(f"No {direction.value} calls found for {root.name}")
    elif builder.last_incoming_truncated:
        _warning(
            f"Cross-file search was limited to {settings.call_graph.incoming_file_cap} files; "
            "results may be incomplete"
        )


async def _open_and_expand(
    tree: HierarchyTree, path: str, line: int, column: int, depth: int
) -> None:
    await tree.open(path, line, column)
    frontier = list(tree.edges)
    for _ in range(depth - 1):
        children = await asyncio.gather(*(tree.expand(edge.id) for edge in frontier))
        frontier = [child for group in children for child in group]


def _render_tree(
    root: CallHierarchyItem, edges: list[CallEdge], project_root: str, direction: Direction
) -> Tree:
    arrow = "←" if direction == Direction.INCOMING else "→"
    label = f"[bold]{root.name}[/bold] [cyan]{root.kind.value}[/cyan] {_location(root, project_root)}"
    rendered = Tree(f"{arrow} {label}")

    def add(parent: Tree, level: list[CallEdge]) -> None:
        for edge in level:
            count = f" [magenta]×{edge.call_count}[/magenta]" if edge.call_count > 1 else ""
            branch = parent.add(
                f"{edge.item.name} [cyan]{edge.item.kind.value}[/cyan]"
                f" {_location(edge.item, project_root)}{count}"
            )
            if edge.expanded and edge.children:
                add(branch, edge.children)

    add(rendered, edges)
    return rendered


def _location(item: CallHierarchyItem, project_root: str) -> str:
    return f"[dim]{relative_path(item.path, project_root)}:{item.selection_range.start.line + 1}[/dim]"


def main() -> None:
    app()


if __name__ == "__main__":
    main()
