"""Ranking of symbol records against a search query.

Queries may start with a kind-filter prefix:

- ``@`` class-like (class, struct, interface, enum)
- ``#`` function-like (function, method, constructor)
- ``$`` variable-like (variable, constant, field, property)
- ``:`` type-like (typeParameter, enum, enumMember)

The name match counts double; the file path match breaks ties and lets
a query like ``auth/login`` find symbols by location.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from codenav.kinds import SymbolKind
from codenav.search.fuzzy import fuzzy_score
from codenav.types import SymbolRecord

DEFAULT_LIMIT = 100

KIND_FILTERS: dict[str, frozenset[SymbolKind]] = {
    "@": frozenset({SymbolKind.CLASS, SymbolKind.STRUCT, SymbolKind.INTERFACE, SymbolKind.ENUM}),
    "#": frozenset({SymbolKind.FUNCTION, SymbolKind.METHOD, SymbolKind.CONSTRUCTOR}),
    "$": frozenset({SymbolKind.VARIABLE, SymbolKind.CONSTANT, SymbolKind.FIELD, SymbolKind.PROPERTY}),
    ":": frozenset({SymbolKind.TYPE_PARAMETER, SymbolKind.ENUM, SymbolKind.ENUM_MEMBER}),
}


@dataclass(frozen=True, slots=True)
class RankedSymbol:
    """A symbol with its ranking score and name match positions."""

    symbol: SymbolRecord
    score: int
    positions: tuple[int, ...] = ()


def parse_query(query: str) -> tuple[frozenset[SymbolKind] | None, str]:
    """Split a query into an optional kind filter and the search term.

    Args:
        query: Raw query text.

    Returns:
        Tuple of (allowed kinds or None, stripped search term).

    """
    trimmed = query.strip()
    if not trimmed:
        return None, ""
    kinds = KIND_FILTERS.get(trimmed[0])
    if kinds is not None:
        return kinds, trimmed[1:].strip()
    return None, trimmed


def rank_symbols(
    symbols: Iterable[SymbolRecord],
    query: str,
    limit: int = DEFAULT_LIMIT,
) -> list[RankedSymbol]:
    """Filter and order symbols for display.

    Without a search term, symbols are sorted by name. Otherwise each symbol
    scores ``2 * fuzzy(term, name) + fuzzy(term, file_path)``; symbols that
    match neither are dropped.

    Args:
        symbols: Candidate symbols.
        query: Raw query, possibly with a kind-filter prefix.
        limit: Maximum number of results.

    Returns:
        Up to ``limit`` ranked symbols, best first.

    """
    kinds, term = parse_query(query)
    candidates = [s for s in symbols if kinds is None or s.kind in kinds]

    if not term:
        ordered = sorted(candidates, key=lambda s: s.name.lower())
        return [RankedSymbol(symbol=s, score=0) for s in ordered[:limit]]

    ranked: list[RankedSymbol] = []
    for symbol in candidates:
        name_match = fuzzy_score(term, symbol.name)
        path_match = fuzzy_score(term, symbol.file_path)
        if not name_match.matched and not path_match.matched:
            continue
        ranked.append(
            RankedSymbol(
                symbol=symbol,
                score=name_match.score * 2 + path_match.score,
                positions=name_match.positions,
            )
        )

    # Stable sort keeps index order among equal scores
    ranked.sort(key=lambda r: r.score, reverse=True)
    return ranked[:limit]
