"""Workspace symbol search: fuzzy scoring, ranking, cache and index."""

from codenav.search.cache import CacheEntry, SymbolCache
from codenav.search.fuzzy import NO_MATCH, FuzzyMatch, fuzzy_score
from codenav.search.index import SymbolIndex
from codenav.search.ranking import RankedSymbol, parse_query, rank_symbols

__all__ = [
    "CacheEntry",
    "SymbolCache",
    "NO_MATCH",
    "FuzzyMatch",
    "fuzzy_score",
    "SymbolIndex",
    "RankedSymbol",
    "parse_query",
    "rank_symbols",
]
