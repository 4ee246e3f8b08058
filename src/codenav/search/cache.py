"""Single-slot, time-bounded cache for workspace symbols.

The cache is an explicit object owned by its SymbolIndex (or shared by
passing the same instance), so tests and multiple engines never see each
other's state. The clock is injectable for expiry tests.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from codenav.types import SymbolRecord

logger = logging.getLogger(__name__)

DEFAULT_TTL_MS = 30_000

Clock = Callable[[], float]


def monotonic_ms() -> float:
    """Default clock: monotonic time in milliseconds."""
    return time.monotonic() * 1000


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """Cached symbols for one project.

    Attributes:
        symbols: Cached symbol list (returned as-is on hit).
        timestamp: Clock reading (ms) when the entry was stored.
        project_path: Project root the symbols belong to.

    """

    symbols: list[SymbolRecord]
    timestamp: float
    project_path: str


class SymbolCache:
    """Holds at most one CacheEntry, valid for ``ttl_ms`` after storing.

    An entry is a hit only if it belongs to the requested project, is
    younger than the TTL, and is non-empty.
    """

    def __init__(self, ttl_ms: int = DEFAULT_TTL_MS, clock: Clock | None = None) -> None:
        self._ttl_ms = ttl_ms
        self._clock = clock or monotonic_ms
        self._entry: CacheEntry | None = None

    @property
    def entry(self) -> CacheEntry | None:
        return self._entry

    def get(self, project_path: str) -> list[SymbolRecord] | None:
        """Return cached symbols for project_path, or None on miss."""
        entry = self._entry
        if entry is None or entry.project_path != project_path:
            return None
        if self._clock() - entry.timestamp >= self._ttl_ms:
            logger.debug("Symbol cache expired for %s", project_path)
            return None
        if not entry.symbols:
            return None
        return entry.symbols

    def put(self, project_path: str, symbols: list[SymbolRecord]) -> None:
        """Replace the slot with symbols for project_path."""
        self._entry = CacheEntry(symbols=symbols, timestamp=self._clock(), project_path=project_path)

    def invalidate(self) -> None:
        """Drop the cached entry."""
        self._entry = None
