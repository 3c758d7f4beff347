import logging
import time
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from go_to_java.models import Position, SourceUnit

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300.0

V = TypeVar("V")

QueryKey = tuple[str, int, int] | tuple[str, str]


@dataclass(frozen=True)
class CacheEntry(Generic[V]):
    value: V
    timestamp: float


@dataclass(frozen=True)
class CacheStats:
    documents: int
    queries: int
    ttl: float


class TtlCache(Generic[V]):
    """Dictionary whose entries turn into misses once ``ttl`` seconds old.

    Expired entries are evicted lazily on read or by ``cleanup``. ``clock``
    is injectable so expiry can be tested without sleeping.
    """

    def __init__(self, ttl: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[Hashable, CacheEntry[V]] = {}

    def get(self, key: Hashable) -> V | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.timestamp >= self.ttl:
            del self._entries[key]
            return None
        return entry.value

    def set(self, key: Hashable, value: V) -> None:
        self._entries[key] = CacheEntry(value=value, timestamp=self._clock())

    def invalidate(self, predicate: Callable[[Any], bool]) -> int:
        stale = [key for key in self._entries if predicate(key)]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def cleanup(self) -> int:
        now = self._clock()
        return self.invalidate(lambda key: now - self._entries[key].timestamp >= self.ttl)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key) is not None


class ResolutionCache:
    """Parsed documents and oracle answers, both expiring after the same TTL.

    Document entries are keyed by document identifier. Query entries are keyed
    by ``(document, row, column)`` for definition lookups and
    ``(document, type_name)`` for hover lookups. Failed lookups are never
    stored, so a miss always means "ask again".
    """

    def __init__(self, ttl: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.monotonic) -> None:
        self.documents: TtlCache[SourceUnit] = TtlCache(ttl, clock)
        self.queries: TtlCache[Any] = TtlCache(ttl, clock)
        self.ttl = ttl

    @staticmethod
    def definition_key(document: str, position: Position) -> QueryKey:
        return (document, position.row, position.column)

    @staticmethod
    def hover_key(document: str, type_name: str) -> QueryKey:
        return (document, type_name)

    def get_document(self, document: str) -> SourceUnit | None:
        return self.documents.get(document)

    def set_document(self, document: str, unit: SourceUnit) -> None:
        self.documents.set(document, unit)

    def get_query(self, key: QueryKey) -> Any | None:
        return self.queries.get(key)

    def set_query(self, key: QueryKey, value: Any) -> None:
        if value is not None:
            self.queries.set(key, value)

    def invalidate(self, document: str) -> int:
        """Drop every entry derived from ``document``."""
        removed = self.documents.invalidate(lambda key: key == document)
        removed += self.queries.invalidate(lambda key: key[0] == document)
        if removed:
            logger.debug("Invalidated %d cache entries for %s", removed, document)
        return removed

    def cleanup(self) -> int:
        return self.documents.cleanup() + self.queries.cleanup()

    def clear(self) -> None:
        self.documents.clear()
        self.queries.clear()

    def stats(self) -> CacheStats:
        return CacheStats(documents=len(self.documents), queries=len(self.queries), ttl=self.ttl)
