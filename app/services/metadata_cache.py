"""
Metadata Cache

Bounded, time-expiring memo of enrichment results keyed by raw title.
Empty records (lookup misses and upstream failures) are cached exactly like
successful ones and are only recomputed after the TTL expires.
"""
import logging
import time
from collections import OrderedDict
from typing import Callable

from app.models import MetadataRecord


logger = logging.getLogger(__name__)


class MetadataCache:
    """LRU cache with a per-entry TTL; whichever limit is hit first evicts."""

    def __init__(
        self,
        max_entries: int = 1000,
        ttl_seconds: float = 3600.0,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries <= 0:
            raise ValueError("max_entries must be > 0")
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be > 0")
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._data: OrderedDict[str, tuple[float, MetadataRecord]] = OrderedDict()

    def get(self, title: str) -> MetadataRecord | None:
        """Return the cached record for a title, or None if absent or expired."""
        entry = self._data.get(title)
        if entry is None:
            return None

        stored_at, record = entry
        if self._clock() - stored_at >= self.ttl_seconds:
            del self._data[title]
            logger.debug("Cache entry expired: %s", title)
            return None

        self._data.move_to_end(title)
        return record

    def put(self, title: str, record: MetadataRecord) -> None:
        """Store a record, evicting the least recently used entries past capacity."""
        self._data[title] = (self._clock(), record)
        self._data.move_to_end(title)
        while len(self._data) > self.max_entries:
            evicted, _ = self._data.popitem(last=False)
            logger.debug("Cache entry evicted: %s", evicted)

    def clear(self) -> None:
        self._data.clear()

    def __contains__(self, title: object) -> bool:
        """Membership test that leaves recency and expired entries untouched."""
        entry = self._data.get(title) if isinstance(title, str) else None
        return entry is not None and self._clock() - entry[0] < self.ttl_seconds

    def __len__(self) -> int:
        return len(self._data)
