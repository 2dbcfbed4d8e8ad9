"""MetadataCache — short-lived stat cache keyed by normalized path."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .utils import is_ancestor, normalize_path

if TYPE_CHECKING:
    from collections.abc import Callable

    from .types import FileStat

logger = logging.getLogger(__name__)

DEFAULT_TTL = 10.0


@dataclass
class CacheEntry:
    """A cached stat result and how often it was served."""

    key: str
    value: FileStat
    created_at: float
    hits: int = 0


class MetadataCache:
    """Time-bounded cache of ``FileStat`` results.

    Entries expire ``ttl`` seconds after insertion regardless of use; there
    is no capacity bound and no LRU.  Expired entries are evicted when they
    are looked up and swept on every insert.  All access is guarded by a
    lock, so the cache may be shared between the event loop and other
    threads.

    Every invalidation bumps ``generation``.  A caller that reads the
    generation before fetching a stat passes it back to ``put``; if any
    invalidation happened in between, the possibly stale result is dropped.
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    @staticmethod
    def key_for(path: str) -> str:
        return "stat:" + normalize_path(path)

    # ------------------------------------------------------------------
    # Lookup / insert
    # ------------------------------------------------------------------

    def get(self, path: str) -> FileStat | None:
        key = self.key_for(path)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._expired(entry, self._clock()):
                self._evict(key)
                return None
            entry.hits += 1
            return entry.value

    def put(self, path: str, stat: FileStat, *, generation: int | None = None) -> bool:
        """Cache *stat* for *path*.

        With *generation*, nothing is stored if any invalidation happened
        since that generation was read.  Returns whether the entry was stored.
        """
        key = self.key_for(path)
        with self._lock:
            if generation is not None and generation != self._generation:
                logger.debug("Dropping stale stat for %s", key[len("stat:"):])
                return False
            now = self._clock()
            self._sweep(now)
            self._entries[key] = CacheEntry(key=key, value=stat, created_at=now)
            return True

    # ------------------------------------------------------------------
    # Invalidation
    # ------------------------------------------------------------------

    def invalidate(self, path: str) -> None:
        with self._lock:
            self._generation += 1
            self._entries.pop(self.key_for(path), None)

    def invalidate_tree(self, path: str) -> None:
        """Drop *path* and every cached path below it."""
        root = normalize_path(path)
        with self._lock:
            self._generation += 1
            self._entries.pop(self.key_for(root), None)
            for key in [k for k in self._entries if is_ancestor(root, k[len("stat:"):])]:
                del self._entries[key]

    def clear(self) -> None:
        with self._lock:
            self._generation += 1
            self._entries.clear()

    def purge_expired(self) -> int:
        """Evict every expired entry, returning how many were removed."""
        with self._lock:
            return self._sweep(self._clock())

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def hits(self, path: str) -> int:
        with self._lock:
            entry = self._entries.get(self.key_for(path))
            return entry.hits if entry is not None else 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, str):
            return False
        key = self.key_for(path)
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and not self._expired(entry, self._clock())

    # ------------------------------------------------------------------
    # Internals (caller holds the lock)
    # ------------------------------------------------------------------

    def _expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.created_at >= self.ttl

    def _evict(self, key: str) -> None:
        entry = self._entries.pop(key)
        logger.debug("%d cache hits for stat requests on %s", entry.hits, key[len("stat:"):])

    def _sweep(self, now: float) -> int:
        expired = [key for key, entry in self._entries.items() if self._expired(entry, now)]
        for key in expired:
            self._evict(key)
        return len(expired)
