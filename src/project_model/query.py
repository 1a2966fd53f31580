"""Memoized queries validated by file digests.

A query result is cached per ``(query name, key)``. Each computation runs
inside a ``QueryFrame`` that collects its side outputs: declared file
dependencies, the lowest durability it reported, and whether it performed an
untracked read. A cached result is reused while the digests of its declared
files are unchanged and it performed no untracked read.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Hashable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Literal, cast

from project_model.digests import DigestSnapshot, DigestTracker, current_digests, inputs_digest

logger = logging.getLogger(__name__)


class Durability(IntEnum):
    """How often a cached value is expected to change; lower changes more."""

    LOW = 0
    MEDIUM = 1
    HIGH = 2


@dataclass
class QueryFrame:
    """Side outputs collected while one query computes."""

    query: str
    key: Hashable
    digests: DigestTracker = field(default_factory=DigestTracker)
    durability: Durability = Durability.HIGH
    untracked: bool = False

    def declare_dependency(self, file_path: Path) -> None:
        """Record a file whose content the result depends on."""
        self.digests.declare_dependency(file_path)

    def report_synthetic_read(self, durability: Durability) -> None:
        """Lower the result's durability to at most ``durability``."""
        self.durability = min(self.durability, durability)

    def report_untracked_read(self) -> None:
        """Mark the result as depending on state no digest can capture."""
        self.untracked = True

    def absorb(self, entry: QueryEntry[object]) -> None:
        """Inherit the dependencies of a nested query result."""
        self.digests.merge(entry.digests)
        self.report_synthetic_read(entry.durability)
        if entry.untracked:
            self.untracked = True


@dataclass(frozen=True)
class QueryEntry[T]:
    """Cached query result with the inputs it was computed from."""

    value: T
    digests: DigestSnapshot
    inputs_digest: str
    durability: Durability
    untracked: bool
    generation: int

    def is_fresh(self) -> bool:
        """Return True when the result may be reused as-is."""
        if self.untracked:
            return False
        return inputs_digest(current_digests(self.digests)) == self.inputs_digest


_ACTIVE_FRAMES: ContextVar[tuple[QueryFrame, ...]] = ContextVar(
    "project_model.query_frames", default=()
)


def active_frame() -> QueryFrame | None:
    """Return the frame of the innermost running query, if any.

    Returns
    -------
    QueryFrame | None
        Innermost frame, or ``None`` outside of a query.
    """
    frames = _ACTIVE_FRAMES.get()
    return frames[-1] if frames else None


@contextmanager
def query_frame(query: str, key: Hashable) -> Iterator[QueryFrame]:
    """Run a block as the computation of ``query`` for ``key``.

    Yields
    ------
    QueryFrame
        Frame collecting the block's side outputs.
    """
    frame = QueryFrame(query=query, key=key)
    token = _ACTIVE_FRAMES.set((*_ACTIVE_FRAMES.get(), frame))
    try:
        yield frame
    finally:
        _ACTIVE_FRAMES.reset(token)


@dataclass
class QueryStats:
    """Counters for cache behaviour."""

    hits: int = 0
    misses: int = 0
    shared: int = 0


class QueryCache:
    """Get-or-compute cache with one in-flight computation per key."""

    def __init__(self) -> None:
        self._entries: dict[tuple[str, Hashable], QueryEntry[object]] = {}
        self._key_locks: dict[tuple[str, Hashable], threading.Lock] = {}
        self._generation = 0
        self._lock = threading.Lock()
        self.stats = QueryStats()

    def _key_lock(self, cache_key: tuple[str, Hashable]) -> threading.Lock:
        with self._lock:
            lock = self._key_locks.get(cache_key)
            if lock is None:
                lock = threading.Lock()
                self._key_locks[cache_key] = lock
            return lock

    def _stored_generation(self, cache_key: tuple[str, Hashable]) -> int:
        with self._lock:
            entry = self._entries.get(cache_key)
            return 0 if entry is None else entry.generation

    def _record(self, outcome: Literal["hits", "misses", "shared"]) -> None:
        with self._lock:
            setattr(self.stats, outcome, getattr(self.stats, outcome) + 1)

    def _prune_key_locks(self) -> None:
        # Held locks belong to in-flight computations and must survive.
        for cache_key, lock in list(self._key_locks.items()):
            if cache_key not in self._entries and not lock.locked():
                del self._key_locks[cache_key]

    def get_or_compute[T](self, query: str, key: Hashable, compute: Callable[[], T]) -> T:
        """Return the cached value for ``(query, key)`` or compute it.

        Callers that waited while another thread computed the same key share
        that result, even when it is not reusable by later callers.

        Parameters
        ----------
        query
            Query name.
        key
            Query key, typically a project identifier.
        compute
            Computation run inside a fresh ``QueryFrame`` on a miss.

        Returns
        -------
        T
            Cached or freshly computed value.
        """
        cache_key = (query, key)
        seen_generation = self._stored_generation(cache_key)
        with self._key_lock(cache_key):
            entry = self._entries.get(cache_key)
            if entry is not None and entry.generation != seen_generation:
                self._record("shared")
            elif entry is not None and entry.is_fresh():
                self._record("hits")
            else:
                self._record("misses")
                entry = self._compute(cache_key, compute)
        parent = active_frame()
        if parent is not None:
            parent.absorb(entry)
        return cast("T", entry.value)

    def _compute[T](
        self,
        cache_key: tuple[str, Hashable],
        compute: Callable[[], T],
    ) -> QueryEntry[object]:
        query, key = cache_key
        logger.debug("computing query %s for %s", query, key)
        with query_frame(query, key) as frame:
            value = compute()
        digests = frame.digests.snapshot()
        with self._lock:
            self._generation += 1
            generation = self._generation
            entry: QueryEntry[object] = QueryEntry(
                value=value,
                digests=digests,
                inputs_digest=inputs_digest(digests),
                durability=frame.durability,
                untracked=frame.untracked,
                generation=generation,
            )
            self._entries[cache_key] = entry
        return entry

    def peek(self, query: str, key: Hashable) -> QueryEntry[object] | None:
        """Return the stored entry without validating it.

        Returns
        -------
        QueryEntry[object] | None
            Stored entry, if any.
        """
        with self._lock:
            return self._entries.get((query, key))

    def invalidate(self, durability: Durability = Durability.HIGH) -> int:
        """Drop entries whose durability is at most ``durability``.

        Returns
        -------
        int
            Number of dropped entries.
        """
        with self._lock:
            stale = [
                cache_key
                for cache_key, entry in self._entries.items()
                if entry.durability <= durability
            ]
            for cache_key in stale:
                del self._entries[cache_key]
            self._prune_key_locks()
        return len(stale)

    def clear(self) -> None:
        """Drop every cached entry."""
        with self._lock:
            self._entries.clear()
            self._prune_key_locks()


__all__ = [
    "Durability",
    "QueryCache",
    "QueryEntry",
    "QueryFrame",
    "QueryStats",
    "active_frame",
    "query_frame",
]
