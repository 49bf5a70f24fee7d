"""
Query Cache
===========

Process-local store from canonical QueryDescriptor to last successful result.

POLICY:
=======
- stale_time is unbounded: an entry stays fresh until explicitly invalidated
- no focus or interval revalidation
- no retry: a failed read surfaces its error to the caller once
- concurrent reads of one key share a single in-flight fetch
- a 401 fetched under RETURN_NULL is cached as None until invalidated

ORDERING:
=========
Each entry carries a generation counter. Invalidation bumps it; a fetch
only writes its result back if the generation it started under is still
current. A superseding invalidation therefore always wins over a stale
in-flight response.

No fetch is ever cancelled. Results nobody awaits any more are dropped.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, List, Optional, Tuple
import asyncio
import logging

from ..contracts.descriptors import DescriptorMatcher, QueryDescriptor, matches
from ..contracts.errors import HttpError
from ..contracts.policy import UnauthorizedPolicy
from ..observability import ObservabilityEngine
from .resolver import KeyResolver

if TYPE_CHECKING:
    from ..transport import Transport


logger = logging.getLogger(__name__)

Fetcher = Callable[[QueryDescriptor], Awaitable[Any]]


# =============================================================================
# ENTRIES
# =============================================================================

class EntryStatus(Enum):
    """Lifecycle of a cache entry."""
    FRESH = "fresh"
    STALE = "stale"
    FETCHING = "fetching"
    ERROR = "error"


@dataclass
class CacheEntry:
    """
    Mutable cache slot for one canonical descriptor.

    Created on first read, updated in place on fetch completion.
    """
    descriptor: QueryDescriptor
    data: Any = None
    status: EntryStatus = EntryStatus.STALE
    last_error: Optional[Exception] = None
    updated_at: Optional[datetime] = None
    generation: int = 0
    inflight: Optional[asyncio.Future] = None

    @property
    def is_fetching(self) -> bool:
        return self.inflight is not None and not self.inflight.done()

    def snapshot(self) -> CacheEntrySnapshot:
        return CacheEntrySnapshot(
            descriptor=self.descriptor,
            data=self.data,
            status=self.status,
            last_error=self.last_error,
            updated_at=self.updated_at,
            generation=self.generation
        )


@dataclass(frozen=True)
class CacheEntrySnapshot:
    """Read-only copy of an entry handed to callers."""
    descriptor: QueryDescriptor
    data: Any
    status: EntryStatus
    last_error: Optional[Exception]
    updated_at: Optional[datetime]
    generation: int


@dataclass(frozen=True)
class CacheStats:
    """Counters since the cache was created."""
    total_entries: int
    hit_count: int
    miss_count: int
    fetch_count: int
    deduplicated_count: int
    invalidation_count: int

    @property
    def hit_rate(self) -> float:
        total = self.hit_count + self.miss_count
        return self.hit_count / total if total > 0 else 0.0


# =============================================================================
# CACHE
# =============================================================================

class QueryCache:
    """
    Fetch-or-serve cache keyed by canonical query descriptors.

    The default fetch path is resolve (KeyResolver) then GET (Transport).
    A per-read ``fetcher`` replaces that path for endpoints whose URL
    cannot be derived from the descriptor.
    """

    def __init__(
        self,
        transport: Transport,
        resolver: Optional[KeyResolver] = None,
        default_unauthorized: UnauthorizedPolicy = UnauthorizedPolicy.THROW,
        observability: Optional[ObservabilityEngine] = None
    ):
        self._transport = transport
        self._resolver = resolver or KeyResolver()
        self._default_unauthorized = default_unauthorized
        self._observability = observability or ObservabilityEngine()
        self._entries: Dict[Tuple[Any, ...], CacheEntry] = {}
        self._hits = 0
        self._misses = 0
        self._fetches = 0
        self._deduplicated = 0
        self._invalidations = 0

    @property
    def resolver(self) -> KeyResolver:
        return self._resolver

    # =========================================================================
    # READ
    # =========================================================================

    async def read(
        self,
        descriptor: QueryDescriptor,
        on_unauthorized: Optional[UnauthorizedPolicy] = None,
        *,
        enabled: bool = True,
        fetcher: Optional[Fetcher] = None
    ) -> Any:
        """
        Serve the cached value, or fetch it.

        ``enabled=False`` never fetches and returns whatever is cached
        (or None). With ``on_unauthorized=RETURN_NULL`` an HTTP 401
        resolves to None instead of raising; when this read starts the
        fetch, that None is stored as fresh data like any other result.
        """
        policy = on_unauthorized or self._default_unauthorized

        if not enabled:
            entry = self._entries.get(descriptor.key)
            return entry.data if entry is not None else None

        entry = self._entries.get(descriptor.key)
        if entry is None:
            entry = CacheEntry(descriptor=descriptor)
            self._entries[descriptor.key] = entry

        if entry.status == EntryStatus.FRESH:
            self._hits += 1
            self._observability.count("cache_hits_total")
            logger.debug("cache hit %s", descriptor.label)
            return entry.data

        self._misses += 1
        if entry.is_fetching:
            self._deduplicated += 1
            self._observability.count("cache_deduplicated_total")
            future = entry.inflight
        else:
            future = self._start_fetch(entry, fetcher, policy)

        try:
            # shield: one caller going away must not cancel the shared fetch
            return await asyncio.shield(future)
        except HttpError as e:
            if e.is_unauthorized and policy == UnauthorizedPolicy.RETURN_NULL:
                return None
            raise

    def _start_fetch(
        self,
        entry: CacheEntry,
        fetcher: Optional[Fetcher],
        policy: UnauthorizedPolicy
    ) -> asyncio.Future:
        self._fetches += 1
        self._observability.count("cache_fetches_total")
        generation = entry.generation
        entry.status = EntryStatus.FETCHING
        future = asyncio.ensure_future(self._fetch(entry, generation, fetcher, policy))
        entry.inflight = future
        # retrieve the exception so an unawaited failure is not reported as lost
        future.add_done_callback(lambda f: f.cancelled() or f.exception())
        return future

    async def _fetch(
        self,
        entry: CacheEntry,
        generation: int,
        fetcher: Optional[Fetcher],
        policy: UnauthorizedPolicy
    ) -> Any:
        descriptor = entry.descriptor
        try:
            if fetcher is not None:
                result = await fetcher(descriptor)
            else:
                target = self._resolver.resolve(descriptor)
                logger.debug("fetching %s -> %s", descriptor.label, target)
                result = await self._transport.send("GET", target)
        except HttpError as e:
            if not (e.is_unauthorized and policy == UnauthorizedPolicy.RETURN_NULL):
                self._record_failure(entry, generation, e)
                raise
            # a 401 under RETURN_NULL is a successful read of "no data"
            logger.debug("401 for %s stored as None", descriptor.label)
            result = None
        except Exception as e:
            self._record_failure(entry, generation, e)
            raise

        if entry.generation == generation:
            entry.data = result
            entry.status = EntryStatus.FRESH
            entry.last_error = None
            entry.updated_at = datetime.now(timezone.utc)
            entry.inflight = None
        else:
            logger.debug("discarding superseded result for %s", descriptor.label)
        return result

    @staticmethod
    def _record_failure(entry: CacheEntry, generation: int, error: Exception):
        if entry.generation == generation:
            entry.status = EntryStatus.ERROR
            entry.last_error = error
            entry.inflight = None

    # =========================================================================
    # INVALIDATION
    # =========================================================================

    def invalidate(self, matcher: DescriptorMatcher) -> int:
        """
        Mark every matching entry stale.

        ``matcher`` is a prefix descriptor or a predicate. Entries that
        are already stale and idle are left untouched. Returns how many
        entries changed state.
        """
        changed = 0
        for entry in self._entries.values():
            if not matches(matcher, entry.descriptor):
                continue
            if entry.status == EntryStatus.STALE and not entry.is_fetching:
                continue
            entry.generation += 1
            entry.status = EntryStatus.STALE
            entry.inflight = None
            changed += 1

        if changed:
            self._invalidations += changed
            if self._observability.metrics:
                self._observability.metrics.record("cache_invalidations_total", float(changed))
            logger.info("invalidated %d cache entries", changed)
        return changed

    async def refetch(
        self,
        descriptor: QueryDescriptor,
        on_unauthorized: Optional[UnauthorizedPolicy] = None,
        *,
        fetcher: Optional[Fetcher] = None
    ) -> Any:
        """Invalidate exactly this key and read it again."""
        self.invalidate(lambda d: d.key == descriptor.key)
        return await self.read(descriptor, on_unauthorized, fetcher=fetcher)

    async def poll(
        self,
        descriptor: QueryDescriptor,
        until: Callable[[Any], bool],
        interval: float = 3.0,
        *,
        max_attempts: Optional[int] = None,
        on_unauthorized: Optional[UnauthorizedPolicy] = None,
        fetcher: Optional[Fetcher] = None
    ) -> Any:
        """
        Read, then refetch every ``interval`` seconds until ``until(data)``.

        Caller-driven: the cache itself never revalidates on a timer.
        Returns the first value that satisfies ``until``, or the last one
        fetched once ``max_attempts`` reads have been made. Errors propagate
        and end the poll.
        """
        if interval < 0:
            raise ValueError("interval must not be negative")
        if max_attempts is not None and max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        data = await self.read(descriptor, on_unauthorized, fetcher=fetcher)
        attempts = 1
        while not until(data):
            if max_attempts is not None and attempts >= max_attempts:
                logger.info("stopped polling %s after %d reads", descriptor.label, attempts)
                break
            await asyncio.sleep(interval)
            data = await self.refetch(descriptor, on_unauthorized, fetcher=fetcher)
            attempts += 1
        return data

    # =========================================================================
    # INSPECTION
    # =========================================================================

    def get_data(self, descriptor: QueryDescriptor) -> Any:
        """Peek at cached data without fetching."""
        entry = self._entries.get(descriptor.key)
        return entry.data if entry is not None else None

    def entry(self, descriptor: QueryDescriptor) -> Optional[CacheEntrySnapshot]:
        entry = self._entries.get(descriptor.key)
        return entry.snapshot() if entry is not None else None

    def entries(self) -> List[CacheEntrySnapshot]:
        return [entry.snapshot() for entry in self._entries.values()]

    def clear(self):
        """Drop all entries. In-flight fetches finish into detached entries."""
        self._entries.clear()

    def get_stats(self) -> CacheStats:
        return CacheStats(
            total_entries=len(self._entries),
            hit_count=self._hits,
            miss_count=self._misses,
            fetch_count=self._fetches,
            deduplicated_count=self._deduplicated,
            invalidation_count=self._invalidations
        )


__all__ = [
    'EntryStatus', 'CacheEntry', 'CacheEntrySnapshot', 'CacheStats',
    'QueryCache', 'Fetcher',
]
