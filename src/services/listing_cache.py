"""Listing cache - single time-limited slot holding every listing projection."""

import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Optional, Sequence

from src.models.listing import PropertyListingDto
from src.utils.config import EngineConfig
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

CACHE_KEY = "PropertyListings"

ListingLoader = Callable[[], Awaitable[Sequence[PropertyListingDto]]]


@dataclass(frozen=True)
class _CacheSlot:
    listings: tuple[PropertyListingDto, ...]
    stored_at: datetime


class ListingCache:
    """
    Whole-collection cache for listing read models.

    The unit of caching is the full listing set under one key; any write
    invalidates all of it. Slot reads and writes are lock-guarded, but the
    loader runs outside the lock, so two cold callers may both load and the
    last one to finish wins. A fill that started before an invalidation is
    returned to its caller but never stored.
    """

    def __init__(self, ttl_seconds: int = EngineConfig.LISTING_CACHE_TTL_SECONDS):
        self.ttl = timedelta(seconds=ttl_seconds)
        self._slot: Optional[_CacheSlot] = None
        self._generation = 0
        self._lock = threading.Lock()
        self._stats = {"hits": 0, "misses": 0, "fills": 0, "invalidations": 0, "stale_fills": 0}

    def _is_fresh(self, slot: _CacheSlot) -> bool:
        return datetime.now() - slot.stored_at < self.ttl

    def peek(self) -> Optional[list[PropertyListingDto]]:
        """Cached listings if present and unexpired, without counting a hit or miss."""
        with self._lock:
            slot = self._slot
            if slot is None or not self._is_fresh(slot):
                return None
            return list(slot.listings)

    async def get_or_fill(self, loader: ListingLoader) -> list[PropertyListingDto]:
        """Return cached listings, loading and storing them on a miss or expiry."""
        with self._lock:
            slot = self._slot
            if slot is not None and self._is_fresh(slot):
                self._stats["hits"] += 1
                return list(slot.listings)

            expired = slot is not None
            if expired:
                self._slot = None
            self._stats["misses"] += 1
            generation = self._generation

        logger.debug("Listing cache miss", cache_key=CACHE_KEY, expired=expired)
        listings = tuple(await loader())
        self._store(listings, generation)
        return list(listings)

    def _store(self, listings: tuple[PropertyListingDto, ...], generation: int) -> None:
        with self._lock:
            stale = generation != self._generation
            if stale:
                self._stats["stale_fills"] += 1
            else:
                self._slot = _CacheSlot(listings=listings, stored_at=datetime.now())
                self._stats["fills"] += 1

        if stale:
            logger.debug("Discarded listing cache fill overtaken by a write", cache_key=CACHE_KEY)
            return

        logger.debug(
            "Listing cache filled",
            cache_key=CACHE_KEY,
            listing_count=len(listings),
            ttl_seconds=int(self.ttl.total_seconds())
        )

    def invalidate(self) -> bool:
        """Drop the slot. Returns True if something was cached."""
        with self._lock:
            had_slot = self._slot is not None
            self._slot = None
            self._generation += 1
            self._stats["invalidations"] += 1

        logger.debug("Listing cache invalidated", cache_key=CACHE_KEY, had_slot=had_slot)
        return had_slot

    def stats(self) -> dict[str, Any]:
        with self._lock:
            return {
                **self._stats,
                "cached": self._slot is not None,
                "ttl_seconds": int(self.ttl.total_seconds()),
            }


# Process-wide cache for the HTTP handlers; services take a cache explicitly
_listing_cache: Optional[ListingCache] = None


def get_listing_cache() -> ListingCache:
    """Get or create the process-wide listing cache."""
    global _listing_cache
    if _listing_cache is None:
        _listing_cache = ListingCache(ttl_seconds=EngineConfig.LISTING_CACHE_TTL_SECONDS)
        logger.info(
            "ListingCache initialized",
            cache_key=CACHE_KEY,
            ttl_seconds=EngineConfig.LISTING_CACHE_TTL_SECONDS
        )
    return _listing_cache
