"""
In-process TTL caches for reconciled stats and the competition summary.

Every cache region shares one contract: `get(key)` returns the cached value or
None, never raising for a missing key. All regions are rebuildable from the
database, so they can be invalidated at any time.
"""

import asyncio
import time
from typing import Dict, Generic, Hashable, Optional, Tuple, TypeVar

from tcbot.config import Config
from tcbot.constants import CacheConstants
from tcbot.utils.logger import setup_logger

logger = setup_logger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class TtlCache(Generic[K, V]):
    """Dict-backed cache with per-entry TTL and a size bound."""
    
    def __init__(self, name: str, ttl: Optional[float] = None, max_size: int = CacheConstants.DEFAULT_MAX_CACHE_SIZE):
        self.name = name
        self._ttl = ttl if ttl is not None else Config.CACHE_TTL_SECONDS
        self._max_size = max_size
        self._cache: Dict[K, Tuple[float, V]] = {}  # key -> (timestamp, value)
        self._lock = asyncio.Lock()
    
    async def get(self, key: K) -> Optional[V]:
        async with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None
            timestamp, value = entry
            if time.monotonic() - timestamp >= self._ttl:
                logger.debug(f"Expired entry for {key} in {self.name} cache")
                self._cache.pop(key, None)
                return None
            return value
    
    async def put(self, key: K, value: V):
        async with self._lock:
            # Re-inserting keeps the dict in age order
            self._cache.pop(key, None)
            self._cache[key] = (time.monotonic(), value)
            if len(self._cache) > self._max_size:
                self._cleanup_cache()
    
    async def invalidate(self, key: K):
        async with self._lock:
            if self._cache.pop(key, None) is not None:
                logger.debug(f"Invalidated {key} in {self.name} cache")
    
    async def invalidate_all(self):
        async with self._lock:
            self._cache.clear()
        logger.debug(f"Cleared {self.name} cache")
    
    def __len__(self) -> int:
        return len(self._cache)
    
    def _cleanup_cache(self):
        """Remove oldest cache entries to stay within size limit."""
        # Oldest first; equal timestamps keep insertion order
        sorted_items = sorted(self._cache.items(), key=lambda x: x[1][0])
        self._cache = dict(sorted_items[-self._max_size:])
        logger.debug(f"Cleaned {self.name} cache, kept {len(self._cache)} entries")


class StatsCaches:
    """All cache regions owned by the running bot."""
    
    COMPETITION_SUMMARY_KEY = "competition_summary"
    
    def __init__(self, ttl: Optional[float] = None):
        self.competition_summary: TtlCache = TtlCache("competition summary", ttl=ttl, max_size=1)
        self.tc_stats: TtlCache = TtlCache("tc stats", ttl=ttl)
        self.initial_stats: TtlCache = TtlCache("initial stats", ttl=ttl)
        self.total_stats: TtlCache = TtlCache("total stats", ttl=ttl)
        self.offset_stats: TtlCache = TtlCache("offset stats", ttl=ttl)
    
    def regions(self):
        return (self.competition_summary, self.tc_stats, self.initial_stats, self.total_stats, self.offset_stats)
    
    async def invalidate_user(self, user_id: int):
        """Drop everything cached for one user, and the summary that includes them."""
        for region in (self.tc_stats, self.initial_stats, self.total_stats, self.offset_stats):
            await region.invalidate(user_id)
        await self.competition_summary.invalidate_all()
    
    async def invalidate_all(self):
        logger.info("Clearing all stats caches")
        for region in self.regions():
            await region.invalidate_all()
