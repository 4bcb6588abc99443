"""In-memory cache of resolved place names keyed by quantized coordinates."""

import logging
import threading
from datetime import datetime, timedelta
from typing import Callable

from .constants import Constants
from .types import CacheEntry, CacheStats, is_known_place
from .utils import CoordinateGrid


class LocationCache:
    """
    Bounded, TTL-based store mapping a quantized coordinate to a (city, country) pair.

    Nearby coordinates share one entry: both axes are rounded to ``precision``
    degrees (0.01 by default, roughly 1 km at the equator) before being joined
    into the key. Reads expire entries lazily; writes trim the store back to
    ``max_size`` by dropping the oldest entries first. Every operation holds a
    single lock, which is fine because the critical sections are plain
    dictionary work.

    Attributes:
        logger (logging.Logger): Logger instance for cache events.
        max_size (int): Maximum number of entries kept.
        ttl (timedelta): Age after which an entry is treated as absent.
        grid (CoordinateGrid): Quantizer producing the cache keys.
    """

    def __init__(
        self,
        logger: logging.Logger,
        max_size: int = Constants.CACHE_MAX_SIZE,
        ttl: timedelta = timedelta(days=Constants.CACHE_EXPIRY_DAYS),
        precision: float = Constants.CACHE_COORDINATE_PRECISION,
        clock: Callable[[], datetime] = datetime.now,
    ):
        if max_size < 1:
            raise ValueError(f"Cache max_size must be at least 1, got {max_size}")
        self.logger = logger
        self.max_size = max_size
        self.ttl = ttl
        self.grid = CoordinateGrid(precision)
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def key_for(self, latitude: float, longitude: float) -> str:
        """Cache key of a coordinate."""
        return self.grid.key(latitude, longitude)

    def get(self, latitude: float, longitude: float) -> tuple[str, str] | None:
        """
        Look up the place name cached for a coordinate.

        Returns:
            (city, country) or None on a miss. An expired entry is removed
            and reported as a miss.
        """
        key = self.key_for(latitude, longitude)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            if self._clock() - entry.cached_at > self.ttl:
                del self._entries[key]
                self.logger.debug(f"Expired cache entry removed: {key}")
                return None

            return entry.city, entry.country

    def put(self, latitude: float, longitude: float, city: str, country: str) -> bool:
        """
        Store a place name for a coordinate.

        A result where both city and country are unknown is never stored, so a
        miss is not remembered.

        Returns:
            True if the entry was stored.
        """
        if not is_known_place(city) and not is_known_place(country):
            return False

        key = self.key_for(latitude, longitude)
        with self._lock:
            self._entries[key] = CacheEntry(city=city, country=country, cached_at=self._clock())
            overflow = len(self._entries) - self.max_size
            if overflow > 0:
                oldest = sorted(self._entries, key=lambda k: self._entries[k].cached_at)[:overflow]
                for old_key in oldest:
                    del self._entries[old_key]
                self.logger.debug(f"Evicted {overflow} oldest cache entries")
        return True

    def stats(self) -> CacheStats:
        """Size and age range of the cached entries."""
        with self._lock:
            timestamps = [entry.cached_at for entry in self._entries.values()]
            return CacheStats(
                size=len(timestamps),
                oldest_entry=min(timestamps) if timestamps else None,
                newest_entry=max(timestamps) if timestamps else None,
                precision=self.grid.step,
                ttl_days=self.ttl.total_seconds() / 86400,
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
