"""
Canonical decision caches.

Decisions are pure functions of (city, filters, market, season), so a cache
only ever saves work; it never changes an answer. Any cache failure is
logged and treated as a miss, and the resolver recomputes.

Backends:
  BoundedCanonicalCache  in-process, one lock, drops the oldest N entries
                         once the size threshold is exceeded
  RedisCanonicalCache    shared across build workers, JSON values with a TTL;
                         a None client turns every call into a no-op
  NullCanonicalCache     never stores anything (tests, cache-off builds)
"""

from __future__ import annotations

import json
import logging
import threading
from collections import OrderedDict
from dataclasses import asdict
from typing import Any, Optional, Protocol, Tuple

from services.facets.canonical.rules import (
    CanonicalDecision,
    CanonicalReason,
    ChangeFrequency,
    MarketData,
    Season,
)
from services.facets.config import settings

logger = logging.getLogger(__name__)

# (city hub path, sorted filters, market data, season)
CacheKey = Tuple[str, Tuple[str, ...], Optional[MarketData], Optional[Season]]


def make_key(
    city_path: str,
    filters: tuple[str, ...],
    market: MarketData | None = None,
    season: Season | None = None,
) -> CacheKey:
    return (city_path, tuple(sorted(filters)), market, season)


class CanonicalCache(Protocol):
    def get(self, key: CacheKey) -> CanonicalDecision | None: ...

    def put(self, key: CacheKey, decision: CanonicalDecision) -> None: ...

    def evict(self, count: int) -> int: ...

    def clear(self) -> None: ...


# ---------------------------------------------------------------------------
# In-process
# ---------------------------------------------------------------------------

class BoundedCanonicalCache:
    """
    Insertion-ordered map behind a single lock.

    When a put pushes the size past max_entries, the evict_batch oldest
    entries are dropped in one go.
    """

    def __init__(
        self,
        max_entries: int | None = None,
        evict_batch: int | None = None,
    ) -> None:
        self.max_entries = max_entries or settings.canonical_cache_max_entries
        self.evict_batch = evict_batch or settings.canonical_cache_evict_batch
        self._entries: OrderedDict[CacheKey, CanonicalDecision] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, key: CacheKey) -> CanonicalDecision | None:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: CacheKey, decision: CanonicalDecision) -> None:
        with self._lock:
            self._entries[key] = decision
            if len(self._entries) > self.max_entries:
                self._evict_locked(self.evict_batch)

    def evict(self, count: int) -> int:
        with self._lock:
            return self._evict_locked(count)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _evict_locked(self, count: int) -> int:
        dropped = 0
        while self._entries and dropped < count:
            self._entries.popitem(last=False)
            dropped += 1
        if dropped:
            logger.debug("Canonical cache evicted %d entries (size=%d)", dropped, len(self._entries))
        return dropped


class NullCanonicalCache:
    """Cache that never hits."""

    def get(self, key: CacheKey) -> CanonicalDecision | None:
        return None

    def put(self, key: CacheKey, decision: CanonicalDecision) -> None:
        return None

    def evict(self, count: int) -> int:
        return 0

    def clear(self) -> None:
        return None


# ---------------------------------------------------------------------------
# Redis
# ---------------------------------------------------------------------------

_KEY_PREFIX = "canonical"


def redis_key(key: CacheKey) -> str:
    """canonical:{city path}:{a+b}:{volume/competition|-}:{season|-}"""
    city_path, filters, market, season = key
    market_part = f"{market.search_volume}/{market.competition}" if market else "-"
    season_part = season.value if season else "-"
    return f"{_KEY_PREFIX}:{city_path}:{'+'.join(filters)}:{market_part}:{season_part}"


def encode_decision(decision: CanonicalDecision) -> str:
    payload = asdict(decision)
    payload["canonical_filters"] = list(decision.canonical_filters)
    payload["reason"] = decision.reason.value
    payload["change_frequency"] = decision.change_frequency.value
    return json.dumps(payload, sort_keys=True)


def decode_decision(raw: str | bytes) -> CanonicalDecision:
    payload = json.loads(raw)
    return CanonicalDecision(
        source_path=payload["source_path"],
        canonical_path=payload["canonical_path"],
        canonical_filters=tuple(payload["canonical_filters"]),
        reason=CanonicalReason(payload["reason"]),
        priority=float(payload["priority"]),
        should_index=bool(payload["should_index"]),
        change_frequency=ChangeFrequency(payload["change_frequency"]),
    )


class RedisCanonicalCache:
    """
    Redis-backed decision cache shared by every worker of a build.

    Usage:
        cache = RedisCanonicalCache(redis.Redis.from_url(settings.redis_url))
        resolver = CanonicalResolver(registry, cache=cache)

    Entries expire after ttl_seconds; evict() is a no-op because Redis
    handles expiry itself.
    """

    def __init__(self, redis: Any, ttl_seconds: int | None = None) -> None:
        """
        Args:
            redis: A sync Redis client (redis.Redis compatible).
                   May be None; all operations then degrade to cache misses.
        """
        self._redis = redis
        self.ttl_seconds = ttl_seconds or settings.canonical_cache_ttl_s

    def get(self, key: CacheKey) -> CanonicalDecision | None:
        if self._redis is None:
            return None
        rkey = redis_key(key)
        try:
            raw = self._redis.get(rkey)
            if raw is None:
                return None
            return decode_decision(raw)
        except Exception:
            logger.warning("Canonical cache GET failed for key=%s", rkey, exc_info=True)
            return None

    def put(self, key: CacheKey, decision: CanonicalDecision) -> None:
        if self._redis is None:
            return
        rkey = redis_key(key)
        try:
            self._redis.set(rkey, encode_decision(decision), ex=self.ttl_seconds)
        except Exception:
            logger.warning("Canonical cache SET failed for key=%s", rkey, exc_info=True)

    def evict(self, count: int) -> int:
        return 0

    def clear(self) -> None:
        if self._redis is None:
            return
        try:
            keys = list(self._redis.scan_iter(match=f"{_KEY_PREFIX}:*"))
            if keys:
                self._redis.delete(*keys)
        except Exception:
            logger.warning("Canonical cache CLEAR failed", exc_info=True)
