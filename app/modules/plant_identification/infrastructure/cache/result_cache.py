# 📄 File: app/modules/plant_identification/infrastructure/cache/result_cache.py
# 🧭 Purpose (Layman Explanation):
# Remembers recent identification answers for a few minutes, so scanning the same photo again
# does not cost another call to the plant recognition service.
# 🧪 Purpose (Technical Summary):
# Time-bounded result cache keyed by the normalized image fingerprint. Two backends behind one interface:
# an in-process OrderedDict guarded by an asyncio.Lock, and Redis with native key TTL plus a sorted-set
# index that enforces the capacity cap oldest-first. Expiry is checked lazily on every read.
# 🔗 Dependencies:
# - redis.asyncio: Shared cache backend
# - pydantic: CacheEntry JSON serialization
# 🔄 Connected Modules / Calls From:
# Called by: IdentificationService (lookup before classification, store after)
# Built by: service_factory.create_identification_service

import asyncio
import time
from abc import ABC, abstractmethod
from collections import OrderedDict
from typing import Any, Callable, Dict, Optional

from redis.asyncio import Redis

from app.shared.utils.logging import get_logger

from ...domain.models.identification import CacheEntry, IdentificationResult

logger = get_logger(__name__)

KEY_PREFIX = "plant:identify:"

Clock = Callable[[], float]


class ResultCache(ABC):
    """Interface shared by the cache backends."""

    cache_type = "identification"

    def __init__(self, max_entries: int = 1000, clock: Optional[Clock] = None):
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self.max_entries = max_entries
        self.clock = clock or time.time
        self._stats = {"hits": 0, "misses": 0, "sets": 0, "evictions": 0, "expirations": 0}

    @abstractmethod
    async def get(self, key: str) -> Optional[CacheEntry]:
        """Return the live entry for key, or None. Expired entries are evicted."""

    @abstractmethod
    async def set(self, key: str, result: IdentificationResult, ttl: int) -> None:
        """Store result for ttl seconds. Last write wins."""

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Drop key. Returns True when an entry was removed."""

    @abstractmethod
    async def clear(self) -> None:
        pass

    @abstractmethod
    async def size(self) -> int:
        pass

    async def close(self) -> None:
        pass

    async def stats(self) -> Dict[str, Any]:
        lookups = self._stats["hits"] + self._stats["misses"]
        return {
            **self._stats,
            "size": await self.size(),
            "max_entries": self.max_entries,
            "hit_rate": round(self._stats["hits"] / lookups, 4) if lookups else 0.0,
        }

    def _make_entry(self, result: IdentificationResult, ttl: int) -> CacheEntry:
        return CacheEntry(result=result, expires_at=self.clock() + ttl)


class InMemoryResultCache(ResultCache):
    """Process-local cache. Insertion order doubles as the eviction order."""

    cache_type = "memory"

    def __init__(self, max_entries: int = 1000, clock: Optional[Clock] = None):
        super().__init__(max_entries, clock)
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> Optional[CacheEntry]:
        async with self._lock:
            entry = self._entries.get(key)

            if entry is not None and entry.is_expired(self.clock()):
                del self._entries[key]
                self._stats["expirations"] += 1
                entry = None

            self._stats["hits" if entry else "misses"] += 1

        logger.performance.log_cache_operation("get", self.cache_type, key, hit=entry is not None)
        return entry

    async def set(self, key: str, result: IdentificationResult, ttl: int) -> None:
        entry = self._make_entry(result, ttl)

        async with self._lock:
            self._entries.pop(key, None)
            self._entries[key] = entry
            self._stats["sets"] += 1

            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)
                self._stats["evictions"] += 1

        logger.performance.log_cache_operation("set", self.cache_type, key, extra={"ttl": ttl})

    async def delete(self, key: str) -> bool:
        async with self._lock:
            return self._entries.pop(key, None) is not None

    async def clear(self) -> None:
        async with self._lock:
            self._entries.clear()

    async def size(self) -> int:
        return len(self._entries)


class RedisResultCache(ResultCache):
    """
    Redis-backed cache shared across workers.

    Entries are JSON strings stored with EX=ttl. A sorted set scored by
    insertion time tracks live keys so the capacity cap can evict oldest-first.
    """

    cache_type = "redis"

    def __init__(
        self,
        client: Redis,
        max_entries: int = 1000,
        clock: Optional[Clock] = None,
        index_key: str = f"{KEY_PREFIX}index",
    ):
        super().__init__(max_entries, clock)
        self.client = client
        self.index_key = index_key

    @classmethod
    def from_url(cls, redis_url: str, **kwargs) -> "RedisResultCache":
        client = Redis.from_url(
            redis_url,
            encoding="utf-8",
            decode_responses=True,
            retry_on_timeout=True,
            health_check_interval=30,
        )
        return cls(client, **kwargs)

    async def get(self, key: str) -> Optional[CacheEntry]:
        raw = await self.client.get(key)
        entry = None

        if raw is not None:
            entry = CacheEntry.model_validate_json(raw)
            if entry.is_expired(self.clock()):
                await self._remove(key)
                self._stats["expirations"] += 1
                entry = None
        else:
            await self.client.zrem(self.index_key, key)

        self._stats["hits" if entry else "misses"] += 1
        logger.performance.log_cache_operation("get", self.cache_type, key, hit=entry is not None)
        return entry

    async def set(self, key: str, result: IdentificationResult, ttl: int) -> None:
        entry = self._make_entry(result, ttl)

        async with self.client.pipeline(transaction=True) as pipe:
            pipe.set(key, entry.model_dump_json(), ex=max(int(ttl), 1))
            pipe.zadd(self.index_key, {key: self.clock()})
            pipe.zcard(self.index_key)
            results = await pipe.execute()

        self._stats["sets"] += 1
        overflow = results[-1] - self.max_entries
        if overflow > 0:
            evicted = await self.client.zpopmin(self.index_key, overflow)
            evicted_keys = [member for member, _score in evicted]
            if evicted_keys:
                await self.client.delete(*evicted_keys)
                self._stats["evictions"] += len(evicted_keys)

        logger.performance.log_cache_operation("set", self.cache_type, key, extra={"ttl": ttl})

    async def delete(self, key: str) -> bool:
        return await self._remove(key) > 0

    async def _remove(self, key: str) -> int:
        async with self.client.pipeline(transaction=True) as pipe:
            pipe.delete(key)
            pipe.zrem(self.index_key, key)
            deleted, _ = await pipe.execute()
        return deleted

    async def clear(self) -> None:
        keys = await self.client.zrange(self.index_key, 0, -1)
        if keys:
            await self.client.delete(*keys)
        await self.client.delete(self.index_key)

    async def size(self) -> int:
        return await self.client.zcard(self.index_key)

    async def close(self) -> None:
        await self.client.aclose()
