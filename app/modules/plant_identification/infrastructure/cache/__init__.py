from .result_cache import InMemoryResultCache, RedisResultCache, ResultCache

__all__ = ["InMemoryResultCache", "RedisResultCache", "ResultCache"]
