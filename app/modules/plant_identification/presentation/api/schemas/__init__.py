from .identification_schemas import (
    ClearCacheRequest,
    ClearCacheResponse,
    IdentifyRequest,
    IdentifyResponse,
    StatsResponse,
)

__all__ = [
    "ClearCacheRequest",
    "ClearCacheResponse",
    "IdentifyRequest",
    "IdentifyResponse",
    "StatsResponse",
]
