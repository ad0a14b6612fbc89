"""
Cache package.

Provides a Redis-backed cache client over plain TCP or an SSH tunnel.
"""

from .connection import TunneledConnection, build_client
from .redis_cache import RedisCache, CacheLookup, LookupStatus

__all__ = [
    "TunneledConnection",
    "build_client",
    "RedisCache",
    "CacheLookup",
    "LookupStatus",
]
