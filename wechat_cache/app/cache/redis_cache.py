"""
Redis caching client.

Thin wrapper over ``redis.asyncio``: get/set/exists/delete on string keys,
each with an optional deadline. ``get`` and ``exists`` collapse store errors
into "absent" unless the cache is built with ``strict=True``; ``lookup`` and
``probe`` expose the underlying three-way result.
"""

import asyncio
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Any, Optional, Union

import redis.asyncio as redis

from shared.logging import get_logger
from shared.errors import CacheError
from ..config import RedisOpts, OverSSH
from ..tunnel import Dialer, SSHTunnel, create_tunnel
from .connection import build_client


class LookupStatus(str, Enum):
    """Outcome of a cache read."""
    FOUND = "found"
    NOT_FOUND = "not_found"
    TRANSPORT_ERROR = "transport_error"


@dataclass
class CacheLookup:
    """Result of a cache read."""
    status: LookupStatus
    value: Any = None
    error: Optional[BaseException] = None

    @property
    def found(self) -> bool:
        return self.status == LookupStatus.FOUND


class RedisCache:
    """Redis-backed cache client."""

    def __init__(
        self,
        conn: redis.Redis,
        default_timeout: Optional[float] = None,
        strict: bool = False,
        tunnel: Optional[SSHTunnel] = None
    ):
        self.conn = conn
        self.default_timeout = default_timeout
        self.strict = strict
        self._tunnel = tunnel
        self.logger = get_logger("cache.redis")

    @classmethod
    def from_opts(
        cls,
        opts: RedisOpts,
        dialer: Optional[Dialer] = None,
        default_timeout: Optional[float] = None,
        strict: bool = False
    ) -> "RedisCache":
        """Connect directly, or through a custom ``dialer``."""
        return cls(build_client(opts, dialer), default_timeout=default_timeout, strict=strict)

    @classmethod
    def over_ssh(
        cls,
        opts: RedisOpts,
        over_ssh: OverSSH,
        default_timeout: Optional[float] = None,
        strict: bool = False
    ) -> "RedisCache":
        """Connect through the SSH gateway described by ``over_ssh``."""
        tunnel = create_tunnel(over_ssh)
        return cls(
            build_client(opts, tunnel.make_dialer()),
            default_timeout=default_timeout,
            strict=strict,
            tunnel=tunnel
        )

    def set_conn(self, conn: redis.Redis):
        """Replace the underlying Redis client."""
        self.conn = conn

    def set_default_timeout(self, timeout: Optional[float]):
        """Set the deadline used when a call passes none."""
        self.default_timeout = timeout

    async def _call(self, awaitable, timeout: Optional[float]):
        if timeout is None:
            timeout = self.default_timeout
        if timeout is None:
            return await awaitable
        return await asyncio.wait_for(awaitable, timeout)

    async def lookup(self, key: str, timeout: Optional[float] = None) -> CacheLookup:
        """Read ``key``, keeping absent and unreachable apart."""
        try:
            value = await self._call(self.conn.get(key), timeout)
        except Exception as e:
            self.logger.warning("Cache get failed", key=key, error=str(e))
            return CacheLookup(LookupStatus.TRANSPORT_ERROR, error=e)

        if value is None:
            return CacheLookup(LookupStatus.NOT_FOUND)
        return CacheLookup(LookupStatus.FOUND, value=value)

    async def probe(self, key: str, timeout: Optional[float] = None) -> CacheLookup:
        """Check ``key`` for existence, keeping absent and unreachable apart."""
        try:
            count = await self._call(self.conn.exists(key), timeout)
        except Exception as e:
            self.logger.warning("Cache exists failed", key=key, error=str(e))
            return CacheLookup(LookupStatus.TRANSPORT_ERROR, error=e)

        if count > 0:
            return CacheLookup(LookupStatus.FOUND, value=True)
        return CacheLookup(LookupStatus.NOT_FOUND, value=False)

    def _raise_if_strict(self, key: str, result: CacheLookup):
        if self.strict and result.status == LookupStatus.TRANSPORT_ERROR:
            raise CacheError(
                f"Cache unavailable: {result.error}",
                details={"key": key}
            ) from result.error

    async def get(self, key: str, timeout: Optional[float] = None) -> Any:
        """Get a value; ``None`` when absent or when the store fails."""
        result = await self.lookup(key, timeout)
        self._raise_if_strict(key, result)
        return result.value

    async def set(
        self,
        key: str,
        value: Any,
        ttl: Union[int, timedelta],
        timeout: Optional[float] = None
    ) -> None:
        """Set a value with an expiry."""
        await self._call(self.conn.set(key, value, ex=ttl), timeout)

    async def exists(self, key: str, timeout: Optional[float] = None) -> bool:
        """Whether ``key`` exists; ``False`` when the store fails."""
        result = await self.probe(key, timeout)
        self._raise_if_strict(key, result)
        return result.found

    async def delete(self, key: str, timeout: Optional[float] = None) -> None:
        """Delete ``key``."""
        await self._call(self.conn.delete(key), timeout)

    async def close(self):
        """Release the connection pool and any shared SSH session."""
        await self.conn.aclose(close_connection_pool=True)
        if self._tunnel is not None:
            await self._tunnel.close()
        self.logger.info("Redis cache closed")
