"""
Redis connection whose transport is supplied by a dialer.
"""

from typing import Optional

import redis.asyncio as redis

from shared.logging import get_logger
from ..config import RedisOpts
from ..tunnel import Dialer, TunnelChannel

logger = get_logger("cache.connection")


class TunneledConnection(redis.Connection):
    """A ``redis.asyncio`` connection that reads and writes over a dialed channel."""

    def __init__(self, *, dialer: Dialer, **kwargs):
        super().__init__(**kwargs)
        self._dialer = dialer
        self._channel: Optional[TunnelChannel] = None

    async def _connect(self):
        channel = await self._dialer("tcp", f"{self.host}:{self.port}")
        self._channel = channel
        self._reader = channel.reader
        self._writer = channel.writer
        logger.debug("Redis connection tunneled", host=self.host, port=self.port)

    async def disconnect(self, *args, **kwargs) -> None:
        try:
            await super().disconnect(*args, **kwargs)
        finally:
            channel, self._channel = self._channel, None
            if channel is not None:
                await channel.aclose()


def build_client(opts: RedisOpts, dialer: Optional[Dialer] = None) -> redis.Redis:
    """Build a Redis client from ``opts``, optionally routed through ``dialer``."""
    host, port = opts.address()
    pool_kwargs = {
        "host": host,
        "port": port,
        "db": opts.database,
        "password": opts.password or None,
        "decode_responses": opts.decode_responses,
        "max_connections": opts.max_active or None,
        "health_check_interval": opts.idle_timeout,
    }
    if dialer is not None:
        pool_kwargs["connection_class"] = TunneledConnection
        pool_kwargs["dialer"] = dialer

    pool = redis.ConnectionPool(**pool_kwargs)
    return redis.Redis(connection_pool=pool)
