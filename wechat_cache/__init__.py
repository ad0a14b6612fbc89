"""
Redis cache client with optional SSH-tunneled transport.
"""

from .app.cache import RedisCache, CacheLookup, LookupStatus
from .app.config import RedisOpts, OverSSH, SSHAuthMethod
from .app.tunnel import SSHTunnel, PooledSSHTunnel, TunnelChannel, create_tunnel

__all__ = [
    "RedisCache",
    "CacheLookup",
    "LookupStatus",
    "RedisOpts",
    "OverSSH",
    "SSHAuthMethod",
    "SSHTunnel",
    "PooledSSHTunnel",
    "TunnelChannel",
    "create_tunnel",
]
