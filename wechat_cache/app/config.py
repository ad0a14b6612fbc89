"""
Configuration for the cache component.
"""

from enum import IntEnum
from typing import Optional

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from shared.config import BaseConfig


class SSHAuthMethod(IntEnum):
    """SSH authentication method."""
    PUBLIC_KEY = 1
    PASSWORD = 2


class RedisOpts(BaseConfig):
    """Redis connection settings."""

    model_config = SettingsConfigDict(env_prefix="WECHAT_REDIS_")

    host: str = Field(default="localhost:6379", description="host:port of the Redis server")
    password: Optional[str] = Field(default=None)
    database: int = Field(default=0, ge=0)
    max_idle: int = Field(default=0, ge=0)
    max_active: int = Field(default=0, ge=0, description="0 means unbounded")
    idle_timeout: int = Field(default=0, ge=0, description="seconds")
    decode_responses: bool = Field(default=True)

    def address(self) -> tuple:
        """Split ``host`` into (host, port)."""
        host, sep, port = self.host.rpartition(":")
        if not sep or not port.isdigit():
            return self.host.strip("[]"), 6379
        return host.strip("[]"), int(port)


class OverSSH(BaseConfig):
    """SSH gateway used to tunnel connections."""

    model_config = SettingsConfigDict(env_prefix="WECHAT_SSH_")

    host: str = Field(default="localhost")
    port: int = Field(default=22, gt=0, le=65535)
    auth_method: SSHAuthMethod = Field(default=SSHAuthMethod.PASSWORD)
    username: str = Field(default="root")
    password: Optional[str] = Field(default=None)
    key_file: Optional[str] = Field(default=None)
    passphrase: Optional[str] = Field(default=None)
    # None disables host key verification
    known_hosts: Optional[str] = Field(default=None)
    connect_timeout: Optional[float] = Field(default=None, gt=0)
    pooled: bool = Field(default=False)
