"""
Integration tests for the Redis cache routed through the SSH dialer.

A real asyncssh gateway runs on 127.0.0.1 with password auth and forwards
direct-tcpip channels to an in-process server speaking enough RESP for
get/set/exists/del.
"""

import asyncio
import pytest
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, patch

import asyncssh

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from wechat_cache import RedisCache, RedisOpts, OverSSH, SSHAuthMethod

GATEWAY_PASSWORD = "s3cret"


class FakeRedisServer:
    """Minimal RESP2 server."""

    def __init__(self):
        self.store = {}
        self.commands = []

    def execute(self, args):
        command = args[0].upper()
        self.commands.append(command)
        if command == "PING":
            return b"+PONG\r\n"
        if command == "GET":
            value = self.store.get(args[1])
            if value is None:
                return b"$-1\r\n"
            data = value.encode()
            return b"$%d\r\n%s\r\n" % (len(data), data)
        if command == "SET":
            self.store[args[1]] = args[2]
            return b"+OK\r\n"
        if command == "EXISTS":
            return b":%d\r\n" % sum(1 for key in args[1:] if key in self.store)
        if command == "DEL":
            return b":%d\r\n" % sum(1 for key in args[1:] if self.store.pop(key, None) is not None)
        return b"+OK\r\n"

    async def handle(self, reader, writer):
        try:
            while True:
                line = await reader.readline()
                if not line:
                    break
                args = []
                for _ in range(int(line[1:])):
                    length = int((await reader.readline())[1:])
                    args.append((await reader.readexactly(length + 2))[:-2].decode())
                writer.write(self.execute(args))
                await writer.drain()
        except (asyncio.IncompleteReadError, ConnectionResetError):
            pass
        finally:
            writer.close()


class Gateway:
    """Bookkeeping for the in-process SSH gateway."""

    def __init__(self):
        self.opened = 0
        self.closed = 0
        self.requested = []

    async def wait_all_closed(self, timeout=2.0):
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while self.closed < self.opened and loop.time() < deadline:
            await asyncio.sleep(0.01)


class GatewayServer(asyncssh.SSHServer):
    """Password-authenticated server that forwards every direct-tcpip channel."""

    def __init__(self, gateway):
        self.gateway = gateway

    def connection_made(self, conn):
        self.gateway.opened += 1

    def connection_lost(self, exc):
        self.gateway.closed += 1

    def begin_auth(self, username):
        return True

    def password_auth_supported(self):
        return True

    def validate_password(self, username, password):
        return password == GATEWAY_PASSWORD

    def connection_requested(self, dest_host, dest_port, orig_host, orig_port):
        self.gateway.requested.append((dest_host, dest_port))
        return True


@asynccontextmanager
async def running_server():
    fake = FakeRedisServer()
    server = await asyncio.start_server(fake.handle, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    try:
        yield fake, port
    finally:
        server.close()
        await server.wait_closed()


@asynccontextmanager
async def running_gateway():
    gateway = Gateway()
    acceptor = await asyncssh.listen(
        "127.0.0.1",
        0,
        server_factory=lambda: GatewayServer(gateway),
        server_host_keys=[asyncssh.generate_private_key("ssh-ed25519")],
    )
    try:
        yield gateway, acceptor.get_port()
    finally:
        acceptor.close()
        await acceptor.wait_closed()


def gateway_settings(port, **overrides):
    return OverSSH(
        host="127.0.0.1",
        port=port,
        auth_method=SSHAuthMethod.PASSWORD,
        username="deploy",
        password=GATEWAY_PASSWORD,
        known_hosts=None,
        **overrides
    )


class TestRedisOverSSHFlow:
    """End-to-end cache operations over a real SSH tunnel."""

    @pytest.mark.asyncio
    async def test_cache_round_trip(self):
        """Several commands share one tunneled connection."""
        async with running_server() as (fake, redis_port):
            async with running_gateway() as (gateway, ssh_port):
                cache = RedisCache.over_ssh(
                    RedisOpts(host=f"127.0.0.1:{redis_port}"),
                    gateway_settings(ssh_port),
                    default_timeout=5.0
                )

                await cache.set("access_token", "ACCESS_TOKEN", 7200)
                assert await cache.get("access_token") == "ACCESS_TOKEN"
                assert await cache.exists("access_token") is True
                await cache.delete("access_token")
                assert await cache.exists("access_token") is False
                assert await cache.get("access_token") is None

                await cache.close()
                await gateway.wait_all_closed()

        assert gateway.requested == [("127.0.0.1", redis_port)]
        assert gateway.opened == 1
        assert gateway.closed == 1
        assert {"SET", "GET", "EXISTS", "DEL"} <= set(fake.commands)

    @pytest.mark.asyncio
    async def test_strict_lookup_reports_found(self):
        async with running_server() as (fake, redis_port):
            async with running_gateway() as (gateway, ssh_port):
                cache = RedisCache.over_ssh(
                    RedisOpts(host=f"127.0.0.1:{redis_port}"),
                    gateway_settings(ssh_port),
                    default_timeout=5.0,
                    strict=True
                )

                await cache.set("ticket", "T-1", 60)
                result = await cache.lookup("ticket")
                missing = await cache.lookup("other")

                await cache.close()

        assert result.found and result.value == "T-1"
        assert not missing.found and missing.error is None

    @pytest.mark.asyncio
    async def test_pooled_tunnel_shares_one_session(self):
        """Concurrent connections ride one SSH session when pooled."""
        async with running_server() as (fake, redis_port):
            async with running_gateway() as (gateway, ssh_port):
                cache = RedisCache.over_ssh(
                    RedisOpts(host=f"127.0.0.1:{redis_port}"),
                    gateway_settings(ssh_port, pooled=True),
                    default_timeout=5.0
                )

                await cache.set("access_token", "ACCESS_TOKEN", 7200)
                values = await asyncio.gather(*(cache.get("access_token") for _ in range(4)))

                await cache.close()
                await gateway.wait_all_closed()

        assert values == ["ACCESS_TOKEN"] * 4
        assert gateway.opened == 1
        assert gateway.closed == 1
        assert len(gateway.requested) >= 1

    @pytest.mark.asyncio
    async def test_wrong_password_reads_as_absent(self):
        async with running_gateway() as (gateway, ssh_port):
            settings = gateway_settings(ssh_port)
            settings.password = "wrong"
            cache = RedisCache.over_ssh(RedisOpts(host="127.0.0.1:6379"), settings, default_timeout=2.0)

            assert await cache.get("access_token") is None

            result = await cache.lookup("access_token")
            assert result.error is not None

            await cache.close()

        assert gateway.requested == []

    @pytest.mark.asyncio
    async def test_unreachable_gateway_reads_as_absent(self):
        over_ssh = gateway_settings(22)
        over_ssh.host = "bastion.example.com"
        with patch("asyncssh.connect", new_callable=AsyncMock, side_effect=OSError("No route to host")):
            cache = RedisCache.over_ssh(RedisOpts(host="10.0.0.5:6379"), over_ssh, default_timeout=0.5)

            assert await cache.get("access_token") is None
            assert await cache.exists("access_token") is False

            result = await cache.lookup("access_token")
            assert result.error is not None

            await cache.close()
