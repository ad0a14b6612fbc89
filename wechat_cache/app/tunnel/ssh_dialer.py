"""
SSH-tunneled dialer.

Produces ``dial(network, address)`` callables that route a stream connection
through an SSH gateway described by :class:`OverSSH`. The default tunnel
opens a fresh SSH session on every dial; :class:`PooledSSHTunnel` shares one
session between dials.

Channels are exposed as a plain ``asyncio.StreamReader`` plus a writer with
the ``asyncio.StreamWriter`` surface, so clients that reach into stream
reader internals (redis-py's parsers do) work unchanged.
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Any, Iterable, Optional, Tuple

import asyncssh

from shared.logging import get_logger
from shared.errors import DialError, KeyLoadError
from ..config import OverSSH, SSHAuthMethod

TCP_NETWORKS = ("tcp", "tcp4", "tcp6")
UNIX_NETWORKS = ("unix",)


class StreamSession(asyncssh.SSHTCPSession):
    """Channel session feeding received bytes into an ``asyncio.StreamReader``.

    Used for both direct-tcpip and stream-local channels; the two session
    kinds share the same callbacks.
    """

    def __init__(self):
        self.reader = asyncio.StreamReader()
        self.channel: Optional[asyncssh.SSHTCPChannel] = None
        self._writable = asyncio.Event()
        self._writable.set()

    def connection_made(self, chan) -> None:
        self.channel = chan

    def data_received(self, data: bytes, datatype) -> None:
        self.reader.feed_data(data)

    def eof_received(self) -> bool:
        self.reader.feed_eof()
        return False

    def connection_lost(self, exc: Optional[Exception]) -> None:
        if exc is not None:
            self.reader.set_exception(exc)
        else:
            self.reader.feed_eof()
        self._writable.set()

    def pause_writing(self) -> None:
        self._writable.clear()

    def resume_writing(self) -> None:
        self._writable.set()

    async def wait_writable(self) -> None:
        await self._writable.wait()


class ChannelWriter:
    """``asyncio.StreamWriter``-like front for an SSH channel."""

    def __init__(self, channel, session: StreamSession):
        self.channel = channel
        self._session = session

    def write(self, data: bytes) -> None:
        self.channel.write(data)

    def writelines(self, data: Iterable[bytes]) -> None:
        self.channel.writelines(list(data))

    async def drain(self) -> None:
        await self._session.wait_writable()

    def write_eof(self) -> None:
        self.channel.write_eof()

    def can_write_eof(self) -> bool:
        return self.channel.can_write_eof()

    def close(self) -> None:
        self.channel.close()

    def is_closing(self) -> bool:
        return self.channel.is_closing()

    async def wait_closed(self) -> None:
        await self.channel.wait_closed()

    def get_extra_info(self, name: str, default: Any = None) -> Any:
        return self.channel.get_extra_info(name, default)


@dataclass
class TunnelChannel:
    """A stream tunneled inside an SSH session."""
    reader: asyncio.StreamReader
    writer: ChannelWriter
    session: asyncssh.SSHClientConnection
    owns_session: bool = True

    async def aclose(self) -> None:
        """Close the channel, and the session when this channel owns it."""
        self.writer.close()
        if self.owns_session:
            self.session.close()
            await self.session.wait_closed()


Dialer = Callable[[str, str], Awaitable[TunnelChannel]]


def split_address(address: str) -> Tuple[str, int]:
    """Split ``host:port`` (IPv6 literals in brackets) into its parts."""
    host, sep, port = address.rpartition(":")
    if not sep or not host or not port.isdigit():
        raise DialError(f"Invalid address: {address}", details={"address": address})
    return host.strip("[]"), int(port)


class SSHTunnel:
    """Dial through an SSH gateway, one new session per dial."""

    def __init__(self, settings: OverSSH):
        self.settings = settings
        self.logger = get_logger("cache.tunnel")

    def _connect_options(self) -> Dict[str, Any]:
        options: Dict[str, Any] = {
            "username": self.settings.username,
            "known_hosts": self.settings.known_hosts,
            "agent_path": None,
        }
        if self.settings.connect_timeout is not None:
            options["connect_timeout"] = self.settings.connect_timeout
        return options

    def load_private_key(self) -> asyncssh.SSHKey:
        """Read and parse the configured private key file."""
        key_file = self.settings.key_file
        if not key_file:
            raise KeyLoadError("No key file configured")

        try:
            return asyncssh.read_private_key(key_file, self.settings.passphrase)
        except (OSError, asyncssh.KeyImportError, asyncssh.KeyEncryptionError) as e:
            self.logger.error("Failed to load private key", key_file=key_file, error=str(e))
            raise KeyLoadError(
                f"Cannot load private key {key_file}: {e}",
                details={"key_file": key_file}
            )

    async def _open_session(self, **auth) -> asyncssh.SSHClientConnection:
        host, port = self.settings.host, self.settings.port
        try:
            session = await asyncssh.connect(host, port, **self._connect_options(), **auth)
        except (OSError, asyncssh.Error, asyncio.TimeoutError) as e:
            self.logger.error("SSH handshake failed", host=host, port=port, error=str(e))
            raise DialError(
                f"SSH connection to {host}:{port} failed: {e}",
                details={"host": host, "port": port}
            )

        self.logger.debug("SSH session established", host=host, port=port)
        return session

    async def connect_with_password(self) -> asyncssh.SSHClientConnection:
        """Open an SSH session authenticated by password."""
        return await self._open_session(
            password=self.settings.password,
            client_keys=None,
            preferred_auth="password",
        )

    async def connect_with_key_file(self) -> asyncssh.SSHClientConnection:
        """Open an SSH session authenticated by the configured private key."""
        key = await asyncio.to_thread(self.load_private_key)
        return await self._open_session(
            client_keys=[key],
            preferred_auth="publickey",
        )

    async def connect(self) -> asyncssh.SSHClientConnection:
        """Open an SSH session using the configured auth method."""
        if self.settings.auth_method == SSHAuthMethod.PASSWORD:
            return await self.connect_with_password()
        if self.settings.auth_method == SSHAuthMethod.PUBLIC_KEY:
            return await self.connect_with_key_file()
        raise DialError(
            f"Unsupported SSH auth method: {self.settings.auth_method}",
            details={"auth_method": self.settings.auth_method}
        )

    async def open_channel(
        self,
        session: asyncssh.SSHClientConnection,
        network: str,
        address: str
    ) -> Tuple[asyncio.StreamReader, ChannelWriter]:
        """Open a logical channel from ``session`` to (network, address)."""
        try:
            if network in TCP_NETWORKS:
                host, port = split_address(address)
                chan, stream = await session.create_connection(StreamSession, host, port)
            elif network in UNIX_NETWORKS:
                chan, stream = await session.create_unix_connection(StreamSession, address)
            else:
                raise DialError(
                    f"Unsupported network: {network}",
                    details={"network": network, "address": address}
                )
        except (OSError, asyncssh.Error) as e:
            self.logger.error("Channel open failed", network=network, address=address, error=str(e))
            raise DialError(
                f"Cannot open channel to {network}:{address}: {e}",
                details={"network": network, "address": address}
            )

        return stream.reader, ChannelWriter(chan, stream)

    def check_target(self, network: str, address: str) -> None:
        """Reject targets no channel could be opened to, before any I/O."""
        if network in TCP_NETWORKS:
            split_address(address)
        elif network not in UNIX_NETWORKS:
            raise DialError(
                f"Unsupported network: {network}",
                details={"network": network, "address": address}
            )

    async def dial(self, network: str, address: str) -> TunnelChannel:
        """Establish a new session and open a channel to (network, address)."""
        self.check_target(network, address)
        session = await self.connect()
        try:
            reader, writer = await self.open_channel(session, network, address)
        except BaseException:
            session.close()
            raise

        self.logger.debug("Tunnel channel opened", network=network, address=address)
        return TunnelChannel(reader=reader, writer=writer, session=session, owns_session=True)

    def make_dialer(self) -> Dialer:
        """Return a dialer bound to this tunnel."""
        return self.dial

    async def close(self) -> None:
        """Nothing to release; sessions belong to their channels."""
        return None


class PooledSSHTunnel(SSHTunnel):
    """Dial through an SSH gateway, sharing one session across dials.

    Each dial still succeeds or fails on its own: a failed channel open drops
    the shared session so the next dial starts a fresh one.
    """

    def __init__(self, settings: OverSSH):
        super().__init__(settings)
        self._session: Optional[asyncssh.SSHClientConnection] = None
        self._lock = asyncio.Lock()

    async def _shared_session(self) -> asyncssh.SSHClientConnection:
        async with self._lock:
            if self._session is None:
                self._session = await self.connect()
            return self._session

    async def _discard(self, session: asyncssh.SSHClientConnection) -> None:
        async with self._lock:
            if self._session is session:
                self._session = None
        session.close()

    async def dial(self, network: str, address: str) -> TunnelChannel:
        self.check_target(network, address)
        session = await self._shared_session()
        try:
            reader, writer = await self.open_channel(session, network, address)
        except DialError:
            await self._discard(session)
            raise

        return TunnelChannel(reader=reader, writer=writer, session=session, owns_session=False)

    async def close(self) -> None:
        """Close the shared session, if any."""
        async with self._lock:
            session, self._session = self._session, None
        if session is not None:
            session.close()
            await session.wait_closed()
            self.logger.info("Shared SSH session closed", host=self.settings.host)


def create_tunnel(settings: OverSSH) -> SSHTunnel:
    """Build the tunnel variant selected by ``settings.pooled``."""
    if settings.pooled:
        return PooledSSHTunnel(settings)
    return SSHTunnel(settings)
