"""
Per-client context: access tokens and HTTP transport settings.
"""

from typing import Awaitable, Callable, Optional

import httpx

from .config import MiniProgramSettings

# Returns a valid access token; acquisition and refresh live with the caller.
TokenProvider = Callable[[], Awaitable[str]]


class StaticTokenProvider:
    """Token provider returning a fixed token."""

    def __init__(self, token: str):
        self.token = token

    async def __call__(self) -> str:
        return self.token


class Context:
    """State shared by the API clients of one mini-program."""

    def __init__(
        self,
        settings: MiniProgramSettings,
        token_provider: TokenProvider,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.settings = settings
        self.token_provider = token_provider
        self.transport = transport

    async def get_access_token(self) -> str:
        return await self.token_provider()

    def http_client(self) -> httpx.AsyncClient:
        """New HTTP client honouring the configured timeout and transport."""
        return httpx.AsyncClient(timeout=self.settings.http_timeout, transport=self.transport)

    def url(self, path: str, access_token: str) -> str:
        return f"{self.settings.api_base_url.rstrip('/')}{path}?access_token={access_token}"
