"""
Mini-program entry point.
"""

from typing import Optional

import httpx

from .config import MiniProgramSettings
from .context import Context, TokenProvider
from .message import UpdatableMessage


class MiniProgram:
    """Hands out API clients sharing one context."""

    def __init__(
        self,
        settings: MiniProgramSettings,
        token_provider: TokenProvider,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.ctx = Context(settings, token_provider, transport=transport)

    def get_context(self) -> Context:
        return self.ctx

    def get_updatable_message(self) -> UpdatableMessage:
        """Dynamic message API."""
        return UpdatableMessage(self.ctx)
