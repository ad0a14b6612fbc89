"""
Mini-program API client: dynamic (updatable) messages.
"""

from .app.config import MiniProgramSettings
from .app.context import Context, StaticTokenProvider, TokenProvider
from .app.miniprogram import MiniProgram
from .app.message import (
    UpdatableMessage,
    UpdatableTargetState,
    UpdatableMsgTemplate,
    UpdatableMsgParameter,
    SendUpdatableMsgReq,
    CreateActivityIDResponse,
)

__all__ = [
    "MiniProgramSettings",
    "Context",
    "StaticTokenProvider",
    "TokenProvider",
    "MiniProgram",
    "UpdatableMessage",
    "UpdatableTargetState",
    "UpdatableMsgTemplate",
    "UpdatableMsgParameter",
    "SendUpdatableMsgReq",
    "CreateActivityIDResponse",
]
