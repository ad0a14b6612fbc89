"""
Message APIs for mini-programs.

Currently provides dynamic (updatable) messages: activity creation and
state/template updates.
"""

from .updatable_msg import (
    UpdatableMessage,
    UpdatableTargetState,
    UpdatableMsgTemplate,
    UpdatableMsgParameter,
    SendUpdatableMsgReq,
    CreateActivityIDResponse,
)

__all__ = [
    "UpdatableMessage",
    "UpdatableTargetState",
    "UpdatableMsgTemplate",
    "UpdatableMsgParameter",
    "SendUpdatableMsgReq",
    "CreateActivityIDResponse",
]
