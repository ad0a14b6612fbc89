"""
Dynamic (updatable) messages.

An activity is created server-side with ``create_activity_id`` and then moved
between states with ``set_updatable_msg``. State transitions are not checked
locally; whatever the caller passes is forwarded.
"""

from enum import IntEnum
from typing import List

from pydantic import BaseModel, Field

from shared.logging import get_logger
from ..context import Context
from ..util import CommonErrorEnvelope, http_get, post_json, decode_with_error, decode_with_common_error

CREATE_ACTIVITY_PATH = "/cgi-bin/message/wxopen/activityid/create"
SET_UPDATABLE_MSG_PATH = "/cgi-bin/message/wxopen/updatablemsg/send"


class UpdatableTargetState(IntEnum):
    """Dynamic message state."""
    NOT_STARTED = 0
    STARTED = 1
    FINISHED = 2


class CreateActivityIDResponse(CommonErrorEnvelope):
    """Response of activity creation."""
    activity_id: str = ""
    expiration_time: int = 0


class UpdatableMsgParameter(BaseModel):
    """Template parameter."""
    name: str
    value: str


class UpdatableMsgTemplate(BaseModel):
    """Dynamic message template."""
    parameter_list: List[UpdatableMsgParameter] = Field(default_factory=list)


class SendUpdatableMsgReq(BaseModel):
    """Request body for a dynamic message update."""
    activity_id: str
    template_info: UpdatableMsgTemplate
    target_state: UpdatableTargetState


class UpdatableMessage:
    """Client for the dynamic message endpoints."""

    def __init__(self, ctx: Context):
        self.ctx = ctx
        self.logger = get_logger("miniprogram.updatable_msg")

    async def create_activity_id(self) -> CreateActivityIDResponse:
        """Create an activity id."""
        access_token = await self.ctx.get_access_token()

        body = await http_get(self.ctx, self.ctx.url(CREATE_ACTIVITY_PATH, access_token), "CreateActivityID")
        result = decode_with_error(body, CreateActivityIDResponse, "CreateActivityID")

        self.logger.info(
            "Activity created",
            activity_id=result.activity_id,
            expiration_time=result.expiration_time
        )
        return result

    async def set_updatable_msg(
        self,
        activity_id: str,
        target_state: UpdatableTargetState,
        template: UpdatableMsgTemplate
    ) -> None:
        """Update the state and template parameters of an activity."""
        access_token = await self.ctx.get_access_token()

        data = SendUpdatableMsgReq(
            activity_id=activity_id,
            target_state=target_state,
            template_info=template
        )
        body = await post_json(self.ctx, self.ctx.url(SET_UPDATABLE_MSG_PATH, access_token), data, "SendUpdatableMsg")
        decode_with_common_error(body, "SendUpdatableMsg")

        self.logger.info("Activity updated", activity_id=activity_id, target_state=int(target_state))
