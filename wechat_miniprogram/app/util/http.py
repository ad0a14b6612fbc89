"""
JSON-over-HTTP helpers for platform APIs.

Every platform response carries an ``errcode``/``errmsg`` envelope; a
non-zero ``errcode`` is a business error and surfaces as ``CommonError``.
Transport and decoding problems surface as ``APIError``.
"""

import json
from typing import Any, Dict, Type, TypeVar, Union

import httpx
from pydantic import BaseModel, ValidationError

from shared.logging import get_logger
from shared.errors import APIError, CommonError
from ..context import Context

logger = get_logger("miniprogram.http")

EnvelopeT = TypeVar("EnvelopeT", bound="CommonErrorEnvelope")


class CommonErrorEnvelope(BaseModel):
    """Error fields present on every platform response."""
    errcode: int = 0
    errmsg: str = ""


def _check_status(response: httpx.Response, api_name: str) -> bytes:
    if response.status_code != httpx.codes.OK:
        logger.error("Unexpected HTTP status", api=api_name, status_code=response.status_code)
        raise APIError(
            api_name,
            f"http error : statusCode={response.status_code}",
            details={"status_code": response.status_code}
        )
    return response.content


async def http_get(ctx: Context, uri: str, api_name: str) -> bytes:
    """GET ``uri`` and return the raw body."""
    try:
        async with ctx.http_client() as client:
            response = await client.get(uri)
    except httpx.HTTPError as e:
        logger.error("HTTP GET failed", api=api_name, error=str(e))
        raise APIError(api_name, f"http get error : {e}", details={"http_error": str(e)})

    return _check_status(response, api_name)


async def post_json(ctx: Context, uri: str, payload: Union[BaseModel, Dict[str, Any]], api_name: str) -> bytes:
    """POST ``payload`` as JSON (non-ASCII left unescaped) and return the raw body."""
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(mode="json")
    body = json.dumps(payload, ensure_ascii=False).encode("utf-8")

    try:
        async with ctx.http_client() as client:
            response = await client.post(
                uri,
                content=body,
                headers={"Content-Type": "application/json;charset=utf-8"}
            )
    except httpx.HTTPError as e:
        logger.error("HTTP POST failed", api=api_name, error=str(e))
        raise APIError(api_name, f"http post error : {e}", details={"http_error": str(e)})

    return _check_status(response, api_name)


def decode_with_error(body: bytes, model: Type[EnvelopeT], api_name: str) -> EnvelopeT:
    """Decode ``body`` into ``model``; raise on malformed JSON or non-zero errcode."""
    try:
        result = model.model_validate_json(body)
    except ValidationError as e:
        logger.error("Response decode failed", api=api_name, error=str(e))
        raise APIError(api_name, f"decode response failed: {e}")

    if result.errcode != 0:
        logger.warning("Platform returned error", api=api_name, errcode=result.errcode, errmsg=result.errmsg)
        raise CommonError(api_name, result.errcode, result.errmsg)
    return result


def decode_with_common_error(body: bytes, api_name: str) -> CommonErrorEnvelope:
    """Decode a bare errcode/errmsg envelope."""
    return decode_with_error(body, CommonErrorEnvelope, api_name)
