"""
HTTP utilities shared by mini-program API clients.
"""

from .http import (
    CommonErrorEnvelope,
    http_get,
    post_json,
    decode_with_error,
    decode_with_common_error,
)

__all__ = [
    "CommonErrorEnvelope",
    "http_get",
    "post_json",
    "decode_with_error",
    "decode_with_common_error",
]
