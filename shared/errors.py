"""
Shared error handling for the WeChat toolkit.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response format."""

    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class SDKException(Exception):
    """Base exception for toolkit components."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            details=self.details
        )


class DialError(SDKException):
    """SSH handshake or channel-open failure."""

    def __init__(self, message: str = "Dial failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("DIAL_ERROR", message, details)


class KeyLoadError(SDKException):
    """Private key file unreadable or unparsable."""

    def __init__(self, message: str = "Private key could not be loaded", details: Optional[Dict[str, Any]] = None):
        super().__init__("KEY_LOAD_ERROR", message, details)


class CacheError(SDKException):
    """Cache store unreachable or failing."""

    def __init__(self, message: str = "Cache error", details: Optional[Dict[str, Any]] = None):
        super().__init__("CACHE_ERROR", message, details)


class APIError(SDKException):
    """HTTP transport or response decoding failure."""

    def __init__(self, api_name: str, message: str = "API request failed", details: Optional[Dict[str, Any]] = None):
        self.api_name = api_name
        super().__init__("API_ERROR", f"{api_name}: {message}", details)


class CommonError(SDKException):
    """Business error reported by the platform (non-zero errcode)."""

    def __init__(self, api_name: str, errcode: int, errmsg: str):
        self.api_name = api_name
        self.errcode = errcode
        self.errmsg = errmsg
        super().__init__(
            "COMMON_ERROR",
            f"{api_name} Error , errcode={errcode} , errmsg={errmsg}",
            {"errcode": errcode, "errmsg": errmsg}
        )
