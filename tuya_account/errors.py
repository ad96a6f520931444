"""Exceptions raised by the Tuya account client."""
from __future__ import annotations

from typing import Any, Optional

__all__ = [
    "AuthenticationRequired",
    "MalformedResponse",
    "TransportError",
    "TuyaApiError",
    "UnsupportedMethod",
]


class TuyaApiError(RuntimeError):
    """Base class for failures talking to the Tuya Cloud API."""


class UnsupportedMethod(TuyaApiError, ValueError):
    """Raised before sending anything when the HTTP verb is not GET or POST."""

    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__(f"Unsupported HTTP method: {method!r} (expected GET or POST)")


class TransportError(TuyaApiError):
    """The HTTP round trip failed or the server answered with an error status."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class MalformedResponse(TuyaApiError):
    """The response body could not be decoded or lacks the expected fields."""

    def __init__(self, message: str, *, payload: Any = None) -> None:
        self.payload = payload
        super().__init__(message)


class AuthenticationRequired(TuyaApiError):
    """Raised by callers that insist on an access token being held."""
