"""Tuya Cloud OpenAPI client: request signing, token lifecycle and account lookups."""

from .client import TuyaClient
from .config import ConfigError, load_client_config
from .errors import (
    AuthenticationRequired,
    MalformedResponse,
    TransportError,
    TuyaApiError,
    UnsupportedMethod,
)
from .models import ClientConfig, Region, RequestDescriptor, TokenState
from .signing import calc_sign

__all__ = [
    "AuthenticationRequired",
    "ClientConfig",
    "ConfigError",
    "MalformedResponse",
    "Region",
    "RequestDescriptor",
    "TokenState",
    "TransportError",
    "TuyaApiError",
    "TuyaClient",
    "UnsupportedMethod",
    "calc_sign",
    "load_client_config",
]
