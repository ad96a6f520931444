"""Request signing primitives for the Tuya Cloud API."""
from __future__ import annotations

import hashlib
import hmac
import time

SIGN_METHOD = "HMAC-SHA256"

__all__ = ["SIGN_METHOD", "calc_sign", "md5_hex", "string_to_sign", "timestamp_ms"]


def timestamp_ms() -> str:
    """Return the current epoch time in milliseconds as a 13 digit string."""
    return str(int(time.time() * 1000))


def string_to_sign(client_id: str, access_token: str, timestamp: str) -> str:
    return f"{client_id}{access_token}{timestamp}"


def calc_sign(client_id: str, access_token: str, timestamp: str, secret: str) -> str:
    """HMAC-SHA256 of ``client_id + access_token + timestamp`` keyed by ``secret``.

    ``access_token`` is the empty string before a token has been obtained, so the
    same call signs differently once the client is authenticated. An empty
    secret still yields a signature.
    """
    message = string_to_sign(client_id, access_token or "", str(timestamp))
    return hmac.new(
        secret.encode("utf-8"),
        message.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest().upper()


def md5_hex(text: str) -> str:
    # The user lookup endpoint only accepts MD5 password digests.
    return hashlib.md5(text.encode("utf-8")).hexdigest()
