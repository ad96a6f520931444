"""HTTP client for the Tuya Cloud OpenAPI account endpoints."""
from __future__ import annotations

import json
import logging
import re
import threading
from typing import Any, Callable, Dict, Optional

import requests
from pydantic import ValidationError

from .errors import (
    AuthenticationRequired,
    MalformedResponse,
    TransportError,
    UnsupportedMethod,
)
from .models import ClientConfig, RequestDescriptor, TokenResult, TokenState
from .signing import SIGN_METHOD, calc_sign, md5_hex, timestamp_ms

LOGGER = logging.getLogger(__name__)

TOKEN_ENDPOINT = "v1.0/token?grant_type=1"
COUNTRIES_ENDPOINT = "v1.0/all-countries"
USER_ENDPOINT = "v1.0/apps/{schema}/user"

SUPPORTED_METHODS = frozenset({"GET", "POST"})

USERNAME_TYPE_PHONE = "1"
USERNAME_TYPE_EMAIL = "2"

_EMAIL_RE = re.compile(
    r"^[A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
    r"(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?)+$"
)

__all__ = ["TuyaClient", "is_email", "username_type"]


def is_email(value: str) -> bool:
    if not value or len(value) > 254:
        return False
    local = value.split("@", 1)[0]
    if local.startswith(".") or local.endswith(".") or ".." in local:
        return False
    return bool(_EMAIL_RE.fullmatch(value))


def username_type(username: str) -> str:
    """``"2"`` for email addresses, ``"1"`` for any other identifier."""
    return USERNAME_TYPE_EMAIL if is_email(username) else USERNAME_TYPE_PHONE


class TuyaClient:
    """Signed access to the token, country and user lookup endpoints.

    The client owns a single :class:`TokenState`. It starts unauthenticated and
    only :meth:`request_token` replaces it; every request built afterwards
    carries the ``access_token`` header. Nothing guards against calling the
    other endpoints first, they simply go out unauthenticated.
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        clock: Callable[[], str] = timestamp_ms,
    ) -> None:
        self._config = config
        self._base_url = config.base_url.rstrip("/")
        self._owns_session = session is None
        self._session = session or requests.Session()
        self._timeout = timeout
        self._clock = clock
        self._state = TokenState()
        self._lock = threading.Lock()

    def __enter__(self) -> "TuyaClient":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def token_state(self) -> TokenState:
        with self._lock:
            return self._state

    @property
    def is_authenticated(self) -> bool:
        return self.token_state.is_authenticated

    def require_token(self) -> TokenState:
        state = self.token_state
        if not state.is_authenticated:
            raise AuthenticationRequired("No access token held; call request_token() first")
        return state

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def request_token(self) -> TokenState:
        """Obtain an access token and move the session to authenticated."""
        payload = self.request("GET", TOKEN_ENDPOINT)
        result = payload.get("result")
        if not isinstance(result, dict):
            raise MalformedResponse(
                f"Token response has no result object: {_describe_failure(payload)}",
                payload=payload,
            )
        try:
            token = TokenResult.model_validate(result)
        except ValidationError as exc:
            raise MalformedResponse(f"Token response missing fields: {exc}", payload=payload) from exc

        state = token.to_state()
        with self._lock:
            self._state = state
        LOGGER.info("Obtained Tuya access token for uid %s (expires in %ss)", state.uid, state.expire_time)
        return state

    def get_countries(self) -> Dict[str, Any]:
        """Return the raw list of supported countries and their regions."""
        return self.request("GET", COUNTRIES_ENDPOINT)

    def get_user(self, username: str, password: str) -> Dict[str, Any]:
        """Look up a user by credentials. The session state is not modified."""
        body = self.user_lookup_body(username, password)
        endpoint = USER_ENDPOINT.format(schema=self._config.schema_name)
        return self.request("POST", endpoint, data=body)

    def lookup_uid(self, username: str, password: str) -> str:
        """Return the uid found by :meth:`get_user`; adopting it is up to the caller."""
        payload = self.get_user(username, password)
        result = payload.get("result")
        uid = result.get("uid") if isinstance(result, dict) else None
        if not uid:
            raise MalformedResponse(
                f"User lookup returned no uid: {_describe_failure(payload)}",
                payload=payload,
            )
        return str(uid)

    def user_lookup_body(self, username: str, password: str) -> Dict[str, str]:
        return {
            "country_code": self._config.country_code,
            "username": username,
            "password": md5_hex(password),
            "username_type": username_type(username),
        }

    def request(self, method: str, endpoint: str, data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Build, send and decode one signed request. Single shot, no retries."""
        descriptor = self.build_request(endpoint, method, data)
        LOGGER.debug(
            "Tuya %s %s (access_token=%s)",
            descriptor.method,
            descriptor.url,
            "access_token" in descriptor.headers,
        )
        try:
            response = self._session.request(
                descriptor.method,
                descriptor.url,
                headers=descriptor.headers,
                data=descriptor.body,
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise TransportError(f"HTTP request to Tuya API failed: {exc}") from exc

        if response.status_code >= 400:
            LOGGER.warning("Tuya API answered %s for %s", response.status_code, descriptor.url)
            raise TransportError(
                f"Tuya API error {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

        try:
            data_out = response.json()
        except ValueError as exc:
            raise MalformedResponse(f"Failed to decode Tuya response as JSON: {exc}") from exc

        if not isinstance(data_out, dict):
            raise MalformedResponse(f"Unexpected response envelope: {data_out!r}", payload=data_out)
        return data_out

    # ------------------------------------------------------------------
    # Request construction
    # ------------------------------------------------------------------
    def build_request(
        self,
        endpoint: str,
        method: str = "GET",
        data: Optional[Dict[str, Any]] = None,
    ) -> RequestDescriptor:
        verb = (method or "").upper()
        if verb not in SUPPORTED_METHODS:
            raise UnsupportedMethod(method)

        url = f"{self._base_url}/{endpoint.lstrip('/')}"
        headers = self.build_headers()
        body = json.dumps(data if data is not None else {}) if verb == "POST" else None
        return RequestDescriptor(method=verb, url=url, headers=headers, body=body)

    def build_headers(self) -> Dict[str, str]:
        with self._lock:
            access_token = self._state.access_token

        # The signature and the ``t`` header each read the clock unless
        # shared_timestamp is set, so the two may differ by a few milliseconds.
        sign_timestamp = self._clock()
        header_timestamp = sign_timestamp if self._config.shared_timestamp else self._clock()

        headers = {
            "client_id": self._config.client_id,
            "sign": calc_sign(
                self._config.client_id,
                access_token,
                sign_timestamp,
                self._config.client_secret,
            ),
            "t": header_timestamp,
            "sign_method": SIGN_METHOD,
            "Content-Type": "application/json",
        }
        if access_token:
            headers["access_token"] = access_token
        return headers


def _describe_failure(payload: Dict[str, Any]) -> str:
    code = payload.get("code")
    msg = payload.get("msg")
    if code is not None or msg:
        return f"code={code} msg={msg}"
    return repr(payload)
