"""Pydantic models for client configuration, session state and requests."""
from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_COUNTRY_CODE = "386"


class Region(str, Enum):
    """Regional OpenAPI endpoints, in the order the platform numbers them."""

    CN = "https://openapi.tuyacn.com"
    US = "https://openapi.tuyaus.com"
    EU = "https://openapi.tuyaeu.com"

    @property
    def base_url(self) -> str:
        return self.value

    @classmethod
    def from_index(cls, index: int) -> "Region":
        members = list(cls)
        if not 0 <= index < len(members):
            raise ValueError(f"Region index must be between 0 and {len(members) - 1}, got {index}")
        return members[index]

    @classmethod
    def parse(cls, value: Union[str, int, "Region"]) -> "Region":
        """Accept a member, its name (``"eu"``), its index or its base URL."""
        if isinstance(value, cls):
            return value
        if isinstance(value, int):
            return cls.from_index(value)
        text = str(value).strip()
        if text.isdigit():
            return cls.from_index(int(text))
        upper = text.upper()
        if upper in cls.__members__:
            return cls[upper]
        normalized = text.rstrip("/")
        for member in cls:
            if member.value == normalized:
                return member
        raise ValueError(f"Unknown Tuya region: {value!r}")


class ClientConfig(BaseModel):
    """Static credentials and routing for one client instance."""

    schema_name: str = Field(alias="schema")
    client_id: str
    client_secret: str
    region: Region
    country_code: str = DEFAULT_COUNTRY_CODE
    shared_timestamp: bool = False

    model_config = ConfigDict(frozen=True, populate_by_name=True, protected_namespaces=())

    @field_validator("schema_name", "client_id", "client_secret", "country_code", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("schema_name", "client_id")
    @classmethod
    def _not_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("region", mode="before")
    @classmethod
    def _parse_region(cls, value):
        return Region.parse(value)

    @property
    def base_url(self) -> str:
        return self.region.base_url


class TokenState(BaseModel):
    """Snapshot of the session; an empty access token means unauthenticated."""

    access_token: str = ""
    refresh_token: str = ""
    expire_time: Optional[int] = None
    uid: str = ""

    model_config = ConfigDict(frozen=True)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.access_token)

    def masked(self) -> Dict[str, object]:
        data = self.model_dump()
        for key in ("access_token", "refresh_token"):
            value = data[key]
            if value:
                data[key] = f"{value[:4]}***" if len(value) > 8 else "***"
        return data


class TokenResult(BaseModel):
    """The ``result`` object of a ``v1.0/token`` response."""

    access_token: str = Field(min_length=1)
    refresh_token: str
    expire_time: int
    uid: str

    def to_state(self) -> TokenState:
        return TokenState(
            access_token=self.access_token,
            refresh_token=self.refresh_token,
            expire_time=self.expire_time,
            uid=self.uid,
        )


class RequestDescriptor(BaseModel):
    """A fully built outbound request."""

    method: str
    url: str
    headers: Dict[str, str]
    body: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    def header_lines(self) -> List[str]:
        """Headers as the literal ``key:value`` lines sent on the wire."""
        return [f"{key}:{value}" for key, value in self.headers.items()]
