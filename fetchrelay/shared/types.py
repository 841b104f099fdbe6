"""Pydantic models for the relay contract.

RequestDescription goes in, RelayResult comes out. The HTTP API, the
client and the CLI exchange only these types, serialized with camelCase
field names.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from fetchrelay.shared.utils import normalize_headers

DEFAULT_TIMEOUT_MS = 20_000


class RequestDescription(BaseModel):
    """One outbound HTTP request, as supplied by the caller.

    Loose input is coerced rather than rejected so that a missing URL can be
    reported as a BadRequest result instead of a validation error.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    url: str = ""
    method: str = "GET"
    headers: dict[str, str] = {}
    body: Optional[str] = None
    timeout_ms: Optional[int] = Field(default=None, alias="timeoutMs")

    @field_validator("url", mode="before")
    @classmethod
    def _coerce_url(cls, v: Any) -> str:
        return "" if not v else str(v)

    @field_validator("method", mode="before")
    @classmethod
    def _coerce_method(cls, v: Any) -> str:
        return str(v or "GET").strip().upper()

    @field_validator("headers", mode="before")
    @classmethod
    def _coerce_headers(cls, v: Any) -> dict[str, str]:
        return normalize_headers(v)

    @field_validator("body", mode="before")
    @classmethod
    def _coerce_body(cls, v: Any) -> Optional[str]:
        return None if v is None else str(v)

    @classmethod
    def from_payload(cls, payload: Any) -> RequestDescription:
        """Build from a decoded JSON payload. Non-object payloads count as empty."""
        if not isinstance(payload, dict):
            payload = {}
        return cls.model_validate(payload)


class RelayResult(BaseModel):
    """Uniform outcome of one relay call.

    ``ok`` is True when the network exchange completed, whatever the HTTP
    status. Optional fields are only serialized when they were populated,
    so a JSON ``null`` body still shows up as ``data``.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    ok: bool
    status: int
    status_text: str = Field(alias="statusText")
    headers: dict[str, str] = {}
    data: Any = None
    text: Optional[str] = None
    error: Optional[str] = None
    duration_ms: int = Field(default=0, alias="durationMs")

    @property
    def has_data(self) -> bool:
        return "data" in self.model_fields_set

    @property
    def has_text(self) -> bool:
        return "text" in self.model_fields_set

    def to_wire(self) -> dict[str, Any]:
        """Serialize with camelCase keys, omitting unpopulated optional fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)

    @classmethod
    def failure(cls, status_text: str, error: str, duration_ms: int = 0) -> RelayResult:
        return cls(
            ok=False,
            status=0,
            status_text=status_text,
            headers={},
            error=error,
            duration_ms=duration_ms,
        )

    @classmethod
    def bad_request(cls, error: str = "Missing url") -> RelayResult:
        return cls.failure("BadRequest", error, 0)


def describe_validation_error(exc: ValidationError) -> str:
    """Flatten a pydantic ValidationError into one readable line."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg', 'invalid')}" if loc else err.get("msg", "invalid"))
    return "; ".join(parts) or "Invalid request"
