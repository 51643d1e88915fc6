"""Domain models (Pydantic v2).

These models describe *what* moves between a driver and its caller, not *how*
it is obtained from a device. They know nothing about adb, tunnels or HTTP.
"""

from __future__ import annotations

from datetime import date
from enum import Enum
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator
from pydantic.config import ConfigDict

DEFAULT_PORT = 9222
DEFAULT_TIMEOUT_SECONDS = 10
MIN_TIMEOUT_SECONDS = 10


class TabRecord(BaseModel):
    """One open browser tab as reported by the device.

    - Immutable once produced.
    - `title` may be empty and is kept as-is (no "Untitled" substitution).
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    title: str = Field(
        default="",
        description="Page title reported by the browser (may be empty).",
    )
    url: str = Field(
        ...,
        min_length=1,
        description="Page URL; must be non-empty and carry a scheme.",
    )

    @field_validator("title", mode="before")
    @classmethod
    def _title_none_to_empty(cls, value: object) -> object:
        return "" if value is None else value

    @field_validator("url")
    @classmethod
    def _url_must_parse(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("url must not be blank")
        if not urlparse(value).scheme:
            raise ValueError(f"url has no scheme: {value!r}")
        return value


class EnvironmentCheck(BaseModel):
    """A single probe step (tool on PATH, daemon reachable, device listed)."""

    name: str = Field(..., min_length=1)
    ok: bool
    detail: str = ""


class EnvironmentCheckResult(BaseModel):
    """Outcome of one advisory environment check. Never persisted."""

    ok: bool
    detail: str = ""
    checks: list[EnvironmentCheck] = Field(default_factory=list)


class DriverConfig(BaseModel):
    """Already-validated parameters handed from the command boundary to a driver.

    Drivers read it but never mutate it; build it with
    `core.services.options.build_driver_config` so out-of-range raw values are
    clamped with a warning.
    """

    model_config = ConfigDict(frozen=True)

    port: int = Field(default=DEFAULT_PORT, gt=0, le=65535)
    timeout_seconds: int = Field(default=DEFAULT_TIMEOUT_SECONDS, ge=MIN_TIMEOUT_SECONDS)
    file_date: date | None = Field(
        default=None,
        description="Date stamp for the output filename, if any.",
    )
    skip_environment_check: bool = False


class ReopenFailure(BaseModel):
    record: TabRecord
    reason: str


class ReopenReport(BaseModel):
    """Per-record outcome of a reopen run; partial success is preserved."""

    opened: list[TabRecord] = Field(default_factory=list)
    failed: list[ReopenFailure] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


class DriverState(str, Enum):
    IDLE = "idle"
    ENVIRONMENT_CHECKED = "environment_checked"
    CONNECTED = "connected"
    FETCHED = "fetched"
    REOPENED = "reopened"
    CLOSED = "closed"
    FAILED = "failed"
