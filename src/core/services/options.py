"""Turning raw command-line values into a `DriverConfig`.

Invalid values never abort the run: they fall back to the defaults and emit
exactly one warning each.
"""

from __future__ import annotations

from datetime import date
from typing import Callable

from core.domain.models import DEFAULT_PORT, DEFAULT_TIMEOUT_SECONDS, MIN_TIMEOUT_SECONDS, DriverConfig

Warn = Callable[[str], None]


def _as_int(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def resolve_port(raw: object, *, default: int = DEFAULT_PORT, warning: Warn | None = None) -> int:
    port = _as_int(raw)
    if port is None or port <= 0 or port > 65535:
        if warning:
            warning(f"Invalid port given, default to {default}.")
        return default
    return port


def resolve_timeout(
    raw: object,
    *,
    default: int = DEFAULT_TIMEOUT_SECONDS,
    warning: Warn | None = None,
) -> int:
    timeout = _as_int(raw)
    if timeout is None or timeout < MIN_TIMEOUT_SECONDS:
        if warning:
            warning(f"Invalid timeout given, default to {default}s.")
        return default
    return timeout


def build_driver_config(
    *,
    port: object = DEFAULT_PORT,
    timeout: object = DEFAULT_TIMEOUT_SECONDS,
    file_date: date | None = None,
    skip_check: bool = False,
    default_port: int = DEFAULT_PORT,
    default_timeout: int = DEFAULT_TIMEOUT_SECONDS,
    warning: Warn | None = None,
) -> DriverConfig:
    return DriverConfig(
        port=resolve_port(port, default=default_port, warning=warning),
        timeout_seconds=resolve_timeout(timeout, default=default_timeout, warning=warning),
        file_date=file_date,
        skip_environment_check=skip_check,
    )
