"""Core configuration.

- Centralises environment variables (pydantic-settings) away from the CLI.
- Channels, probes and drivers read tool names and budgets from here.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.domain.models import DEFAULT_PORT, DEFAULT_TIMEOUT_SECONDS, MIN_TIMEOUT_SECONDS


def get_user_config_dir() -> Path:
    """Per-user configuration directory (cross-platform, no extra dependencies)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "tab-transfer"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "tab-transfer"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "tab-transfer"
    return Path.home() / ".config" / "tab-transfer"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


class AppSettings(BaseSettings):
    """Application settings.

    Order of precedence: environment, project `.env`, then the user `.env`.
    """

    model_config = SettingsConfigDict(
        env_prefix="TAB_TRANSFER_",
        extra="ignore",
        case_sensitive=False,
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    default_port: int = Field(
        default=DEFAULT_PORT,
        gt=0,
        le=65535,
        description="Local port the debugging endpoint is forwarded to.",
    )
    default_timeout_seconds: int = Field(
        default=DEFAULT_TIMEOUT_SECONDS,
        ge=MIN_TIMEOUT_SECONDS,
        description="Per-request timeout for the tab download (seconds).",
    )
    probe_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        le=60,
        description="Fixed budget for environment probe commands (seconds).",
    )
    tunnel_ready_seconds: float = Field(
        default=5.0,
        gt=0,
        le=60,
        description="How long the iOS tunnel may take to start answering.",
    )

    adb_binary: str = Field(default="adb", min_length=1)
    iwdp_binary: str = Field(default="ios_webkit_debug_proxy", min_length=1)
    idevice_id_binary: str = Field(default="idevice_id", min_length=1)
    devtools_socket: str = Field(
        default="chrome_devtools_remote",
        min_length=1,
        description="Abstract socket Chrome for Android exposes for remote debugging.",
    )

    default_file: str = Field(default="tabs.json", min_length=1)
    compat_mode: bool = Field(
        default=False,
        description="Register the legacy copy command (compatibility mode).",
    )
