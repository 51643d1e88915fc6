"""Driver variants and the registry used at the command boundary."""

from __future__ import annotations

from adapters.drivers.android import AndroidDriver
from adapters.drivers.iphone import IphoneDriver
from adapters.drivers.legacy import LegacyDriver
from core.config import AppSettings
from core.domain.models import DriverConfig
from core.interfaces.driver import TabDriver

DRIVERS: dict[str, type[TabDriver]] = {
    AndroidDriver.name: AndroidDriver,
    IphoneDriver.name: IphoneDriver,
    LegacyDriver.name: LegacyDriver,
}

COMPAT_ONLY_DRIVERS = frozenset({LegacyDriver.name})


def available_drivers(settings: AppSettings) -> list[str]:
    return [name for name in DRIVERS if settings.compat_mode or name not in COMPAT_ONLY_DRIVERS]


def create_driver(name: str, config: DriverConfig, settings: AppSettings | None = None) -> TabDriver:
    """Build a fresh driver for one run."""

    settings = settings or AppSettings()
    if name not in available_drivers(settings):
        raise KeyError(f"unknown driver {name!r}; choose from {', '.join(available_drivers(settings))}")
    return DRIVERS[name](config, settings)  # type: ignore[call-arg]


__all__ = [
    "AndroidDriver",
    "COMPAT_ONLY_DRIVERS",
    "DRIVERS",
    "IphoneDriver",
    "LegacyDriver",
    "available_drivers",
    "create_driver",
]
