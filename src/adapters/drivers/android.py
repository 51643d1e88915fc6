"""Driver: Chrome for Android over USB (adb port forward)."""

from __future__ import annotations

from typing import Sequence

from adapters.channels.adb_forward import AdbForwardChannel
from adapters.drivers.common import ChannelFactory, check_environment, fetch_tab_list, reopen_each
from adapters.probes import AdbDeviceProbe, BinaryProbe, ProbeChain
from core.config import AppSettings
from core.domain.models import DriverConfig, DriverState, EnvironmentCheckResult, ReopenReport, TabRecord
from core.interfaces.driver import TabDriver
from core.interfaces.output import OutputSink
from core.interfaces.probe import EnvironmentProbe
from core.services.lifecycle import DriverLifecycle


class AndroidDriver(TabDriver):
    """Copies (and reopens) tabs of Chrome on an Android device.

    Requires `adb` on PATH and a device with USB debugging allowed.
    """

    name = "android"
    tabs_path = "/json/list"

    def __init__(
        self,
        config: DriverConfig,
        settings: AppSettings | None = None,
        *,
        channel_factory: ChannelFactory | None = None,
        probe: EnvironmentProbe | None = None,
    ) -> None:
        self.config = config
        self._settings = settings or AppSettings()
        self._channel_factory = channel_factory or self._default_channel
        self._probe = probe
        self._lifecycle = DriverLifecycle(self.name)

    @property
    def state(self) -> DriverState:
        return self._lifecycle.state

    def _default_channel(self) -> AdbForwardChannel:
        return AdbForwardChannel(
            port=self.config.port,
            timeout_seconds=self.config.timeout_seconds,
            adb_binary=self._settings.adb_binary,
            socket_name=self._settings.devtools_socket,
            command_timeout=self._settings.probe_timeout_seconds,
        )

    def _default_probe(self) -> EnvironmentProbe:
        return ProbeChain(
            [
                BinaryProbe(self._settings.adb_binary),
                AdbDeviceProbe(self._settings.adb_binary, timeout=self._settings.probe_timeout_seconds),
            ]
        )

    def check_environment(self) -> EnvironmentCheckResult:
        return check_environment(self._lifecycle, self._probe or self._default_probe())

    def fetch_tabs(self, console: OutputSink) -> list[TabRecord]:
        self._lifecycle.ensure_usable()
        console.verbose(f"Forwarding tcp:{self.config.port} to the device...")
        return fetch_tab_list(self._lifecycle, self._channel_factory(), self.tabs_path, console)

    def reopen_tabs(self, records: Sequence[TabRecord], console: OutputSink) -> ReopenReport:
        self._lifecycle.ensure_usable()
        console.verbose(f"Reopening {len(records)} tabs on the device...")
        return reopen_each(self._lifecycle, self._channel_factory(), records, console)
