"""Driver: the original adb-based copy command, kept for compatibility mode.

Same transport as `AndroidDriver` but reads the older `/json` endpoint and
cannot reopen tabs. Only registered when `compat_mode` is enabled.
"""

from __future__ import annotations

from typing import Sequence

from adapters.channels.adb_forward import AdbForwardChannel
from adapters.drivers.common import ChannelFactory, check_environment, fetch_tab_list
from adapters.probes import BinaryProbe, ProbeChain
from core.config import AppSettings
from core.domain.errors import UnsupportedOperation
from core.domain.models import DriverConfig, DriverState, EnvironmentCheckResult, ReopenReport, TabRecord
from core.interfaces.driver import TabDriver
from core.interfaces.output import OutputSink
from core.interfaces.probe import EnvironmentProbe
from core.services.lifecycle import DriverLifecycle


class LegacyDriver(TabDriver):
    name = "legacy"
    tabs_path = "/json"

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

    def check_environment(self) -> EnvironmentCheckResult:
        probe = self._probe or ProbeChain([BinaryProbe(self._settings.adb_binary)])
        return check_environment(self._lifecycle, probe)

    def fetch_tabs(self, console: OutputSink) -> list[TabRecord]:
        self._lifecycle.ensure_usable()
        return fetch_tab_list(self._lifecycle, self._channel_factory(), self.tabs_path, console)

    def reopen_tabs(self, records: Sequence[TabRecord], console: OutputSink) -> ReopenReport:
        error = UnsupportedOperation("the legacy driver cannot reopen tabs", stage="reopen")
        self._lifecycle.fail(error)
        raise error
