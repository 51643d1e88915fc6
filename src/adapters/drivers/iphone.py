"""Driver: Safari / WebKit on iOS through ios_webkit_debug_proxy."""

from __future__ import annotations

from typing import Sequence

from adapters.channels.ios_tunnel import IwdpTunnelChannel
from adapters.drivers.common import ChannelFactory, check_environment, fetch_tab_list
from adapters.probes import BinaryProbe, IosDeviceProbe, ProbeChain
from core.config import AppSettings
from core.domain.errors import UnsupportedOperation
from core.domain.models import DriverConfig, DriverState, EnvironmentCheckResult, ReopenReport, TabRecord
from core.interfaces.driver import TabDriver
from core.interfaces.output import OutputSink
from core.interfaces.probe import EnvironmentProbe
from core.services.lifecycle import DriverLifecycle


class IphoneDriver(TabDriver):
    """Copies tabs from an iPhone/iPad (WebKit inspector enabled in Safari settings)."""

    name = "iphone"
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

    def _default_channel(self) -> IwdpTunnelChannel:
        return IwdpTunnelChannel(
            port=self.config.port,
            timeout_seconds=self.config.timeout_seconds,
            iwdp_binary=self._settings.iwdp_binary,
            ready_seconds=self._settings.tunnel_ready_seconds,
        )

    def _default_probe(self) -> EnvironmentProbe:
        return ProbeChain(
            [
                BinaryProbe(self._settings.iwdp_binary),
                BinaryProbe(self._settings.idevice_id_binary),
                IosDeviceProbe(self._settings.idevice_id_binary, timeout=self._settings.probe_timeout_seconds),
            ]
        )

    def check_environment(self) -> EnvironmentCheckResult:
        return check_environment(self._lifecycle, self._probe or self._default_probe())

    def fetch_tabs(self, console: OutputSink) -> list[TabRecord]:
        self._lifecycle.ensure_usable()
        console.verbose(f"Starting {self._settings.iwdp_binary} on port {self.config.port}...")
        return fetch_tab_list(self._lifecycle, self._channel_factory(), self.tabs_path, console)

    def reopen_tabs(self, records: Sequence[TabRecord], console: OutputSink) -> ReopenReport:
        # The WebKit inspector protocol has no endpoint for opening new tabs.
        error = UnsupportedOperation("the iphone driver cannot reopen tabs", stage="reopen")
        self._lifecycle.fail(error)
        raise error
