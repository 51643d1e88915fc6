"""iOS channel: device-multiplexing tunnel via ios_webkit_debug_proxy.

The proxy runs as a child process for the lifetime of the channel and maps
the first attached device's WebKit inspector to the local port:

    ios_webkit_debug_proxy -F -c null:-1,:<port>-<port>
"""

from __future__ import annotations

import logging
import subprocess
import time
from typing import Callable

import httpx

from adapters.channels.base import HttpChannel
from adapters.http_client import build_device_client
from adapters.process_runner import ProcessSpawner, SpawnedProcess, ToolNotFound, spawn_process
from core.domain.errors import ChannelSetupFailed

logger = logging.getLogger(__name__)

_POLL_INTERVAL = 0.25


class IwdpTunnelChannel(HttpChannel):
    kind = "ios-tunnel"

    ready_path = "/json"

    def __init__(
        self,
        *,
        port: int,
        timeout_seconds: float,
        iwdp_binary: str = "ios_webkit_debug_proxy",
        ready_seconds: float = 5.0,
        spawner: ProcessSpawner = spawn_process,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__(port=port, timeout_seconds=timeout_seconds, transport=transport)
        self.iwdp_binary = iwdp_binary
        self.ready_seconds = ready_seconds
        self._spawner = spawner
        self._sleep = sleep
        self._clock = clock
        self._process: SpawnedProcess | None = None

    def command(self) -> list[str]:
        return [self.iwdp_binary, "-F", "-c", f"null:-1,:{self.port}-{self.port}"]

    def _setup(self) -> None:
        try:
            self._process = self._spawner(self.command())
        except ToolNotFound as exc:
            raise ChannelSetupFailed(f"{self.iwdp_binary} is not installed or not on PATH") from exc
        except OSError as exc:
            raise ChannelSetupFailed(f"could not start {self.iwdp_binary}: {exc}") from exc

        try:
            self._wait_until_ready(self._process)
        except BaseException:
            self._stop_process()
            raise

    def _wait_until_ready(self, process: SpawnedProcess) -> None:
        deadline = self._clock() + self.ready_seconds
        last_error = "no answer"
        with build_device_client(self.port, _POLL_INTERVAL * 4, transport=self._transport) as probe:
            while True:
                code = process.poll()
                if code is not None:
                    raise ChannelSetupFailed(
                        f"{self.iwdp_binary} exited with code {code} (is a device attached and trusted?)"
                    )
                try:
                    probe.get(self.ready_path)
                    return
                except httpx.TransportError as exc:
                    last_error = str(exc) or exc.__class__.__name__

                if self._clock() >= deadline:
                    raise ChannelSetupFailed(
                        f"tunnel on port {self.port} not ready after {self.ready_seconds}s: {last_error}"
                    )
                self._sleep(_POLL_INTERVAL)

    def _teardown(self) -> None:
        self._stop_process()

    def _stop_process(self) -> None:
        process, self._process = self._process, None
        if process is None or process.poll() is not None:
            return

        process.terminate()
        try:
            process.wait(timeout=5.0)
        except subprocess.TimeoutExpired:
            logger.warning("%s did not stop, killing it", self.iwdp_binary)
            process.kill()
            process.wait(timeout=5.0)
