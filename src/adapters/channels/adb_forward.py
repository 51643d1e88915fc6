"""Android channel: adb port forward to Chrome's DevTools socket.

    adb -d forward tcp:<port> localabstract:chrome_devtools_remote
    adb forward --list                      (verification)
    adb -d forward --remove tcp:<port>      (release)
"""

from __future__ import annotations

import logging

import httpx

from adapters.channels.base import HttpChannel
from adapters.process_runner import CommandResult, CommandRunner, CommandTimeout, ToolNotFound, run_command
from core.domain.errors import ChannelSetupFailed

logger = logging.getLogger(__name__)


class AdbForwardChannel(HttpChannel):
    kind = "adb-forward"

    def __init__(
        self,
        *,
        port: int,
        timeout_seconds: float,
        adb_binary: str = "adb",
        socket_name: str = "chrome_devtools_remote",
        command_timeout: float = 5.0,
        runner: CommandRunner = run_command,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        super().__init__(port=port, timeout_seconds=timeout_seconds, transport=transport)
        self.adb_binary = adb_binary
        self.socket_name = socket_name
        self.command_timeout = command_timeout
        self._runner = runner
        self._forward_created = False

    @property
    def local_spec(self) -> str:
        return f"tcp:{self.port}"

    @property
    def remote_spec(self) -> str:
        return f"localabstract:{self.socket_name}"

    def _adb(self, *args: str) -> CommandResult:
        try:
            return self._runner([self.adb_binary, *args], self.command_timeout)
        except ToolNotFound as exc:
            raise ChannelSetupFailed(f"{self.adb_binary} is not installed or not on PATH") from exc
        except CommandTimeout as exc:
            raise ChannelSetupFailed(f"{self.adb_binary} did not answer: {exc}") from exc

    def _setup(self) -> None:
        result = self._adb("-d", "forward", self.local_spec, self.remote_spec)
        if not result.ok:
            raise ChannelSetupFailed(
                f"could not forward {self.local_spec} to {self.remote_spec}: "
                f"{result.output.strip() or f'exit code {result.returncode}'}"
            )
        self._forward_created = True

        try:
            self._verify_forward()
        except ChannelSetupFailed:
            self._remove_forward(quiet=True)
            raise

    def _verify_forward(self) -> None:
        result = self._adb("forward", "--list")
        if not result.ok:
            raise ChannelSetupFailed(f"could not list forwards: {result.output.strip()}")

        for line in result.stdout.splitlines():
            parts = line.split()
            if len(parts) >= 3 and parts[1] == self.local_spec and parts[2] == self.remote_spec:
                return
        raise ChannelSetupFailed(f"forward {self.local_spec} -> {self.remote_spec} is not active")

    def _teardown(self) -> None:
        self._remove_forward(quiet=False)

    def _remove_forward(self, *, quiet: bool) -> None:
        if not self._forward_created:
            return
        self._forward_created = False

        try:
            result = self._adb("-d", "forward", "--remove", self.local_spec)
        except ChannelSetupFailed:
            if not quiet:
                raise
            logger.warning("could not remove forward %s", self.local_spec, exc_info=True)
            return

        if not result.ok:
            message = f"could not remove forward {self.local_spec}: {result.output.strip()}"
            if not quiet:
                raise ChannelSetupFailed(message)
            logger.warning(message)
