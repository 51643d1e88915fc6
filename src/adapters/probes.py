"""Environment probes.

Each step answers one question (tool on PATH? device listed?) and returns an
`EnvironmentCheck`. `ProbeChain` runs steps in order and stops at the first
failure. Probes only run read-only queries (`adb devices`, `idevice_id -l`)
with a short fixed budget, independent of the user's fetch timeout.
"""

from __future__ import annotations

import shutil
from typing import Callable, Protocol, Sequence

from adapters.process_runner import CommandRunner, CommandTimeout, ToolNotFound, run_command
from core.domain.errors import ProbeMisconfigured
from core.domain.models import EnvironmentCheck, EnvironmentCheckResult
from core.interfaces.probe import EnvironmentProbe


class ProbeStep(Protocol):
    name: str

    def run(self) -> EnvironmentCheck: ...


def _require_binary(binary: str) -> str:
    binary = (binary or "").strip()
    if not binary:
        raise ProbeMisconfigured("probe has no binary configured")
    return binary


class BinaryProbe:
    """Checks that an executable is available on PATH."""

    def __init__(self, binary: str, *, which: Callable[[str], str | None] = shutil.which) -> None:
        self.binary = _require_binary(binary)
        self.name = f"{self.binary} on PATH"
        self._which = which

    def run(self) -> EnvironmentCheck:
        location = self._which(self.binary)
        if location:
            return EnvironmentCheck(name=self.name, ok=True, detail=location)
        return EnvironmentCheck(name=self.name, ok=False, detail=f"{self.binary} not found")


class AdbDeviceProbe:
    """Checks that the adb daemon answers and lists a usable device."""

    name = "Android device"

    def __init__(self, adb_binary: str, *, timeout: float, runner: CommandRunner = run_command) -> None:
        self.adb_binary = _require_binary(adb_binary)
        self.timeout = timeout
        self._runner = runner

    def run(self) -> EnvironmentCheck:
        try:
            result = self._runner([self.adb_binary, "devices"], self.timeout)
        except (ToolNotFound, CommandTimeout) as exc:
            return EnvironmentCheck(name=self.name, ok=False, detail=str(exc))
        if not result.ok:
            return EnvironmentCheck(
                name=self.name,
                ok=False,
                detail=f"adb daemon not usable: {result.output.strip() or result.returncode}",
            )

        ready, other = parse_adb_devices(result.stdout)
        if ready:
            return EnvironmentCheck(name=self.name, ok=True, detail=", ".join(ready))
        if other:
            states = ", ".join(f"{serial} ({state})" for serial, state in other)
            return EnvironmentCheck(
                name=self.name,
                ok=False,
                detail=f"device not ready: {states}; allow USB debugging on the device",
            )
        return EnvironmentCheck(name=self.name, ok=False, detail="no device connected")


def parse_adb_devices(output: str) -> tuple[list[str], list[tuple[str, str]]]:
    """Split `adb devices` output into ready serials and (serial, state) others."""

    ready: list[str] = []
    other: list[tuple[str, str]] = []
    for raw_line in output.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("List of devices") or line.startswith("*"):
            continue
        parts = line.split()
        if len(parts) < 2:
            continue
        serial, state = parts[0], parts[1]
        if state == "device":
            ready.append(serial)
        else:
            other.append((serial, state))
    return ready, other


class IosDeviceProbe:
    """Checks that libimobiledevice lists at least one attached device."""

    name = "iOS device"

    def __init__(self, idevice_id_binary: str, *, timeout: float, runner: CommandRunner = run_command) -> None:
        self.idevice_id_binary = _require_binary(idevice_id_binary)
        self.timeout = timeout
        self._runner = runner

    def run(self) -> EnvironmentCheck:
        try:
            result = self._runner([self.idevice_id_binary, "-l"], self.timeout)
        except (ToolNotFound, CommandTimeout) as exc:
            return EnvironmentCheck(name=self.name, ok=False, detail=str(exc))
        if not result.ok:
            return EnvironmentCheck(name=self.name, ok=False, detail=result.output.strip() or "usbmuxd not reachable")

        udids = [line.strip() for line in result.stdout.splitlines() if line.strip()]
        if not udids:
            return EnvironmentCheck(name=self.name, ok=False, detail="no device connected")
        return EnvironmentCheck(name=self.name, ok=True, detail=", ".join(udids))


class ProbeChain(EnvironmentProbe):
    """Runs probe steps in order, stopping at the first failing one."""

    def __init__(self, steps: Sequence[ProbeStep]) -> None:
        self.steps = list(steps)

    def check(self) -> EnvironmentCheckResult:
        if not self.steps:
            raise ProbeMisconfigured("no probe steps configured")

        checks: list[EnvironmentCheck] = []
        for step in self.steps:
            outcome = step.run()
            checks.append(outcome)
            if not outcome.ok:
                return EnvironmentCheckResult(ok=False, detail=f"{outcome.name}: {outcome.detail}", checks=checks)

        return EnvironmentCheckResult(ok=True, detail="all checks passed", checks=checks)
