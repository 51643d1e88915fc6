"""Subprocess helpers for host tools (adb, idevice_id, ios_webkit_debug_proxy).

Channels and probes receive a runner/spawner callable instead of calling
`subprocess` directly, so tests can substitute fakes.
"""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from typing import Callable, Protocol, Sequence

logger = logging.getLogger(__name__)


class ToolNotFound(OSError):
    """The executable is not installed or not on PATH."""


class CommandTimeout(TimeoutError):
    """The command did not finish within its budget."""


@dataclass(frozen=True)
class CommandResult:
    args: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        return (self.stdout or "") + (self.stderr or "")


CommandRunner = Callable[[Sequence[str], float], CommandResult]


class SpawnedProcess(Protocol):
    def poll(self) -> int | None: ...

    def terminate(self) -> None: ...

    def kill(self) -> None: ...

    def wait(self, timeout: float | None = None) -> int: ...


ProcessSpawner = Callable[[Sequence[str]], SpawnedProcess]


def _no_window_flags() -> dict[str, object]:
    if os.name != "nt":
        return {}
    startupinfo = subprocess.STARTUPINFO()
    startupinfo.dwFlags |= subprocess.STARTF_USESHOWWINDOW
    return {"creationflags": subprocess.CREATE_NO_WINDOW, "startupinfo": startupinfo}


def run_command(args: Sequence[str], timeout: float) -> CommandResult:
    """Run a command to completion and capture its output.

    Raises `ToolNotFound` when the executable is missing and `CommandTimeout`
    when it runs past `timeout`. A non-zero exit code is *not* an exception;
    callers inspect `CommandResult.ok`.
    """

    argv = tuple(args)
    logger.debug("run: %s (timeout=%ss)", " ".join(argv), timeout)
    try:
        proc = subprocess.run(
            list(argv),
            capture_output=True,
            text=True,
            shell=False,
            timeout=timeout,
            **_no_window_flags(),
        )
    except FileNotFoundError as exc:
        raise ToolNotFound(f"{argv[0]} not found") from exc
    except subprocess.TimeoutExpired as exc:
        raise CommandTimeout(f"{' '.join(argv)} timed out after {timeout}s") from exc

    result = CommandResult(argv, proc.returncode, proc.stdout or "", proc.stderr or "")
    logger.debug("exit %s: %s", result.returncode, result.output.strip())
    return result


def spawn_process(args: Sequence[str]) -> SpawnedProcess:
    """Start a long-running helper (the iOS tunnel) in the background."""

    argv = list(args)
    logger.debug("spawn: %s", " ".join(argv))
    try:
        return subprocess.Popen(
            argv,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            stdin=subprocess.DEVNULL,
            **_no_window_flags(),
        )
    except FileNotFoundError as exc:
        raise ToolNotFound(f"{argv[0]} not found") from exc
