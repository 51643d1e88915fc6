"""Failure taxonomy.

Three layers:
- `ChannelError`: transport-level failures raised by a channel.
- `DriverError`: what a driver reports, tagged with a `FailureKind` and the
  stage it happened in.
- `CopyTabsException`: the single exception the service boundary raises; it
  keeps kind and stage and chains the original error.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from core.domain.models import ReopenFailure, ReopenReport

EXIT_FAILURE = 1
EXIT_ENVIRONMENT = 2


class ChannelError(Exception):
    """Base class for transport failures."""


class ChannelSetupFailed(ChannelError):
    """Tool or daemon unavailable, or no device found while opening."""


class ChannelTimeout(ChannelError):
    """No response within the configured budget."""


class ChannelUnreachable(ChannelError):
    """Tunnel is up but the endpoint refused, reset or answered with an error."""


class ChannelClosed(ChannelError):
    """Operation attempted on a channel that is not open."""


class ProbeMisconfigured(ValueError):
    """The probe itself cannot run (e.g. no binary name configured)."""


class DriverReuseError(RuntimeError):
    """A driver was used again after it reached a terminal state."""


class FailureKind(str, Enum):
    ENVIRONMENT_CHECK_FAILED = "EnvironmentCheckFailed"
    CONNECTION_FAILED = "ConnectionFailed"
    TIMEOUT = "Timeout"
    PROTOCOL_ERROR = "ProtocolError"
    PARTIAL_REOPEN_FAILURE = "PartialReopenFailure"
    UNSUPPORTED = "Unsupported"
    PROBE_MISCONFIGURED = "ProbeMisconfigured"


class DriverError(Exception):
    kind: FailureKind = FailureKind.CONNECTION_FAILED

    def __init__(self, message: str, *, stage: str) -> None:
        super().__init__(message)
        self.stage = stage

    def __str__(self) -> str:
        return f"{self.kind.value} during {self.stage}: {self.args[0]}"


class EnvironmentCheckFailed(DriverError):
    kind = FailureKind.ENVIRONMENT_CHECK_FAILED


class ConnectionFailed(DriverError):
    kind = FailureKind.CONNECTION_FAILED


class FetchTimeout(DriverError):
    kind = FailureKind.TIMEOUT


class ProtocolError(DriverError):
    kind = FailureKind.PROTOCOL_ERROR


class UnsupportedOperation(DriverError):
    kind = FailureKind.UNSUPPORTED


class PartialReopenFailure(DriverError):
    kind = FailureKind.PARTIAL_REOPEN_FAILURE

    def __init__(self, report: ReopenReport, *, stage: str = "reopen") -> None:
        super().__init__(
            f"{len(report.failed)} of {len(report.opened) + len(report.failed)} tabs could not be reopened",
            stage=stage,
        )
        self.report = report

    @property
    def failures(self) -> list[ReopenFailure]:
        return list(self.report.failed)


_CHANNEL_ERROR_KINDS: dict[type[ChannelError], type[DriverError]] = {
    ChannelSetupFailed: ConnectionFailed,
    ChannelUnreachable: ConnectionFailed,
    ChannelClosed: ConnectionFailed,
    ChannelTimeout: FetchTimeout,
}


def driver_error_from_channel(exc: ChannelError, *, stage: str) -> DriverError:
    """Translate a transport failure into the driver taxonomy."""

    for channel_type, driver_type in _CHANNEL_ERROR_KINDS.items():
        if isinstance(exc, channel_type):
            return driver_type(str(exc), stage=stage)
    return ConnectionFailed(str(exc), stage=stage)


class CopyTabsException(Exception):
    """The one failure a caller of the service has to handle."""

    def __init__(
        self,
        message: str,
        *,
        kind: FailureKind,
        stage: str,
        report: ReopenReport | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.stage = stage
        self.report = report

    @property
    def exit_code(self) -> int:
        if self.kind is FailureKind.ENVIRONMENT_CHECK_FAILED:
            return EXIT_ENVIRONMENT
        return EXIT_FAILURE

    @classmethod
    def from_driver_error(cls, error: DriverError) -> CopyTabsException:
        report = error.report if isinstance(error, PartialReopenFailure) else None
        return cls(str(error), kind=error.kind, stage=error.stage, report=report)

    @classmethod
    def probe_misconfigured(cls, detail: str) -> CopyTabsException:
        return cls(
            f"{FailureKind.PROBE_MISCONFIGURED.value} during environment check: {detail}",
            kind=FailureKind.PROBE_MISCONFIGURED,
            stage="environment check",
        )

    @classmethod
    def environment_check_failed(cls, detail: str) -> CopyTabsException:
        return cls(
            f"{FailureKind.ENVIRONMENT_CHECK_FAILED.value} during environment check: {detail}",
            kind=FailureKind.ENVIRONMENT_CHECK_FAILED,
            stage="environment check",
        )
