"""Driver capability interface.

Android, iPhone and legacy drivers are variants behind this one contract;
the command boundary picks one through `adapters.drivers.create_driver`.
"""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable

from core.domain.models import DriverConfig, DriverState, EnvironmentCheckResult, ReopenReport, TabRecord
from core.interfaces.output import OutputSink


@runtime_checkable
class TabDriver(Protocol):
    """Per-device-class implementation of check + fetch + reopen.

    A driver instance serves exactly one run and is discarded afterwards.
    """

    name: str
    config: DriverConfig

    @property
    def state(self) -> DriverState: ...

    def check_environment(self) -> EnvironmentCheckResult:
        """Run the advisory probe (`idle -> environment_checked`)."""

        ...

    def fetch_tabs(self, console: OutputSink) -> list[TabRecord]:
        """Open the channel, read the tab list, close the channel.

        Raises a `DriverError` subclass on failure.
        """

        ...

    def reopen_tabs(self, records: Sequence[TabRecord], console: OutputSink) -> ReopenReport:
        """Open one tab per record, continuing past individual failures."""

        ...
