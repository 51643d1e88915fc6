"""Operations shared by the driver variants.

Variants compose these functions instead of inheriting from a base driver.
"""

from __future__ import annotations

from typing import Callable, Sequence

from adapters.drivers.devtools import new_tab_path, parse_tab_list
from core.domain.errors import ChannelError, EnvironmentCheckFailed, driver_error_from_channel
from core.domain.models import (
    DriverState,
    EnvironmentCheckResult,
    ReopenFailure,
    ReopenReport,
    TabRecord,
)
from core.interfaces.channel import Channel
from core.interfaces.output import OutputSink
from core.interfaces.probe import EnvironmentProbe
from core.services.lifecycle import DriverLifecycle, scoped_channel

ChannelFactory = Callable[[], Channel]


def check_environment(lifecycle: DriverLifecycle, probe: EnvironmentProbe) -> EnvironmentCheckResult:
    lifecycle.ensure_usable()
    result = probe.check()
    if not result.ok:
        lifecycle.fail(EnvironmentCheckFailed(result.detail, stage="environment check"))
        return result
    lifecycle.advance(DriverState.ENVIRONMENT_CHECKED)
    return result


def fetch_tab_list(
    lifecycle: DriverLifecycle,
    channel: Channel,
    path: str,
    console: OutputSink,
) -> list[TabRecord]:
    with scoped_channel(channel, lifecycle):
        console.verbose(f"Requesting tab list from {path}...")
        try:
            body = channel.request(path)
        except ChannelError as exc:
            raise driver_error_from_channel(exc, stage="fetch") from exc

        tabs = parse_tab_list(body)
        console.verbose(f"Device reported {len(tabs)} open tabs.")
        lifecycle.advance(DriverState.FETCHED)
    return tabs


def reopen_each(
    lifecycle: DriverLifecycle,
    channel: Channel,
    records: Sequence[TabRecord],
    console: OutputSink,
) -> ReopenReport:
    """One `PUT /json/new` per record; a failing record never stops the rest."""

    report = ReopenReport()
    with scoped_channel(channel, lifecycle):
        for record in records:
            try:
                channel.request(new_tab_path(record.url), method="PUT")
            except ChannelError as exc:
                console.verbose(f"Could not reopen {record.url}: {exc}")
                report.failed.append(ReopenFailure(record=record, reason=str(exc)))
                continue
            console.verbose(f"Reopened {record.url}")
            report.opened.append(record)
        lifecycle.advance(DriverState.REOPENED)
    return report
