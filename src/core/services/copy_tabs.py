"""Copy/reopen orchestration.

The CLI delegates a whole run to `CopyTabsService` and only deals with its
result: a list of `TabRecord` or one `CopyTabsException`. No retries happen
here; the first failing stage ends the run.
"""

from __future__ import annotations

import logging
from typing import Sequence

from core.domain.errors import CopyTabsException, DriverError, PartialReopenFailure, ProbeMisconfigured
from core.domain.models import EnvironmentCheckResult, ReopenReport, TabRecord
from core.interfaces.driver import TabDriver
from core.interfaces.output import OutputSink

logger = logging.getLogger(__name__)


class CopyTabsService:
    def __init__(self, console: OutputSink) -> None:
        self._console = console

    def run(self, driver: TabDriver) -> list[TabRecord]:
        """Environment check (unless skipped), then open, fetch and close.

        Raises `CopyTabsException`; its `exit_code` is 2 when the environment
        check failed and 1 for every other stage.
        """

        self._check_environment(driver)
        try:
            tabs = driver.fetch_tabs(self._console)
        except DriverError as exc:
            raise CopyTabsException.from_driver_error(exc) from exc

        logger.debug("%s driver copied %d tabs", driver.name, len(tabs))
        return tabs

    def reopen(self, driver: TabDriver, records: Sequence[TabRecord]) -> ReopenReport:
        """Reopen `records` on the device, one request per tab.

        When some tabs fail the exception carries the full `ReopenReport`, so
        the caller can still show what was restored.
        """

        self._check_environment(driver)
        try:
            report = driver.reopen_tabs(records, self._console)
        except DriverError as exc:
            raise CopyTabsException.from_driver_error(exc) from exc

        if report.failed:
            partial = PartialReopenFailure(report)
            raise CopyTabsException.from_driver_error(partial) from partial
        return report

    def _check_environment(self, driver: TabDriver) -> EnvironmentCheckResult | None:
        if driver.config.skip_environment_check:
            self._console.note("Skipping environment check.")
            return None

        self._console.verbose(f"Checking environment for {driver.name}...")
        try:
            result = driver.check_environment()
        except ProbeMisconfigured as exc:
            raise CopyTabsException.probe_misconfigured(str(exc)) from exc
        if not result.ok:
            raise CopyTabsException.environment_check_failed(result.detail)
        return result
