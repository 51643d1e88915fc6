"""Rich UI components for the CLI.

Tables and panels live here so the commands only decide *what* to show.
"""

from __future__ import annotations

from typing import Sequence

from rich.table import Table

from core.domain.models import EnvironmentCheckResult, ReopenReport, TabRecord


def build_tabs_table(tabs: Sequence[TabRecord]) -> Table:
    table = Table(title="Copied Tabs")
    table.add_column("Title", style="white")
    table.add_column("URL", style="magenta", overflow="fold")
    for tab in tabs:
        table.add_row(tab.title or "--", tab.url)
    return table


def build_environment_table(driver_name: str, result: EnvironmentCheckResult) -> Table:
    """One row per probe step, as run by `check-environment`."""

    table = Table(title=f"Environment ({driver_name})")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")
    for check in result.checks:
        table.add_row(check.name, "OK" if check.ok else "FAIL", check.detail)
    return table


def build_reopen_table(report: ReopenReport) -> Table:
    table = Table(title="Reopened Tabs")
    table.add_column("URL", style="magenta", overflow="fold")
    table.add_column("Status", style="white", no_wrap=True)
    table.add_column("Error", style="red")
    for record in report.opened:
        table.add_row(record.url, "OK", "")
    for failure in report.failed:
        table.add_row(failure.record.url, "FAIL", failure.reason)
    return table
