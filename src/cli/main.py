"""tab-transfer CLI (typer).

Commands:
- `copy-tabs android|iphone [FILE]` (plus `legacy` in compatibility mode)
- `reopen-tabs android FILE`
- `check-environment --driver NAME`

Exit codes: 0 success, 1 failure, 2 environment check failed.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console

from adapters.drivers import COMPAT_ONLY_DRIVERS, create_driver
from adapters.json_exporter import DATE_FORMAT, build_output_path, export_tabs_json, load_tabs_json
from cli import doctor
from cli.console import RichOutput, configure_logging
from cli.ui_components import build_reopen_table, build_tabs_table
from core.config import AppSettings
from core.domain.errors import EXIT_FAILURE, CopyTabsException
from core.domain.models import DriverConfig
from core.services.copy_tabs import CopyTabsService
from core.services.options import build_driver_config

COPY_DRIVERS = ("android", "iphone", "legacy")
REOPEN_DRIVERS = ("android",)


def _make_config(
    settings: AppSettings,
    output: RichOutput,
    *,
    port: str | None,
    timeout: str | None,
    with_date: bool,
    skip_check: bool,
) -> DriverConfig:
    return build_driver_config(
        port=settings.default_port if port is None else port,
        timeout=settings.default_timeout_seconds if timeout is None else timeout,
        file_date=date.today() if with_date else None,
        skip_check=skip_check,
        default_port=settings.default_port,
        default_timeout=settings.default_timeout_seconds,
        warning=output.warning,
    )


def copy_tabs(
    driver_name: str,
    settings: AppSettings,
    *,
    file: str | None,
    with_date: bool,
    port: str | None,
    timeout: str | None,
    skip_check: bool,
    verbosity: int,
) -> int:
    console = Console()
    output = RichOutput(console, verbosity=verbosity)
    configure_logging(verbosity)

    config = _make_config(
        settings, output, port=port, timeout=timeout, with_date=with_date, skip_check=skip_check
    )
    driver = create_driver(driver_name, config, settings)

    try:
        tabs = CopyTabsService(output).run(driver)
    except CopyTabsException as exc:
        output.error(str(exc))
        return exc.exit_code

    path = build_output_path(file or settings.default_file, config.file_date)
    try:
        export_tabs_json(tabs=tabs, output_path=path)
    except OSError as exc:
        output.error(f"Could not write {path}: {exc}")
        return EXIT_FAILURE

    if not tabs:
        output.note("No tabs were copied from the device.")
    output.success(f"Successfully copied {len(tabs)} tabs from the device to {path}.")

    if tabs and output.is_debug:
        console.print(build_tabs_table(tabs))
    return 0


def reopen_tabs(
    driver_name: str,
    settings: AppSettings,
    *,
    file: Path,
    port: str | None,
    timeout: str | None,
    skip_check: bool,
    verbosity: int,
) -> int:
    console = Console()
    output = RichOutput(console, verbosity=verbosity)
    configure_logging(verbosity)

    try:
        records = load_tabs_json(file)
    except (OSError, ValidationError) as exc:
        output.error(f"Could not read tabs from {file}: {exc}")
        return EXIT_FAILURE

    config = _make_config(
        settings, output, port=port, timeout=timeout, with_date=False, skip_check=skip_check
    )
    driver = create_driver(driver_name, config, settings)

    try:
        report = CopyTabsService(output).reopen(driver, records)
    except CopyTabsException as exc:
        if exc.report is not None:
            console.print(build_reopen_table(exc.report))
        output.error(str(exc))
        return exc.exit_code

    if output.verbosity >= 1:
        console.print(build_reopen_table(report))
    output.success(f"Successfully reopened {len(report.opened)} tabs on the device.")
    return 0


def build_app(settings: AppSettings | None = None) -> typer.Typer:
    """Create the CLI; the legacy command is only registered in compatibility mode."""

    settings = settings or AppSettings()

    app = typer.Typer(no_args_is_help=True, help="Copy open browser tabs from a mobile device and reopen them.")
    copy_app = typer.Typer(no_args_is_help=True, help="Copy the open tabs of a device to a JSON file.")
    reopen_app = typer.Typer(no_args_is_help=True, help="Reopen tabs from a JSON file on a device.")
    app.add_typer(copy_app, name="copy-tabs")
    app.add_typer(reopen_app, name="reopen-tabs")
    doctor.register(app, settings)

    def register_copy(driver_name: str) -> None:
        @copy_app.command(name=driver_name)
        def command(
            file: Optional[str] = typer.Argument(
                None,
                help=f"Relative file path to write (default {settings.default_file}); --date applies as well.",
            ),
            with_date: bool = typer.Option(
                True,
                "--date/--no-date",
                help=f"Add the date suffix ({date.today().strftime(DATE_FORMAT)}) to the filename.",
            ),
            port: Optional[str] = typer.Option(
                None, "--port", "-p", help=f"Port to forward requests through (default {settings.default_port})."
            ),
            timeout: Optional[str] = typer.Option(
                None, "--timeout", "-t", help="Network timeout for the download request (at least 10 seconds)."
            ),
            skip_check: bool = typer.Option(False, "--skip-check", help="Skip the environment check."),
            verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="Increase verbosity (-vvv prints tabs)."),
        ) -> None:
            code = copy_tabs(
                driver_name,
                settings,
                file=file,
                with_date=with_date,
                port=port,
                timeout=timeout,
                skip_check=skip_check,
                verbosity=verbose,
            )
            if code:
                raise typer.Exit(code=code)

        command.__doc__ = f"Copy tabs using the {driver_name} driver."

    def register_reopen(driver_name: str) -> None:
        @reopen_app.command(name=driver_name)
        def command(
            file: Path = typer.Argument(..., help="Tabs file written by copy-tabs."),
            port: Optional[str] = typer.Option(None, "--port", "-p", help="Port to forward requests through."),
            timeout: Optional[str] = typer.Option(None, "--timeout", "-t", help="Per-request timeout (at least 10 seconds)."),
            skip_check: bool = typer.Option(False, "--skip-check", help="Skip the environment check."),
            verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="Increase verbosity."),
        ) -> None:
            code = reopen_tabs(
                driver_name,
                settings,
                file=file,
                port=port,
                timeout=timeout,
                skip_check=skip_check,
                verbosity=verbose,
            )
            if code:
                raise typer.Exit(code=code)

        command.__doc__ = f"Reopen tabs using the {driver_name} driver."

    for name in COPY_DRIVERS:
        if name in COMPAT_ONLY_DRIVERS and not settings.compat_mode:
            continue
        register_copy(name)
    for name in REOPEN_DRIVERS:
        register_reopen(name)

    return app


def run() -> None:
    build_app()()
