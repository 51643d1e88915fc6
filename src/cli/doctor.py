"""`check-environment`: advisory diagnostics for one driver."""

from __future__ import annotations

import typer
from rich.console import Console

from adapters.drivers import available_drivers, create_driver
from cli.console import RichOutput, configure_logging
from cli.ui_components import build_environment_table
from core.config import AppSettings
from core.domain.errors import EXIT_ENVIRONMENT, EXIT_FAILURE, ProbeMisconfigured
from core.domain.models import DriverConfig


def check_environment(driver_name: str, settings: AppSettings, *, verbosity: int = 0) -> int:
    """Run the driver's probe and print one row per step.

    Returns the exit code: 0 when the host is ready, 2 when it is not, 1 when
    the probe itself could not run.
    """

    console = Console()
    output = RichOutput(console, verbosity=verbosity)
    configure_logging(verbosity)

    if driver_name not in available_drivers(settings):
        output.error(f"Unknown driver {driver_name!r}; choose from {', '.join(available_drivers(settings))}.")
        return EXIT_FAILURE

    driver = create_driver(driver_name, DriverConfig(port=settings.default_port), settings)
    output.verbose(f"Checking environment for {driver_name}...")
    try:
        result = driver.check_environment()
    except ProbeMisconfigured as exc:
        output.error(f"Environment check could not run: {exc}")
        return EXIT_FAILURE

    console.print(build_environment_table(driver_name, result))
    if not result.ok:
        output.error(f"Environment check failed: {result.detail}")
        return EXIT_ENVIRONMENT

    output.success(f"Environment ready for {driver_name}.")
    return 0


def register(app: typer.Typer, settings: AppSettings) -> None:
    @app.command(name="check-environment")
    def check_environment_command(
        driver: str = typer.Option("android", "--driver", help="Driver to check (android, iphone, ...)."),
        verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="Increase verbosity."),
    ) -> None:
        """Check that the tools a driver needs are installed and a device is attached."""

        code = check_environment(driver, settings, verbosity=verbose)
        if code:
            raise typer.Exit(code=code)
