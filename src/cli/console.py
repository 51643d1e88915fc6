"""Rich-backed output sink and logging setup for the CLI."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from core.interfaces.output import OutputSink


class RichOutput(OutputSink):
    """Implements `OutputSink` on top of `rich.console.Console`.

    `verbosity` follows the `-v` count: 1 shows progress notes, 3 also prints
    the copied tabs.
    """

    def __init__(
        self,
        console: Console | None = None,
        *,
        error_console: Console | None = None,
        verbosity: int = 0,
    ) -> None:
        self.console = console or Console()
        self.error_console = error_console or Console(stderr=True)
        self.verbosity = verbosity

    def success(self, message: str) -> None:
        self.console.print(f"[bold green][OK][/bold green] {escape(message)}")

    def warning(self, message: str) -> None:
        self.console.print(f"[bold yellow][WARNING][/bold yellow] {escape(message)}")

    def note(self, message: str) -> None:
        self.console.print(f"[cyan]! [NOTE][/cyan] {escape(message)}")

    def error(self, message: str) -> None:
        self.error_console.print(f"[bold red][ERROR][/bold red] {escape(message)}")

    def verbose(self, message: str) -> None:
        if self.verbosity >= 1:
            self.console.print(f"[dim]{escape(message)}[/dim]")

    @property
    def is_debug(self) -> bool:
        return self.verbosity >= 3


def configure_logging(verbosity: int) -> None:
    """Route `logging` through rich once `-vv` is given (debug records)."""

    if verbosity < 2:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
