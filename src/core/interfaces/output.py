"""Output collaborator used for progress and result messages."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class OutputSink(Protocol):
    def success(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def note(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def verbose(self, message: str) -> None:
        """Progress notes, only shown at higher verbosity."""

        ...
