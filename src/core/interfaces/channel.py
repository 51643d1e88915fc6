"""Transport contract for one device connection.

A channel is opened once, used for the requests of a single fetch or reopen
operation, and closed exactly once. `close` is idempotent.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Channel(Protocol):
    """Local-to-device path to the browser's debugging endpoint.

    Rules:
    - `open` raises `ChannelSetupFailed` when the tunnel cannot be set up.
    - `request` performs one HTTP call with the configured timeout and never
      retries; it raises `ChannelTimeout`, `ChannelUnreachable` or
      `ChannelClosed`.
    """

    @property
    def is_open(self) -> bool: ...

    def open(self) -> None: ...

    def request(self, path: str, *, method: str = "GET") -> bytes: ...

    def close(self) -> None: ...
