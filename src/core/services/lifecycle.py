"""Driver state machine and scoped channel use.

    idle -> environment_checked -> connected -> fetched|reopened -> closed
                                                   any non-terminal -> failed

A driver owns one `DriverLifecycle`; once it reaches `closed` or `failed` the
driver cannot be used again.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from core.domain.errors import (
    ChannelError,
    ConnectionFailed,
    DriverError,
    DriverReuseError,
    FailureKind,
)
from core.domain.models import DriverState
from core.interfaces.channel import Channel

logger = logging.getLogger(__name__)

_TRANSITIONS: dict[DriverState, frozenset[DriverState]] = {
    DriverState.IDLE: frozenset({DriverState.ENVIRONMENT_CHECKED, DriverState.CONNECTED}),
    DriverState.ENVIRONMENT_CHECKED: frozenset({DriverState.CONNECTED}),
    DriverState.CONNECTED: frozenset({DriverState.FETCHED, DriverState.REOPENED}),
    DriverState.FETCHED: frozenset({DriverState.CLOSED}),
    DriverState.REOPENED: frozenset({DriverState.CLOSED}),
}

TERMINAL_STATES = frozenset({DriverState.CLOSED, DriverState.FAILED})


class DriverLifecycle:
    def __init__(self, driver_name: str) -> None:
        self.driver_name = driver_name
        self.state = DriverState.IDLE
        self.failure: FailureKind | None = None
        self.history: list[DriverState] = [DriverState.IDLE]

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def ensure_usable(self) -> None:
        if self.is_terminal:
            raise DriverReuseError(
                f"{self.driver_name} driver already {self.state.value}; create a new driver per run"
            )

    def advance(self, target: DriverState) -> None:
        self.ensure_usable()
        if target not in _TRANSITIONS.get(self.state, frozenset()):
            raise DriverReuseError(
                f"{self.driver_name} driver cannot go from {self.state.value} to {target.value}"
            )
        self._enter(target)

    def fail(self, error: DriverError) -> None:
        if self.is_terminal:
            return
        self.failure = error.kind
        self._enter(DriverState.FAILED)

    def _enter(self, state: DriverState) -> None:
        logger.debug("%s driver: %s -> %s", self.driver_name, self.state.value, state.value)
        self.state = state
        self.history.append(state)


@contextmanager
def scoped_channel(channel: Channel, lifecycle: DriverLifecycle) -> Iterator[Channel]:
    """Open `channel` for one operation and close it exactly once.

    - Open failures move the driver to `failed` as `ConnectionFailed`.
    - Errors raised inside the block close the channel, mark the driver failed
      and propagate; a close error there is logged, the original error wins.
    - A close error after a clean block is raised as `ConnectionFailed` at
      stage `close`.
    """

    lifecycle.ensure_usable()
    try:
        channel.open()
    except ChannelError as exc:
        error = ConnectionFailed(str(exc), stage="connect")
        lifecycle.fail(error)
        raise error from exc
    lifecycle.advance(DriverState.CONNECTED)

    try:
        yield channel
    except BaseException as exc:
        try:
            channel.close()
        except ChannelError:
            logger.warning("closing %s driver channel failed", lifecycle.driver_name, exc_info=True)
        if isinstance(exc, DriverError):
            lifecycle.fail(exc)
        else:
            lifecycle.fail(ConnectionFailed(str(exc), stage=lifecycle.state.value))
        raise

    try:
        channel.close()
    except ChannelError as exc:
        error = ConnectionFailed(str(exc), stage="close")
        lifecycle.fail(error)
        raise error from exc
    lifecycle.advance(DriverState.CLOSED)
