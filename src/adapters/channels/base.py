"""HTTP over an established tunnel.

Subclasses only implement `_setup()` / `_teardown()` (create and remove the
forwarding rule or tunnel process); request handling and the open/closed
bookkeeping live here.
"""

from __future__ import annotations

import logging
import time

import httpx

from adapters.http_client import build_device_client
from core.domain.errors import ChannelClosed, ChannelTimeout, ChannelUnreachable
from core.interfaces.channel import Channel

logger = logging.getLogger(__name__)

_clock = time.monotonic


class HttpChannel(Channel):
    """Base for channels that reach the debugging endpoint via a local port."""

    kind = "http"

    def __init__(
        self,
        *,
        port: int,
        timeout_seconds: float,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.port = port
        self.timeout_seconds = timeout_seconds
        self._transport = transport
        self._client: httpx.Client | None = None
        self._opened = False
        self._closed = False

    @property
    def is_open(self) -> bool:
        return self._opened and not self._closed

    def open(self) -> None:
        if self._closed:
            raise ChannelClosed(f"{self.kind} channel on port {self.port} was already closed")
        if self._opened:
            return

        self._setup()
        self._client = build_device_client(self.port, self.timeout_seconds, transport=self._transport)
        self._opened = True
        logger.debug("%s channel open on port %s", self.kind, self.port)

    def request(self, path: str, *, method: str = "GET") -> bytes:
        if not self.is_open or self._client is None:
            raise ChannelClosed(f"{self.kind} channel on port {self.port} is not open")

        return self._send(self._client, method, path)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if not self._opened:
            return

        client, self._client = self._client, None
        try:
            if client is not None:
                client.close()
        finally:
            self._teardown()
        logger.debug("%s channel on port %s closed", self.kind, self.port)

    def __enter__(self) -> HttpChannel:
        self.open()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # Subclass hooks

    def _setup(self) -> None:
        """Create the tunnel. Raise `ChannelSetupFailed` on failure."""

    def _teardown(self) -> None:
        """Release the tunnel. Must tolerate a half-created tunnel."""

    def _send(self, client: httpx.Client, method: str, path: str) -> bytes:
        """One request, bounded as a whole by `timeout_seconds`.

        httpx applies the timeout to each phase (connect, write, each read), so
        a body that keeps trickling in would never time out; the deadline is
        checked again after the headers and after every chunk.
        """

        logger.debug("%s %s%s", method, client.base_url, path)
        deadline = _clock() + self.timeout_seconds
        try:
            with client.stream(method, path) as response:
                if response.is_error:
                    raise ChannelUnreachable(
                        f"endpoint answered {response.status_code} for {method} {path}"
                    )
                body = bytearray()
                self._check_deadline(deadline, path)
                for chunk in response.iter_bytes():
                    body.extend(chunk)
                    self._check_deadline(deadline, path)
        except httpx.TimeoutException as exc:
            raise ChannelTimeout(
                f"no response from {path} within {self.timeout_seconds}s"
            ) from exc
        except httpx.TransportError as exc:
            raise ChannelUnreachable(f"endpoint on port {self.port} unreachable: {exc}") from exc
        return bytes(body)

    def _check_deadline(self, deadline: float, path: str) -> None:
        if _clock() > deadline:
            raise ChannelTimeout(f"no complete response from {path} within {self.timeout_seconds}s")
