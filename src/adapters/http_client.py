"""httpx wrapper for device debugging endpoints.

- Standardises base URL, timeouts and headers for every channel.
- A transport can be injected (e.g. `httpx.MockTransport`) to simulate a device.
"""

from __future__ import annotations

import httpx

LOCAL_HOST = "127.0.0.1"
USER_AGENT = "tab-transfer/0.1"


def device_base_url(port: int) -> str:
    return f"http://{LOCAL_HOST}:{port}"


def build_device_client(
    port: int,
    timeout_seconds: float,
    *,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Create an `httpx.Client` bound to the forwarded local port.

    No redirects are followed and no retries are configured: one call is one
    request on the wire. `httpx.Timeout` bounds each phase separately
    (connect, write, every read, pool); `HttpChannel` adds the overall deadline.
    """

    return httpx.Client(
        base_url=device_base_url(port),
        timeout=httpx.Timeout(timeout_seconds),
        follow_redirects=False,
        headers={
            "User-Agent": USER_AGENT,
            "Accept": "application/json",
        },
        transport=transport,
    )
