"""Helpers for the DevTools-style HTTP protocol exposed by mobile browsers.

Chrome for Android answers `/json/list`; ios_webkit_debug_proxy and older
Chrome builds answer `/json`. Both return a JSON array of page descriptors.
"""

from __future__ import annotations

import json
from typing import Any
from urllib.parse import quote

from pydantic import ValidationError

from core.domain.errors import ProtocolError
from core.domain.models import TabRecord

PAGE_TYPE = "page"


def parse_tab_list(body: bytes, *, stage: str = "fetch") -> list[TabRecord]:
    """Map a descriptor array to `TabRecord`s, keeping device order.

    Entries with a `type` other than `page` (service workers, background
    pages, iframes) are skipped. Descriptors without `type` (iOS, older
    Chrome) count as pages. A malformed payload or a page without a usable
    `url` raises `ProtocolError`; nothing is dropped silently.
    """

    try:
        payload: Any = json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ProtocolError(f"tab list is not valid JSON: {exc}", stage=stage) from exc

    if not isinstance(payload, list):
        raise ProtocolError(
            f"tab list must be a JSON array, got {type(payload).__name__}",
            stage=stage,
        )

    tabs: list[TabRecord] = []
    for index, entry in enumerate(payload):
        if not isinstance(entry, dict):
            raise ProtocolError(f"entry {index} is not an object", stage=stage)

        kind = entry.get("type")
        if kind is not None and kind != PAGE_TYPE:
            continue
        if "url" not in entry:
            raise ProtocolError(f"entry {index} has no url", stage=stage)

        try:
            tabs.append(TabRecord.model_validate({"title": entry.get("title"), "url": entry["url"]}))
        except ValidationError as exc:
            errors = "; ".join(err["msg"] for err in exc.errors())
            raise ProtocolError(f"entry {index} is invalid: {errors}", stage=stage) from exc
    return tabs


def new_tab_path(url: str) -> str:
    """Path for `PUT /json/new?<url>` (opens one tab in the device browser).

    The whole URL is percent-encoded once; the endpoint unescapes the query
    once, so fragments and literal `%` survive.
    """

    return "/json/new?" + quote(url, safe="")
