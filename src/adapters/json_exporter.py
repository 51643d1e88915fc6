"""Tab file I/O (JSON).

Format: a JSON array of `{"title": ..., "url": ...}` objects, UTF-8,
written with a stable layout so the file diffs cleanly between runs.
"""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Sequence

from pydantic import TypeAdapter

from core.domain.models import TabRecord

DATE_FORMAT = "%Y-%m-%d"

_TABS_ADAPTER = TypeAdapter(list[TabRecord])


def build_output_path(file: str | Path, file_date: date | None = None) -> Path:
    """`tabs.json` + 2026-10-18 -> `tabs-2026-10-18.json`."""

    path = Path(file)
    if file_date is None:
        return path
    suffix = path.suffix or ".json"
    return path.with_name(f"{path.stem}-{file_date.strftime(DATE_FORMAT)}{suffix}")


def export_tabs_json(*, tabs: Sequence[TabRecord], output_path: Path) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = _TABS_ADAPTER.dump_python(list(tabs), mode="json")
    output_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2) + "\n",
        encoding="utf-8",
    )
    return output_path


def load_tabs_json(path: Path) -> list[TabRecord]:
    """Read a file written by `export_tabs_json` (raises `ValidationError` / `ValueError`)."""

    raw = path.read_text(encoding="utf-8")
    return _TABS_ADAPTER.validate_json(raw)
