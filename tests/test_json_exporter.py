from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pytest
from pydantic import ValidationError

from adapters.json_exporter import build_output_path, export_tabs_json, load_tabs_json
from core.domain.models import TabRecord


def test_round_trip_preserves_order_and_titles(tmp_path):
    tabs = [
        TabRecord(title="Example", url="https://example.com"),
        TabRecord(title="", url="https://a.test"),
        TabRecord(title="Ünïcødé", url="https://example.com"),
    ]

    path = export_tabs_json(tabs=tabs, output_path=tmp_path / "out" / "tabs.json")

    assert load_tabs_json(path) == tabs
    assert json.loads(path.read_text(encoding="utf-8")) == [
        {"title": "Example", "url": "https://example.com"},
        {"title": "", "url": "https://a.test"},
        {"title": "Ünïcødé", "url": "https://example.com"},
    ]


def test_output_path_date_suffix():
    assert build_output_path("tabs.json", date(2024, 3, 9)) == Path("tabs-2024-03-09.json")
    assert build_output_path("backup/phone", date(2024, 3, 9)) == Path("backup/phone-2024-03-09.json")
    assert build_output_path("tabs.json", None) == Path("tabs.json")


def test_load_rejects_invalid_entries(tmp_path):
    path = tmp_path / "tabs.json"
    path.write_text('[{"title": "x", "url": ""}]', encoding="utf-8")

    with pytest.raises(ValidationError):
        load_tabs_json(path)
