from __future__ import annotations

import json
from datetime import date

import pytest
from typer.testing import CliRunner

import cli.doctor
import cli.main
from adapters.drivers import AndroidDriver
from cli.main import build_app
from conftest import FakeChannel, FakeProbe
from core.config import AppSettings
from core.domain.errors import ChannelSetupFailed, ChannelUnreachable

runner = CliRunner()

BODY = b'[{"title":"Example","url":"https://example.com"},{"title":"","url":"https://a.test"}]'


@pytest.fixture
def fake_device(monkeypatch):
    """Route every created driver to a fake channel/probe pair."""

    state = {"channel": FakeChannel({"/json/list": BODY}), "probe": FakeProbe(), "configs": []}

    def create_driver(name, config, settings=None):
        state["configs"].append(config)
        return AndroidDriver(
            config,
            settings or AppSettings(),
            channel_factory=lambda: state["channel"],
            probe=state["probe"],
        )

    monkeypatch.setattr(cli.main, "create_driver", create_driver)
    monkeypatch.setattr(cli.doctor, "create_driver", create_driver)
    return state


def test_copy_writes_file_and_exits_0(tmp_path, fake_device):
    target = tmp_path / "tabs.json"

    result = runner.invoke(build_app(AppSettings()), ["copy-tabs", "android", str(target), "--no-date"])

    assert result.exit_code == 0, result.output
    assert json.loads(target.read_text(encoding="utf-8")) == [
        {"title": "Example", "url": "https://example.com"},
        {"title": "", "url": "https://a.test"},
    ]
    assert "Successfully copied 2 tabs" in result.output


def test_copy_adds_date_suffix_by_default(tmp_path, fake_device):
    result = runner.invoke(build_app(AppSettings()), ["copy-tabs", "android", str(tmp_path / "tabs.json")])

    assert result.exit_code == 0, result.output
    assert (tmp_path / f"tabs-{date.today():%Y-%m-%d}.json").exists()


def test_environment_failure_exits_2_without_opening(tmp_path, fake_device):
    fake_device["probe"] = FakeProbe(ok=False, detail="bridge tool not found")

    result = runner.invoke(build_app(AppSettings()), ["copy-tabs", "android", str(tmp_path / "t.json")])

    assert result.exit_code == 2
    assert fake_device["channel"].open_calls == 0
    assert not (tmp_path / "t.json").exists()


def test_connection_failure_with_skip_check_exits_1(tmp_path, fake_device):
    fake_device["channel"] = FakeChannel(open_error=ChannelSetupFailed("no device found"))

    result = runner.invoke(
        build_app(AppSettings()),
        ["copy-tabs", "android", str(tmp_path / "t.json"), "--skip-check"],
    )

    assert result.exit_code == 1
    assert fake_device["probe"].calls == 0
    assert fake_device["channel"].open_calls == 1


def test_invalid_port_and_timeout_fall_back_with_warnings(tmp_path, fake_device):
    result = runner.invoke(
        build_app(AppSettings()),
        ["copy-tabs", "android", str(tmp_path / "t.json"), "--port=-1", "--timeout=3", "--no-date"],
    )

    assert result.exit_code == 0, result.output
    config = fake_device["configs"][0]
    assert (config.port, config.timeout_seconds) == (9222, 10)
    assert result.output.count("Invalid port given") == 1
    assert result.output.count("Invalid timeout given") == 1


def test_legacy_command_requires_compat_mode(tmp_path, fake_device):
    args = ["copy-tabs", "legacy", str(tmp_path / "t.json"), "--no-date"]

    assert runner.invoke(build_app(AppSettings(compat_mode=False)), args).exit_code != 0
    assert runner.invoke(build_app(AppSettings(compat_mode=True)), args).exit_code == 0


def test_reopen_partial_failure_exits_1(tmp_path, fake_device):
    source = tmp_path / "tabs.json"
    source.write_text(
        json.dumps([{"title": "ok", "url": "https://ok.test/"}, {"title": "bad", "url": "https://bad.test/"}]),
        encoding="utf-8",
    )

    def answer(method, path):
        if "bad.test" in path:
            raise ChannelUnreachable("endpoint answered 500")
        return b"{}"

    fake_device["channel"] = FakeChannel({"*": answer})

    result = runner.invoke(build_app(AppSettings()), ["reopen-tabs", "android", str(source)])

    assert result.exit_code == 1
    assert len(fake_device["channel"].requests) == 2


def test_reopen_missing_file_exits_1(tmp_path, fake_device):
    result = runner.invoke(build_app(AppSettings()), ["reopen-tabs", "android", str(tmp_path / "missing.json")])
    assert result.exit_code == 1


def test_check_environment_exit_codes(fake_device):
    app = build_app(AppSettings())
    assert runner.invoke(app, ["check-environment", "--driver", "android"]).exit_code == 0

    fake_device["probe"] = FakeProbe(ok=False, detail="bridge tool not found")
    assert runner.invoke(app, ["check-environment", "--driver", "android"]).exit_code == 2


def test_check_environment_unknown_driver_exits_1():
    result = runner.invoke(build_app(AppSettings()), ["check-environment", "--driver", "blackberry"])
    assert result.exit_code == 1
