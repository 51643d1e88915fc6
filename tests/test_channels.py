from __future__ import annotations

import httpx
import pytest

from adapters.channels import AdbForwardChannel, IwdpTunnelChannel, base
from adapters.drivers.devtools import new_tab_path
from adapters.http_client import build_device_client
from adapters.process_runner import CommandResult, ToolNotFound
from conftest import FakeRunner
from core.domain.errors import ChannelClosed, ChannelSetupFailed, ChannelTimeout, ChannelUnreachable

FORWARD_LIST = "R58M123ABC tcp:9222 localabstract:chrome_devtools_remote\n"


def ok(*args, stdout=""):
    return CommandResult(tuple(args), 0, stdout, "")


def json_transport(body=b"[]", status=200):
    return httpx.MockTransport(lambda request: httpx.Response(status, content=body))


def adb_channel(runner, transport=None):
    return AdbForwardChannel(
        port=9222,
        timeout_seconds=10,
        runner=runner,
        transport=transport or json_transport(),
    )


def test_adb_channel_forwards_verifies_and_removes():
    runner = FakeRunner({("adb", "forward", "--list"): ok("adb", "forward", "--list", stdout=FORWARD_LIST)})
    channel = adb_channel(runner, json_transport(b'[{"url": "https://a.test"}]'))

    with channel:
        assert channel.is_open
        assert channel.request("/json/list") == b'[{"url": "https://a.test"}]'

    assert runner.calls == [
        ("adb", "-d", "forward", "tcp:9222", "localabstract:chrome_devtools_remote"),
        ("adb", "forward", "--list"),
        ("adb", "-d", "forward", "--remove", "tcp:9222"),
    ]
    assert not channel.is_open


def test_adb_channel_removes_forward_when_verification_fails():
    runner = FakeRunner({("adb", "forward", "--list"): ok("adb", "forward", "--list", stdout="")})
    channel = adb_channel(runner)

    with pytest.raises(ChannelSetupFailed, match="not active"):
        channel.open()

    assert runner.calls[-1] == ("adb", "-d", "forward", "--remove", "tcp:9222")
    assert not channel.is_open


def test_adb_channel_missing_tool_is_setup_failure():
    channel = adb_channel(FakeRunner({("adb",): ToolNotFound("adb not found")}))

    with pytest.raises(ChannelSetupFailed, match="not installed"):
        channel.open()


def test_adb_forward_error_is_setup_failure():
    failing = CommandResult(("adb",), 1, "", "adb: error: no devices/emulators found")
    channel = adb_channel(FakeRunner({("adb", "-d", "forward"): failing}))

    with pytest.raises(ChannelSetupFailed, match="no devices"):
        channel.open()


def _opened_adb_channel(transport):
    runner = FakeRunner({("adb", "forward", "--list"): ok(stdout=FORWARD_LIST)})
    channel = adb_channel(runner, transport)
    channel.open()
    return channel


def test_request_timeout_maps_to_channel_timeout():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    channel = _opened_adb_channel(httpx.MockTransport(handler))
    with pytest.raises(ChannelTimeout):
        channel.request("/json/list")
    channel.close()


def test_refused_connection_maps_to_unreachable():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    channel = _opened_adb_channel(httpx.MockTransport(handler))
    with pytest.raises(ChannelUnreachable):
        channel.request("/json/list")
    channel.close()


def test_error_status_maps_to_unreachable():
    channel = _opened_adb_channel(json_transport(b"", status=500))
    with pytest.raises(ChannelUnreachable, match="500"):
        channel.request("/json/new?https://a.test", method="PUT")
    channel.close()


def test_close_is_idempotent_and_blocks_further_use():
    runner = FakeRunner({("adb", "forward", "--list"): ok(stdout=FORWARD_LIST)})
    channel = adb_channel(runner)
    channel.open()
    channel.close()
    channel.close()

    removes = [call for call in runner.calls if "--remove" in call]
    assert len(removes) == 1
    with pytest.raises(ChannelClosed):
        channel.request("/json/list")
    with pytest.raises(ChannelClosed):
        channel.open()


class FakeProcess:
    def __init__(self, exit_code=None):
        self.exit_code = exit_code
        self.terminated = False

    def poll(self):
        return self.exit_code

    def terminate(self):
        self.terminated = True
        self.exit_code = 0

    def kill(self):
        self.exit_code = -9

    def wait(self, timeout=None):
        return self.exit_code


def test_ios_tunnel_spawns_proxy_and_terminates_it():
    process = FakeProcess()
    spawned = []

    def spawner(args):
        spawned.append(list(args))
        return process

    channel = IwdpTunnelChannel(port=9222, timeout_seconds=10, spawner=spawner, transport=json_transport())
    with channel:
        assert channel.request("/json") == b"[]"

    assert spawned == [["ios_webkit_debug_proxy", "-F", "-c", "null:-1,:9222-9222"]]
    assert process.terminated


def test_ios_tunnel_fails_when_proxy_exits():
    channel = IwdpTunnelChannel(
        port=9222,
        timeout_seconds=10,
        spawner=lambda args: FakeProcess(exit_code=1),
        transport=json_transport(),
    )

    with pytest.raises(ChannelSetupFailed, match="exited with code 1"):
        channel.open()


def test_ios_tunnel_gives_up_after_ready_budget():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    now = [0.0]

    def sleep(seconds):
        now[0] += seconds

    process = FakeProcess()
    channel = IwdpTunnelChannel(
        port=9222,
        timeout_seconds=10,
        ready_seconds=1.0,
        spawner=lambda args: process,
        transport=httpx.MockTransport(handler),
        sleep=sleep,
        clock=lambda: now[0],
    )

    with pytest.raises(ChannelSetupFailed, match="not ready"):
        channel.open()
    assert process.terminated


def test_ios_tunnel_missing_binary():
    def spawner(args):
        raise ToolNotFound("ios_webkit_debug_proxy not found")

    channel = IwdpTunnelChannel(port=9222, timeout_seconds=10, spawner=spawner, transport=json_transport())
    with pytest.raises(ChannelSetupFailed, match="not installed"):
        channel.open()


def test_reopen_path_reaches_the_wire_with_fragment_and_percent():
    seen = []

    def handler(request):
        seen.append(request.url.raw_path)
        return httpx.Response(200, content=b"{}")

    runner = FakeRunner({("adb", "forward", "--list"): ok("adb", "forward", "--list", stdout=FORWARD_LIST)})
    channel = adb_channel(runner, httpx.MockTransport(handler))

    with channel:
        channel.request(new_tab_path("https://app.test/page%25x#section-2"), method="PUT")

    assert seen == [b"/json/new?https%3A%2F%2Fapp.test%2Fpage%2525x%23section-2"]


def test_trickling_body_hits_the_overall_deadline(monkeypatch):
    now = [0.0]
    monkeypatch.setattr(base, "_clock", lambda: now[0])

    def trickle():
        for _ in range(5):
            now[0] += 6
            yield b" "

    runner = FakeRunner({("adb", "forward", "--list"): ok("adb", "forward", "--list", stdout=FORWARD_LIST)})
    channel = adb_channel(runner, httpx.MockTransport(lambda request: httpx.Response(200, content=trickle())))

    with channel, pytest.raises(ChannelTimeout, match="within 10s"):
        channel.request("/json/list")


def test_client_timeout_covers_every_phase():
    client = build_device_client(9222, 10)

    assert (client.timeout.connect, client.timeout.read, client.timeout.write) == (10, 10, 10)
    client.close()
