from __future__ import annotations

from typing import Sequence

import pytest

from adapters.process_runner import CommandResult
from core.domain.errors import ChannelClosed, ChannelError
from core.domain.models import DriverConfig, EnvironmentCheck, EnvironmentCheckResult


class RecordingOutput:
    """OutputSink that keeps every message for assertions."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def _record(self, kind: str, message: str) -> None:
        self.messages.append((kind, message))

    def success(self, message: str) -> None:
        self._record("success", message)

    def warning(self, message: str) -> None:
        self._record("warning", message)

    def note(self, message: str) -> None:
        self._record("note", message)

    def error(self, message: str) -> None:
        self._record("error", message)

    def verbose(self, message: str) -> None:
        self._record("verbose", message)

    def of(self, kind: str) -> list[str]:
        return [message for k, message in self.messages if k == kind]


Response = object


class FakeChannel:
    """Channel double counting open/close calls."""

    def __init__(
        self,
        responses: dict[str, Response] | None = None,
        *,
        open_error: ChannelError | None = None,
        close_error: ChannelError | None = None,
    ) -> None:
        self.responses = responses or {}
        self.open_error = open_error
        self.close_error = close_error
        self.open_calls = 0
        self.close_calls = 0
        self.requests: list[tuple[str, str]] = []
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self) -> None:
        self.open_calls += 1
        if self.open_error is not None:
            raise self.open_error
        self._open = True

    def request(self, path: str, *, method: str = "GET") -> bytes:
        if not self._open:
            raise ChannelClosed("not open")
        self.requests.append((method, path))
        response = self.responses.get(path)
        if response is None:
            response = self.responses.get("*", b"{}")
        if isinstance(response, ChannelError):
            raise response
        if callable(response):
            return response(method, path)
        return response

    def close(self) -> None:
        self.close_calls += 1
        self._open = False
        if self.close_error is not None:
            raise self.close_error


class FakeProbe:
    def __init__(self, ok: bool = True, detail: str = "all checks passed") -> None:
        self.result = EnvironmentCheckResult(
            ok=ok,
            detail=detail,
            checks=[EnvironmentCheck(name="fake", ok=ok, detail=detail)],
        )
        self.calls = 0

    def check(self) -> EnvironmentCheckResult:
        self.calls += 1
        return self.result


class FakeRunner:
    """CommandRunner double: answers by argv prefix, records every call."""

    def __init__(self, answers: dict[tuple[str, ...], CommandResult | Exception] | None = None) -> None:
        self.answers = answers or {}
        self.calls: list[tuple[str, ...]] = []

    def __call__(self, args: Sequence[str], timeout: float) -> CommandResult:
        argv = tuple(args)
        self.calls.append(argv)
        for prefix, answer in sorted(self.answers.items(), key=lambda item: -len(item[0])):
            if argv[: len(prefix)] == prefix:
                if isinstance(answer, Exception):
                    raise answer
                return answer
        return CommandResult(argv, 0, "", "")


@pytest.fixture
def output() -> RecordingOutput:
    return RecordingOutput()


@pytest.fixture
def config() -> DriverConfig:
    return DriverConfig(port=9222, timeout_seconds=10)
