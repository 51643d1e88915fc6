"""Environment probe contract."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.domain.models import EnvironmentCheckResult


@runtime_checkable
class EnvironmentProbe(Protocol):
    """Advisory check that the host can set up a driver's channel.

    A failed probe is an `ok=False` result, never an exception. Only a probe
    that cannot run at all raises (`ProbeMisconfigured`). Probes may list
    devices but must not change host or device state.
    """

    def check(self) -> EnvironmentCheckResult: ...
