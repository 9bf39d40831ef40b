"""Host services the workflow depends on.

The compute function and the wait/resume mechanism are owned by the
orchestration host. The executor only sees these small interfaces so it can run
against a fake generator and a simulated clock.
"""

from __future__ import annotations

import time
from datetime import UTC, datetime, timedelta
from typing import Protocol

Payload = dict[str, object]


class FunctionInvocationError(RuntimeError):
    """Raised by an invoker to report a named invocation failure."""

    def __init__(self, error: str, cause: str = "") -> None:
        super().__init__(f"{error}: {cause}" if cause else error)
        self.error = error
        self.cause = cause


class FunctionInvoker(Protocol):
    def invoke(self) -> Payload: ...


class ResumeScheduler(Protocol):
    def now(self) -> datetime: ...

    def schedule_resume(self, seconds: float) -> None:
        """Suspend the current execution until ``seconds`` have elapsed."""
        ...


class SystemClock:
    """Wall clock; waits block the calling thread. Meant for local runs only."""

    def now(self) -> datetime:
        return datetime.now(tz=UTC)

    def schedule_resume(self, seconds: float) -> None:
        if seconds > 0:
            time.sleep(seconds)


class SimulatedClock:
    """A virtual clock that advances instantly when a resume is scheduled."""

    def __init__(self, start: datetime | None = None) -> None:
        self._now = start or datetime(2024, 1, 1, tzinfo=UTC)
        self.scheduled: list[float] = []

    def now(self) -> datetime:
        return self._now

    def advance(self, seconds: float) -> None:
        self._now = self._now + timedelta(seconds=seconds)

    def schedule_resume(self, seconds: float) -> None:
        self.scheduled.append(seconds)
        self.advance(seconds)
