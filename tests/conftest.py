"""Test configuration and fixtures."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import UTC, datetime

import pytest

from random_number_workflow.orchestrator.workflow.capabilities import Payload, SimulatedClock
from random_number_workflow.orchestrator.workflow.definition import (
    build_random_number_workflow,
)
from random_number_workflow.orchestrator.workflow.executor import WorkflowExecutor
from random_number_workflow.orchestrator.workflow.state_machine import WorkflowDefinition


class SequenceInvoker:
    """Fake function that returns a fixed sequence of values."""

    def __init__(self, values: Iterable[float]) -> None:
        self._values = list(values)
        self.calls = 0

    def invoke(self) -> Payload:
        if self.calls >= len(self._values):
            raise AssertionError("SequenceInvoker ran out of values")
        value = self._values[self.calls]
        self.calls += 1
        return {"value": value}


@pytest.fixture
def definition() -> WorkflowDefinition:
    return build_random_number_workflow()


@pytest.fixture
def clock() -> SimulatedClock:
    return SimulatedClock(start=datetime(2024, 5, 1, 12, 0, 0, tzinfo=UTC))


@pytest.fixture
def make_executor(
    definition: WorkflowDefinition, clock: SimulatedClock
) -> Callable[..., tuple[WorkflowExecutor, SequenceInvoker]]:
    """Build an executor over the Random Number workflow fed by fixed values."""

    def _make(
        *values: float, max_state_transitions: int = 1000
    ) -> tuple[WorkflowExecutor, SequenceInvoker]:
        invoker = SequenceInvoker(values)
        executor = WorkflowExecutor(
            definition,
            invoker=invoker,
            scheduler=clock,
            max_state_transitions=max_state_transitions,
        )
        return executor, invoker

    return _make

