"""Unit tests for the local workflow executor.

The executor runs against a fixed sequence of sampled values and a simulated
clock, so every scenario is deterministic.
"""

from __future__ import annotations

from datetime import datetime

import pytest

from random_number_workflow.orchestrator.workflow.capabilities import (
    FunctionInvocationError,
    Payload,
    SimulatedClock,
)
from random_number_workflow.orchestrator.workflow.definition import (
    CHOICE_STATE,
    FAIL_ERROR,
    FAIL_STATE,
    INVOKE_STATE,
    SUCCEED_STATE,
    TIMESTAMP_STATE,
    WAIT_STATE,
)
from random_number_workflow.orchestrator.workflow.executor import (
    ERROR_LIMIT_EXCEEDED,
    ERROR_NO_CHOICE_MATCHED,
    ERROR_RUNTIME,
    ERROR_TASK_FAILED,
    ExecutionStatus,
    WorkflowExecutor,
)
from random_number_workflow.orchestrator.workflow.state_machine import WorkflowDefinition

ONE_PASS = [INVOKE_STATE, TIMESTAMP_STATE, WAIT_STATE, CHOICE_STATE]


def _entered(result, state: str) -> list[datetime]:
    return [
        datetime.fromisoformat(e.timestamp.replace("Z", "+00:00"))
        for e in result.history
        if e.state == state and e.type.endswith("StateEntered")
    ]


def test_low_value_fails_with_value_as_cause(make_executor) -> None:
    executor, _ = make_executor(0.1)
    result = executor.start()

    assert result.status is ExecutionStatus.FAILED
    assert result.error == FAIL_ERROR
    assert result.cause == "0.1"
    assert list(result.visited) == ONE_PASS + [FAIL_STATE]
    assert result.output is None
    assert result.history[-1].type == "ExecutionFailed"


def test_middle_value_loops_back_to_invoke(make_executor) -> None:
    executor, invoker = make_executor(0.5, 0.9)
    result = executor.start()

    assert list(result.visited) == ONE_PASS + ONE_PASS + [SUCCEED_STATE]
    assert invoker.calls == 2
    assert result.succeeded


def test_high_value_succeeds(make_executor) -> None:
    executor, _ = make_executor(0.9)
    result = executor.start()

    assert result.status is ExecutionStatus.SUCCEEDED
    assert list(result.visited) == ONE_PASS + [SUCCEED_STATE]
    assert result.output == {"value": 0.9, "timestamp": "2024-05-01T12:00:00.000Z"}
    assert result.error is None
    assert result.history[0].type == "ExecutionStarted"
    assert result.history[-1].type == "ExecutionSucceeded"


@pytest.mark.parametrize("value", [0.3, 0.7])
def test_boundary_values_are_an_open_question(make_executor, value: float) -> None:
    """0.3 and 0.7 match no guard and the branch has no default.

    Kept as inherited: the execution escalates with States.NoChoiceMatched
    rather than being closed with <= or >=.
    """

    executor, _ = make_executor(value)
    result = executor.start()

    assert result.status is ExecutionStatus.FAILED
    assert result.error == ERROR_NO_CHOICE_MATCHED
    assert list(result.visited) == ONE_PASS


def test_timestamp_state_keeps_value_and_adds_timestamp(make_executor) -> None:
    executor, _ = make_executor(0.5, 0.75)
    result = executor.start()

    assert isinstance(result.output, dict)
    assert set(result.output) == {"value", "timestamp"}
    assert result.output["value"] == 0.75
    # Second pass enters the timestamp state after one 5 second wait.
    assert result.output["timestamp"] == "2024-05-01T12:00:05.000Z"
    assert _entered(result, TIMESTAMP_STATE)[-1].isoformat() == "2024-05-01T12:00:05+00:00"


def test_wait_elapses_five_seconds_before_branching(make_executor, clock: SimulatedClock) -> None:
    executor, _ = make_executor(0.4, 0.6, 0.8)
    result = executor.start()

    assert clock.scheduled == [5, 5, 5]
    waits = _entered(result, WAIT_STATE)
    choices = _entered(result, CHOICE_STATE)
    timestamps = _entered(result, TIMESTAMP_STATE)
    assert len(waits) == len(choices) == len(timestamps) == 3
    for stamp, wait, choice in zip(timestamps, waits, choices, strict=True):
        assert stamp <= wait
        assert (choice - wait).total_seconds() >= 5


def test_same_values_visit_same_states(make_executor) -> None:
    first, _ = make_executor(0.45, 0.55, 0.2)
    second, _ = make_executor(0.45, 0.55, 0.2)

    a = first.start()
    b = second.start()

    assert a.visited == b.visited
    assert a.error == b.error == FAIL_ERROR
    assert a.cause == b.cause == "0.2"


def test_executions_do_not_share_state(make_executor) -> None:
    executor, _ = make_executor(0.9, 0.1)
    data = {"seed": [1, 2]}

    first = executor.start(data, execution_id="first")
    second = executor.start(data, execution_id="second")

    assert data == {"seed": [1, 2]}
    assert first.succeeded and not second.succeeded
    assert first.execution_id == "first"
    assert [e.type for e in second.history].count("ExecutionStarted") == 1
    assert list(second.visited) == ONE_PASS + [FAIL_STATE]


class _BrokenInvoker:
    def __init__(self, exc: Exception) -> None:
        self._exc = exc

    def invoke(self) -> Payload:
        raise self._exc


def test_invocation_failure_fails_execution_without_retry(
    definition: WorkflowDefinition, clock: SimulatedClock
) -> None:
    executor = WorkflowExecutor(
        definition, invoker=_BrokenInvoker(RuntimeError("boom")), scheduler=clock
    )
    result = executor.start()

    assert result.status is ExecutionStatus.FAILED
    assert result.error == ERROR_TASK_FAILED
    assert result.cause == "RuntimeError: boom"
    assert list(result.visited) == [INVOKE_STATE]
    assert "FunctionFailed" in [e.type for e in result.history]


def test_named_invocation_error_is_surfaced(
    definition: WorkflowDefinition, clock: SimulatedClock
) -> None:
    invoker = _BrokenInvoker(FunctionInvocationError("Lambda.Timeout", "Task timed out"))
    executor = WorkflowExecutor(definition, invoker=invoker, scheduler=clock)
    result = executor.start()

    assert result.error == "Lambda.Timeout"
    assert result.cause == "Task timed out"


class _ShapelessInvoker:
    def invoke(self) -> Payload:
        return {"number": 0.9}


def test_missing_value_is_a_runtime_error(
    definition: WorkflowDefinition, clock: SimulatedClock
) -> None:
    executor = WorkflowExecutor(definition, invoker=_ShapelessInvoker(), scheduler=clock)
    result = executor.start()

    assert result.error == ERROR_RUNTIME
    assert TIMESTAMP_STATE in (result.cause or "")
    assert list(result.visited) == [INVOKE_STATE, TIMESTAMP_STATE]


def test_retry_loop_is_bounded_by_transition_limit(make_executor) -> None:
    executor, invoker = make_executor(*([0.5] * 5), max_state_transitions=10)
    result = executor.start()

    assert result.status is ExecutionStatus.FAILED
    assert result.error == ERROR_LIMIT_EXCEEDED
    assert len(result.visited) == 10
    assert invoker.calls == 3


def test_transition_limit_must_be_positive(
    definition: WorkflowDefinition, clock: SimulatedClock
) -> None:
    with pytest.raises(ValueError):
        WorkflowExecutor(
            definition,
            invoker=_ShapelessInvoker(),
            scheduler=clock,
            max_state_transitions=0,
        )
