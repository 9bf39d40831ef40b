"""A local execution engine for workflow definitions.

In production the orchestration service runs the definition. This engine
reproduces its observable behaviour (state order, payload handling, error
codes) so the workflow can be exercised against fake host services.
"""

from __future__ import annotations

import copy
import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

from .capabilities import FunctionInvocationError, FunctionInvoker, ResumeScheduler
from .paths import (
    InvalidPathError,
    PathNotFoundError,
    apply_parameters,
    evaluate_expression,
    place_result,
    resolve_path,
)
from .state_machine import (
    ChoiceState,
    FailState,
    InvokeFunctionState,
    NoChoiceMatchedError,
    State,
    StateKind,
    SucceedState,
    TransformState,
    WaitState,
    WorkflowDefinition,
    next_state,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_STATE_TRANSITIONS = 25_000

ERROR_TASK_FAILED = "States.TaskFailed"
ERROR_NO_CHOICE_MATCHED = "States.NoChoiceMatched"
ERROR_RUNTIME = "States.Runtime"
ERROR_LIMIT_EXCEEDED = "States.ExecutionLimitExceeded"

_EVENT_PREFIX: dict[StateKind, str] = {
    StateKind.INVOKE_FUNCTION: "Task",
    StateKind.TRANSFORM: "Pass",
    StateKind.WAIT: "Wait",
    StateKind.BRANCH: "Choice",
    StateKind.SUCCEED: "Succeed",
    StateKind.FAIL: "Fail",
}


class ExecutionStatus(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class HistoryEvent:
    type: str
    timestamp: str
    state: str | None = None
    details: dict[str, object] | None = None

    def to_json(self) -> dict[str, object]:
        out: dict[str, object] = {"type": self.type, "timestamp": self.timestamp}
        if self.state is not None:
            out["state"] = self.state
        if self.details:
            out["details"] = self.details
        return out


@dataclass(frozen=True, slots=True)
class ExecutionResult:
    execution_id: str
    status: ExecutionStatus
    started_at: str
    stopped_at: str
    visited: tuple[str, ...]
    history: tuple[HistoryEvent, ...]
    output: object = None
    error: str | None = None
    cause: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status is ExecutionStatus.SUCCEEDED


class _ExecutionFailed(Exception):
    def __init__(self, error: str, cause: str | None) -> None:
        super().__init__(error)
        self.error = error
        self.cause = cause


def _iso(moment: datetime) -> str:
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class WorkflowExecutor:
    """Run a definition to a terminal state.

    The executor keeps no per-execution state between calls to :meth:`start`;
    every execution gets its own payload, visited list and history.
    """

    def __init__(
        self,
        definition: WorkflowDefinition,
        *,
        invoker: FunctionInvoker,
        scheduler: ResumeScheduler,
        max_state_transitions: int = DEFAULT_MAX_STATE_TRANSITIONS,
    ) -> None:
        if max_state_transitions < 1:
            raise ValueError("max_state_transitions must be at least 1")
        self.definition = definition
        self._invoker = invoker
        self._scheduler = scheduler
        self._max_state_transitions = max_state_transitions

    def start(
        self, payload: object | None = None, *, execution_id: str | None = None
    ) -> ExecutionResult:
        execution_id = execution_id or str(uuid.uuid4())
        started_at = _iso(self._scheduler.now())
        data: object = copy.deepcopy(payload) if payload is not None else {}
        visited: list[str] = []
        history: list[HistoryEvent] = [
            HistoryEvent(type="ExecutionStarted", timestamp=started_at)
        ]

        logger.info(
            "Execution started",
            extra={"execution_id": execution_id, "workflow": self.definition.name},
        )

        status = ExecutionStatus.SUCCEEDED
        error: str | None = None
        cause: str | None = None
        try:
            data = self._run(
                data,
                execution_id=execution_id,
                started_at=started_at,
                visited=visited,
                history=history,
            )
        except _ExecutionFailed as failure:
            status = ExecutionStatus.FAILED
            error, cause = failure.error, failure.cause

        stopped_at = _iso(self._scheduler.now())
        if status is ExecutionStatus.SUCCEEDED:
            history.append(HistoryEvent(type="ExecutionSucceeded", timestamp=stopped_at))
        else:
            history.append(
                HistoryEvent(
                    type="ExecutionFailed",
                    timestamp=stopped_at,
                    details={"error": error, "cause": cause},
                )
            )

        logger.info(
            "Execution finished",
            extra={
                "execution_id": execution_id,
                "status": status.value,
                "error": error,
                "state_transitions": len(visited),
            },
        )
        return ExecutionResult(
            execution_id=execution_id,
            status=status,
            started_at=started_at,
            stopped_at=stopped_at,
            visited=tuple(visited),
            history=tuple(history),
            output=data if status is ExecutionStatus.SUCCEEDED else None,
            error=error,
            cause=cause,
        )

    def _run(
        self,
        data: object,
        *,
        execution_id: str,
        started_at: str,
        visited: list[str],
        history: list[HistoryEvent],
    ) -> object:
        current: str | None = self.definition.start_at
        while current is not None:
            if len(visited) >= self._max_state_transitions:
                raise _ExecutionFailed(
                    ERROR_LIMIT_EXCEEDED,
                    f"Execution exceeded {self._max_state_transitions} state transitions",
                )

            state = self.definition.state(current)
            visited.append(state.name)
            entered_at = _iso(self._scheduler.now())
            prefix = _EVENT_PREFIX[state.kind]
            history.append(
                HistoryEvent(type=f"{prefix}StateEntered", timestamp=entered_at, state=state.name)
            )
            logger.debug("State entered", extra={"execution_id": execution_id, "state": state.name})

            context: dict[str, object] = {
                "Execution": {"Id": execution_id, "StartTime": started_at},
                "State": {"Name": state.name, "EnteredTime": entered_at},
                "StateMachine": {"Name": self.definition.name},
            }

            try:
                if isinstance(state, FailState):
                    raise _ExecutionFailed(state.error, self._fail_cause(state, data, context))
                if isinstance(state, SucceedState):
                    return data

                data = self._execute_state(state, data, context, history)
                current = next_state(state, data)
            except NoChoiceMatchedError as e:
                raise _ExecutionFailed(ERROR_NO_CHOICE_MATCHED, str(e)) from e
            except (PathNotFoundError, InvalidPathError) as e:
                raise _ExecutionFailed(ERROR_RUNTIME, f"{state.name}: {e}") from e

            history.append(
                HistoryEvent(
                    type=f"{prefix}StateExited",
                    timestamp=_iso(self._scheduler.now()),
                    state=state.name,
                )
            )
        return data

    def _execute_state(
        self,
        state: State,
        data: object,
        context: dict[str, object],
        history: list[HistoryEvent],
    ) -> object:
        if isinstance(state, InvokeFunctionState):
            return self._invoke(state, history)

        if isinstance(state, TransformState):
            result = apply_parameters(state.parameters, data, context=context)
            return place_result(data, result, state.result_path)

        if isinstance(state, WaitState):
            history.append(
                HistoryEvent(
                    type="WaitScheduled",
                    timestamp=_iso(self._scheduler.now()),
                    state=state.name,
                    details={"seconds": state.seconds},
                )
            )
            self._scheduler.schedule_resume(state.seconds)
            return data

        if isinstance(state, ChoiceState):
            return data

        raise TypeError(f"Unsupported state type: {type(state).__name__}")

    def _invoke(self, state: InvokeFunctionState, history: list[HistoryEvent]) -> object:
        history.append(
            HistoryEvent(
                type="FunctionScheduled",
                timestamp=_iso(self._scheduler.now()),
                state=state.name,
                details={"function_name": state.function_name},
            )
        )
        try:
            output = self._invoker.invoke()
        except FunctionInvocationError as e:
            self._record_function_failure(state, history, e.error, e.cause or str(e))
            raise _ExecutionFailed(e.error, e.cause or str(e)) from e
        except Exception as e:
            cause = f"{type(e).__name__}: {e}"
            logger.warning(
                "Function invocation failed",
                extra={"function_name": state.function_name, "cause": cause},
            )
            self._record_function_failure(state, history, ERROR_TASK_FAILED, cause)
            raise _ExecutionFailed(ERROR_TASK_FAILED, cause) from e

        history.append(
            HistoryEvent(
                type="FunctionSucceeded",
                timestamp=_iso(self._scheduler.now()),
                state=state.name,
            )
        )
        envelope: dict[str, object] = {"Payload": copy.deepcopy(output), "StatusCode": 200}
        if state.output_path is None:
            return envelope
        return resolve_path(envelope, state.output_path)

    def _record_function_failure(
        self, state: InvokeFunctionState, history: list[HistoryEvent], error: str, cause: str
    ) -> None:
        history.append(
            HistoryEvent(
                type="FunctionFailed",
                timestamp=_iso(self._scheduler.now()),
                state=state.name,
                details={"error": error, "cause": cause},
            )
        )

    @staticmethod
    def _fail_cause(state: FailState, data: object, context: dict[str, object]) -> str | None:
        if state.cause_path is None:
            return state.cause
        cause = evaluate_expression(state.cause_path, data, context=context)
        return cause if isinstance(cause, str) else str(cause)
