"""The Random Number workflow.

Invoke -> Timestamp -> Wait -> Choice -> { Fail | Invoke | Succeed }

The middle band (0.3, 0.7) loops back to the invoke state to draw a new value.
Values of exactly 0.3 or 0.7 match no rule; there is intentionally no default
branch, so such executions fail with ``States.NoChoiceMatched``.
"""

from __future__ import annotations

from .conditions import And, NumberGreaterThan, NumberLessThan
from .state_machine import (
    ChoiceRule,
    ChoiceState,
    FailState,
    InvokeFunctionState,
    SucceedState,
    TransformState,
    WaitState,
    WorkflowDefinition,
)

RANDOM_LAMBDA_FUNCTION = "RandomLambdaFunction"
RANDOM_LAMBDA_STATE_MACHINE = "RandomLambdaStateMachine"

INVOKE_STATE = "RandomLambdaTask"
TIMESTAMP_STATE = "RandomLambdaTimeStampState"
WAIT_STATE = "RandomLambdaWaitState"
CHOICE_STATE = "RandomLambdaChoiceState"
SUCCEED_STATE = "RandomLambdaSucceedState"
FAIL_STATE = "RandomLambdaFailedState"

WAIT_SECONDS = 5
LOWER_THRESHOLD = 0.3
UPPER_THRESHOLD = 0.7

FAIL_ERROR = "Error:value is less than .3"
FAIL_CAUSE_PATH = "States.JsonToString($.value)"


def build_random_number_workflow(
    *,
    function_name: str = RANDOM_LAMBDA_FUNCTION,
    name: str = RANDOM_LAMBDA_STATE_MACHINE,
) -> WorkflowDefinition:
    return WorkflowDefinition(
        name=name,
        start_at=INVOKE_STATE,
        comment="Draw a random value, wait, then fail, retry or succeed depending on it",
        states=(
            InvokeFunctionState(
                name=INVOKE_STATE,
                function_name=function_name,
                output_path="$.Payload",
                next=TIMESTAMP_STATE,
            ),
            TransformState(
                name=TIMESTAMP_STATE,
                parameters={
                    "value.$": "$.value",
                    "timestamp.$": "$$.State.EnteredTime",
                },
                result_path="$",
                next=WAIT_STATE,
            ),
            WaitState(name=WAIT_STATE, seconds=WAIT_SECONDS, next=CHOICE_STATE),
            ChoiceState(
                name=CHOICE_STATE,
                choices=(
                    ChoiceRule(
                        condition=NumberLessThan("$.value", LOWER_THRESHOLD),
                        next=FAIL_STATE,
                    ),
                    ChoiceRule(
                        condition=And(
                            (
                                NumberGreaterThan("$.value", LOWER_THRESHOLD),
                                NumberLessThan("$.value", UPPER_THRESHOLD),
                            )
                        ),
                        next=INVOKE_STATE,
                    ),
                    ChoiceRule(
                        condition=NumberGreaterThan("$.value", UPPER_THRESHOLD),
                        next=SUCCEED_STATE,
                    ),
                ),
            ),
            SucceedState(name=SUCCEED_STATE),
            FailState(name=FAIL_STATE, error=FAIL_ERROR, cause_path=FAIL_CAUSE_PATH),
        ),
    )
