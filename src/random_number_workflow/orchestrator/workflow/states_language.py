"""Render a workflow definition as an Amazon States Language document.

This is the shape handed to the orchestration service. Rendering is a pure
function of the definition; nothing here talks to a cloud provider.
"""

from __future__ import annotations

import json

from .state_machine import (
    ChoiceState,
    FailState,
    InvokeFunctionState,
    State,
    SucceedState,
    TransformState,
    WaitState,
    WorkflowDefinition,
)

LAMBDA_INVOKE_RESOURCE = "arn:aws:states:::lambda:invoke"


def _render_state(state: State) -> dict[str, object]:
    if isinstance(state, InvokeFunctionState):
        out: dict[str, object] = {
            "Type": "Task",
            "Resource": LAMBDA_INVOKE_RESOURCE,
            "Parameters": {"FunctionName": state.function_name, "Payload.$": "$"},
        }
        if state.output_path is not None:
            out["OutputPath"] = state.output_path
        out["Next"] = state.next
        return out

    if isinstance(state, TransformState):
        out = {"Type": "Pass", "Parameters": dict(state.parameters)}
        if state.result_path is not None:
            out["ResultPath"] = state.result_path
        out["Next"] = state.next
        return out

    if isinstance(state, WaitState):
        seconds = int(state.seconds) if float(state.seconds).is_integer() else state.seconds
        return {"Type": "Wait", "Seconds": seconds, "Next": state.next}

    if isinstance(state, ChoiceState):
        out = {
            "Type": "Choice",
            "Choices": [{**rule.condition.to_json(), "Next": rule.next} for rule in state.choices],
        }
        if state.default is not None:
            out["Default"] = state.default
        return out

    if isinstance(state, SucceedState):
        return {"Type": "Succeed"}

    if isinstance(state, FailState):
        out = {"Type": "Fail", "Error": state.error}
        if state.cause_path is not None:
            out["CausePath"] = state.cause_path
        elif state.cause is not None:
            out["Cause"] = state.cause
        return out

    raise TypeError(f"Unsupported state type: {type(state).__name__}")


def to_states_language(definition: WorkflowDefinition) -> dict[str, object]:
    doc: dict[str, object] = {}
    if definition.comment:
        doc["Comment"] = definition.comment
    doc["StartAt"] = definition.start_at
    doc["States"] = {state.name: _render_state(state) for state in definition.states}
    return doc


def dumps_states_language(definition: WorkflowDefinition) -> str:
    return json.dumps(to_states_language(definition), indent=2, ensure_ascii=False) + "\n"
