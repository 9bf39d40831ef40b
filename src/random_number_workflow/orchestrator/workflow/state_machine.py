from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import ClassVar

from .conditions import Condition


class StateKind(str, Enum):
    INVOKE_FUNCTION = "invoke-function"
    TRANSFORM = "transform"
    WAIT = "wait"
    BRANCH = "branch"
    SUCCEED = "succeed"
    FAIL = "fail"


TERMINAL_KINDS: frozenset[StateKind] = frozenset({StateKind.SUCCEED, StateKind.FAIL})


class WorkflowDefinitionError(ValueError):
    pass


class NoChoiceMatchedError(RuntimeError):
    def __init__(self, state_name: str) -> None:
        super().__init__(f"No choice rule matched and no default is set in state {state_name!r}")
        self.state_name = state_name


@dataclass(frozen=True, slots=True)
class Transition:
    """A directed edge, optionally guarded by a predicate over the payload."""

    source: str
    target: str
    guard: Condition | None = None


@dataclass(frozen=True, slots=True)
class InvokeFunctionState:
    """Call an external function; the result envelope is filtered by ``output_path``."""

    name: str
    function_name: str
    next: str
    output_path: str | None = "$.Payload"

    kind: ClassVar[StateKind] = StateKind.INVOKE_FUNCTION

    def outgoing(self) -> tuple[Transition, ...]:
        return (Transition(source=self.name, target=self.next),)


@dataclass(frozen=True, slots=True)
class TransformState:
    """Build a new payload from a parameter template."""

    name: str
    parameters: Mapping[str, object]
    next: str
    result_path: str | None = "$"

    kind: ClassVar[StateKind] = StateKind.TRANSFORM

    def __post_init__(self) -> None:
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))

    def outgoing(self) -> tuple[Transition, ...]:
        return (Transition(source=self.name, target=self.next),)


@dataclass(frozen=True, slots=True)
class WaitState:
    name: str
    seconds: float
    next: str

    kind: ClassVar[StateKind] = StateKind.WAIT

    def __post_init__(self) -> None:
        if self.seconds < 0:
            raise WorkflowDefinitionError(f"Wait duration must not be negative: {self.name}")

    def outgoing(self) -> tuple[Transition, ...]:
        return (Transition(source=self.name, target=self.next),)


@dataclass(frozen=True, slots=True)
class ChoiceRule:
    condition: Condition
    next: str


@dataclass(frozen=True, slots=True)
class ChoiceState:
    """Branch on the payload.

    Rules are evaluated in declaration order and the first match wins. When no
    rule matches, ``default`` is taken if set.
    """

    name: str
    choices: tuple[ChoiceRule, ...]
    default: str | None = None

    kind: ClassVar[StateKind] = StateKind.BRANCH

    def outgoing(self) -> tuple[Transition, ...]:
        edges = [Transition(source=self.name, target=r.next, guard=r.condition) for r in self.choices]
        if self.default is not None:
            edges.append(Transition(source=self.name, target=self.default))
        return tuple(edges)


@dataclass(frozen=True, slots=True)
class SucceedState:
    name: str

    kind: ClassVar[StateKind] = StateKind.SUCCEED

    def outgoing(self) -> tuple[Transition, ...]:
        return ()


@dataclass(frozen=True, slots=True)
class FailState:
    """Terminal failure carrying an error code and a cause.

    ``cause_path`` is a path or intrinsic evaluated against the payload; it takes
    precedence over the static ``cause``.
    """

    name: str
    error: str
    cause: str | None = None
    cause_path: str | None = None

    kind: ClassVar[StateKind] = StateKind.FAIL

    def outgoing(self) -> tuple[Transition, ...]:
        return ()


State = InvokeFunctionState | TransformState | WaitState | ChoiceState | SucceedState | FailState


@dataclass(frozen=True, slots=True)
class WorkflowDefinition:
    """An immutable graph of states, validated once at construction."""

    name: str
    start_at: str
    states: tuple[State, ...]
    comment: str = ""
    _index: Mapping[str, State] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.states:
            raise WorkflowDefinitionError("A workflow needs at least one state")

        index: dict[str, State] = {}
        for state in self.states:
            if not state.name:
                raise WorkflowDefinitionError("State identifiers must not be empty")
            if state.name in index:
                raise WorkflowDefinitionError(f"Duplicate state identifier: {state.name}")
            index[state.name] = state
        object.__setattr__(self, "_index", MappingProxyType(index))

        if self.start_at not in index:
            raise WorkflowDefinitionError(f"Start state does not exist: {self.start_at}")

        for state in self.states:
            edges = state.outgoing()
            if state.kind not in TERMINAL_KINDS and not edges:
                raise WorkflowDefinitionError(f"Non-terminal state has no transitions: {state.name}")
            for edge in edges:
                if edge.target not in index:
                    raise WorkflowDefinitionError(
                        f"Transition target does not exist: {edge.source} -> {edge.target}"
                    )

    def state(self, name: str) -> State:
        try:
            return self._index[name]
        except KeyError:
            raise KeyError(f"Unknown state: {name}") from None

    @property
    def start_state(self) -> State:
        return self._index[self.start_at]

    def transitions(self) -> list[Transition]:
        return [edge for state in self.states for edge in state.outgoing()]

    def terminal_states(self) -> list[State]:
        return [s for s in self.states if s.kind in TERMINAL_KINDS]


def evaluate_choice(state: ChoiceState, data: object) -> str | None:
    """Return the target of the first matching rule, then the default, else None."""

    for rule in state.choices:
        if rule.condition.evaluate(data):
            return rule.next
    return state.default


def next_state(state: State, data: object) -> str | None:
    """Pure transition function: (state, payload) -> next state name.

    Terminal states return None.

    Raises:
        NoChoiceMatchedError: a branch state matched no rule and has no default.
    """

    if isinstance(state, ChoiceState):
        target = evaluate_choice(state, data)
        if target is None:
            raise NoChoiceMatchedError(state.name)
        return target
    if isinstance(state, SucceedState | FailState):
        return None
    return state.next
