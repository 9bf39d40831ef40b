from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from .paths import resolve_path


class Condition(Protocol):
    """A guard over the workflow payload.

    Guards are pure: they read the payload and never mutate it.
    """

    def evaluate(self, data: object) -> bool: ...

    def to_json(self) -> dict[str, object]: ...


def _number(value: object) -> float | None:
    # bool is an int subclass but never a numeric operand here.
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    return float(value)


@dataclass(frozen=True, slots=True)
class NumberLessThan:
    variable: str
    value: float

    def evaluate(self, data: object) -> bool:
        actual = _number(resolve_path(data, self.variable))
        return actual is not None and actual < self.value

    def to_json(self) -> dict[str, object]:
        return {"Variable": self.variable, "NumericLessThan": self.value}

    def __str__(self) -> str:
        return f"{self.variable} < {self.value}"


@dataclass(frozen=True, slots=True)
class NumberGreaterThan:
    variable: str
    value: float

    def evaluate(self, data: object) -> bool:
        actual = _number(resolve_path(data, self.variable))
        return actual is not None and actual > self.value

    def to_json(self) -> dict[str, object]:
        return {"Variable": self.variable, "NumericGreaterThan": self.value}

    def __str__(self) -> str:
        return f"{self.variable} > {self.value}"


@dataclass(frozen=True, slots=True)
class And:
    conditions: tuple[Condition, ...]

    def __post_init__(self) -> None:
        if not self.conditions:
            raise ValueError("And requires at least one condition")

    def evaluate(self, data: object) -> bool:
        return all(c.evaluate(data) for c in self.conditions)

    def to_json(self) -> dict[str, object]:
        return {"And": [c.to_json() for c in self.conditions]}

    def __str__(self) -> str:
        return " and ".join(str(c) for c in self.conditions)
