"""Unit tests for the random number compute function."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from random_number_workflow.functions.random_number import (
    RandomNumberInvoker,
    RandomNumberOutput,
    handler,
)


def test_handler_returns_value_in_unit_interval() -> None:
    for _ in range(50):
        out = handler({}, None)
        assert set(out) == {"value"}
        assert 0.0 <= out["value"] < 1.0


def test_invoker_is_reproducible_with_seed() -> None:
    a = RandomNumberInvoker(seed=42)
    b = RandomNumberInvoker(seed=42)

    assert [a.invoke() for _ in range(5)] == [b.invoke() for _ in range(5)]


def test_output_model_rejects_out_of_range_values() -> None:
    with pytest.raises(ValidationError):
        RandomNumberOutput(value=1.0)
    with pytest.raises(ValidationError):
        RandomNumberOutput(value=-0.1)
