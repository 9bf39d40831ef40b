"""The random number compute function.

``handler`` is the function entrypoint deployed to the compute platform.
``RandomNumberInvoker`` calls the same logic in-process for local runs.
"""

from __future__ import annotations

import logging
import random
from typing import Any

from pydantic import BaseModel, Field

from random_number_workflow.orchestrator.workflow.capabilities import Payload

logger = logging.getLogger(__name__)


class RandomNumberOutput(BaseModel):
    value: float = Field(ge=0.0, lt=1.0, description="Uniform sample in [0, 1)")


def generate(rng: random.Random | None = None) -> RandomNumberOutput:
    value = (rng or random).random()
    return RandomNumberOutput(value=value)


def handler(event: dict[str, Any] | None, context: Any) -> dict[str, object]:
    """Function entrypoint. The event is ignored; no input is required."""

    _ = (event, context)
    output = generate()
    logger.info("Generated random value", extra={"value": output.value})
    return output.model_dump()


class RandomNumberInvoker:
    """In-process :class:`FunctionInvoker` backed by a private RNG."""

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)

    def invoke(self) -> Payload:
        return generate(self._rng).model_dump()
