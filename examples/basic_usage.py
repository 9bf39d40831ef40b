#!/usr/bin/env python3
"""Programmatic workflow run example.

This demonstrates using the workflow components directly:

* load settings from `.env`
* render the definition handed to the orchestration service
* run the workflow locally with a seeded random number function
* persist the finished execution to `workflow_state/executions.json`
"""

from __future__ import annotations

import argparse
from typing import Sequence

from random_number_workflow.functions.random_number import RandomNumberInvoker
from random_number_workflow.orchestrator.config import WorkflowSettings
from random_number_workflow.orchestrator.logging import configure_logging
from random_number_workflow.orchestrator.workflow.capabilities import SimulatedClock
from random_number_workflow.orchestrator.workflow.definition import (
    build_random_number_workflow,
)
from random_number_workflow.orchestrator.workflow.executor import WorkflowExecutor
from random_number_workflow.orchestrator.workflow.states_language import (
    dumps_states_language,
)
from random_number_workflow.orchestrator.workflow.store import ExecutionRecord, ExecutionStore


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the Random Number workflow (example).")
    parser.add_argument("--seed", type=int, default=None, help="Random seed (optional)")
    parser.add_argument(
        "--print-definition",
        action="store_true",
        help="Print the States Language document before running",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = WorkflowSettings()
    configure_logging(settings.log_level)

    definition = build_random_number_workflow(function_name=settings.function_name)
    if args.print_definition:
        print(dumps_states_language(definition), end="")

    executor = WorkflowExecutor(
        definition,
        invoker=RandomNumberInvoker(seed=args.seed),
        scheduler=SimulatedClock(),
    )
    result = executor.start()

    ExecutionStore(settings.execution_state_path).add(
        ExecutionRecord.from_result(result, workflow=definition.name)
    )

    print(f"Visited: {' -> '.join(result.visited)}")
    print(f"Status: {result.status.value}")
    if not result.succeeded:
        print(f"Error: {result.error} (cause: {result.cause})")
    print(f"Persisted to: {settings.execution_state_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
