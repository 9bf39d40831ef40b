"""CLI entrypoint for the Random Number workflow.

Renders the definition handed to the orchestration service and runs it
locally against the in-process random number function.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from random_number_workflow import __version__
from random_number_workflow.functions.random_number import RandomNumberInvoker
from random_number_workflow.orchestrator.config import WorkflowSettings
from random_number_workflow.orchestrator.logging import configure_logging
from random_number_workflow.orchestrator.workflow.capabilities import (
    FunctionInvoker,
    ResumeScheduler,
    SimulatedClock,
    SystemClock,
)
from random_number_workflow.orchestrator.workflow.definition import (
    build_random_number_workflow,
)
from random_number_workflow.orchestrator.workflow.executor import WorkflowExecutor
from random_number_workflow.orchestrator.workflow.states_language import (
    dumps_states_language,
)
from random_number_workflow.orchestrator.workflow.store import ExecutionRecord, ExecutionStore

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CONFIG = 2
EXIT_EXECUTION_FAILED = 4


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="random-number-workflow",
        description="Random Number workflow: render the definition or run it locally",
    )
    parser.add_argument(
        "--version", action="version", version=f"random-number-workflow {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    definition = subparsers.add_parser(
        "definition", help="Print the States Language document for the workflow"
    )
    definition.add_argument(
        "--output",
        default=None,
        help="Write the document to this path instead of stdout",
    )

    run = subparsers.add_parser("run", help="Execute the workflow locally")
    run.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the random number function (overrides WORKFLOW_RANDOM_SEED)",
    )
    run.add_argument(
        "--simulate-wait",
        action="store_true",
        help="Advance a virtual clock instead of sleeping through the wait state",
    )
    run.add_argument(
        "--max-transitions",
        type=int,
        default=None,
        help="Upper bound on states entered (overrides WORKFLOW_MAX_STATE_TRANSITIONS)",
    )

    subparsers.add_parser("list-executions", help="List locally recorded executions")

    return parser


def _build_invoker(seed: int | None) -> FunctionInvoker:
    return RandomNumberInvoker(seed=seed)


def _build_scheduler(simulate: bool) -> ResumeScheduler:
    if simulate:
        return SimulatedClock(start=SystemClock().now())
    return SystemClock()


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = WorkflowSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return EXIT_CONFIG

    configure_logging(settings.log_level)

    definition = build_random_number_workflow(
        function_name=settings.function_name, name=settings.state_machine_name
    )

    try:
        if args.command == "definition":
            document = dumps_states_language(definition)
            if args.output is None:
                sys.stdout.write(document)
                return EXIT_OK
            out_path = Path(args.output)
            out_path.parent.mkdir(parents=True, exist_ok=True)
            out_path.write_text(document, encoding="utf-8")
            logger.info("Definition written", extra={"path": str(out_path)})
            print(f"Wrote {definition.name} definition to {out_path}")
            return EXIT_OK

        if args.command == "run":
            seed = args.seed if args.seed is not None else settings.random_seed
            max_transitions = (
                args.max_transitions
                if args.max_transitions is not None
                else settings.max_state_transitions
            )
            executor = WorkflowExecutor(
                definition,
                invoker=_build_invoker(seed),
                scheduler=_build_scheduler(args.simulate_wait or settings.simulate_wait),
                max_state_transitions=max_transitions,
            )
            result = executor.start()

            store = ExecutionStore(settings.execution_state_path)
            store.add(ExecutionRecord.from_result(result, workflow=definition.name))
            logger.info(
                "Execution persisted",
                extra={
                    "path": str(settings.execution_state_path),
                    "execution_id": result.execution_id,
                },
            )

            print(
                f"Execution {result.execution_id}: {result.status.value} "
                f"after {len(result.visited)} states"
            )
            if result.succeeded:
                print(f"Output: {json.dumps(result.output, ensure_ascii=False)}")
                return EXIT_OK
            print(f"Error: {result.error}")
            print(f"Cause: {result.cause}")
            return EXIT_EXECUTION_FAILED

        if args.command == "list-executions":
            store = ExecutionStore(settings.execution_state_path)
            records = store.list()
            if not records:
                print(f"No executions recorded in {settings.execution_state_path}")
                return EXIT_OK
            for record in records:
                detail = record.error or ""
                print(f"{record.execution_id} {record.status} {record.stopped_at} {detail}".rstrip())
            return EXIT_OK

        logger.error("Unknown command", extra={"command": args.command})
        return EXIT_CONFIG

    except Exception:
        logger.exception("Command failed")
        return EXIT_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
