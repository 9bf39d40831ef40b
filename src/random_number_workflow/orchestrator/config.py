"""Configuration for the local workflow runner.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

The wait duration and the branch thresholds belong to the workflow definition
and are deliberately not configurable here.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from random_number_workflow.orchestrator.workflow.definition import (
    RANDOM_LAMBDA_FUNCTION,
    RANDOM_LAMBDA_STATE_MACHINE,
)
from random_number_workflow.orchestrator.workflow.executor import DEFAULT_MAX_STATE_TRANSITIONS


class WorkflowSettings(BaseSettings):
    """Settings for the local workflow runner.

    Environment variables:
    - LOG_LEVEL                       (optional)
    - WORKFLOW_EXECUTION_STATE_PATH   (optional)
    - WORKFLOW_FUNCTION_NAME          (optional)
    - WORKFLOW_STATE_MACHINE_NAME     (optional)
    - WORKFLOW_SIMULATE_WAIT          (optional)
    - WORKFLOW_MAX_STATE_TRANSITIONS  (optional)
    - WORKFLOW_RANDOM_SEED            (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `WorkflowSettings(_env_file=path_to_env)`.
    """

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    execution_state_path: Path = Field(
        default=Path("workflow_state/executions.json"),
        validation_alias="WORKFLOW_EXECUTION_STATE_PATH",
        description="Path where finished local executions are recorded",
    )

    function_name: str = Field(
        default=RANDOM_LAMBDA_FUNCTION,
        validation_alias="WORKFLOW_FUNCTION_NAME",
        description="Name of the compute function the invoke state calls",
    )
    state_machine_name: str = Field(
        default=RANDOM_LAMBDA_STATE_MACHINE,
        validation_alias="WORKFLOW_STATE_MACHINE_NAME",
        description="Name given to the workflow definition",
    )

    simulate_wait: bool = Field(
        default=False,
        validation_alias="WORKFLOW_SIMULATE_WAIT",
        description=(
            "If true, local runs advance a virtual clock instead of sleeping through "
            "the wait state."
        ),
    )
    max_state_transitions: int = Field(
        default=DEFAULT_MAX_STATE_TRANSITIONS,
        ge=1,
        validation_alias="WORKFLOW_MAX_STATE_TRANSITIONS",
        description="Upper bound on states entered per local execution",
    )
    random_seed: int | None = Field(
        default=None,
        validation_alias="WORKFLOW_RANDOM_SEED",
        description="Seed for the local random number function (unset means nondeterministic)",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )
