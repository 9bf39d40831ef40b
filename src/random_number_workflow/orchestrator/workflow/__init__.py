"""Workflow domain concepts.

This package introduces first-class types for:
- State descriptors and guarded transitions (an immutable definition)
- The Random Number workflow itself
- Host capabilities (function invocation, scheduled resumption)
- A local executor and a States Language renderer
"""

from .definition import build_random_number_workflow
from .executor import ExecutionResult, ExecutionStatus, WorkflowExecutor
from .state_machine import WorkflowDefinition, WorkflowDefinitionError

__all__ = [
    "ExecutionResult",
    "ExecutionStatus",
    "WorkflowDefinition",
    "WorkflowDefinitionError",
    "WorkflowExecutor",
    "build_random_number_workflow",
]
