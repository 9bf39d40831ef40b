"""Random Number workflow.

Provides:
- an immutable workflow definition (invoke, timestamp, wait, branch)
- a States Language renderer for the orchestration service
- a local executor with a random number function and a simulated clock
"""

__version__ = "0.1.0"

from random_number_workflow.orchestrator.config import WorkflowSettings

__all__ = ["__version__", "WorkflowSettings"]
