"""Console script entrypoint.

The CLI is implemented in `random_number_workflow.orchestrator.main`.
"""

from __future__ import annotations

from random_number_workflow.orchestrator.main import main

__all__ = ["main"]


if __name__ == "__main__":
    raise SystemExit(main())
