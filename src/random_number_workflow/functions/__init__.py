"""Compute functions invoked by the workflow."""

from random_number_workflow.functions.random_number import RandomNumberInvoker, handler

__all__ = [
    "RandomNumberInvoker",
    "handler",
]
