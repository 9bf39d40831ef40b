"""Unit tests for persisted execution records."""

from __future__ import annotations

from pathlib import Path

import pytest

from random_number_workflow.orchestrator.workflow.store import ExecutionRecord, ExecutionStore


def test_store_roundtrip(tmp_path: Path, make_executor) -> None:
    store = ExecutionStore(tmp_path / "workflow_state" / "executions.json")
    assert store.list() == []

    executor, _ = make_executor(0.1)
    result = executor.start(execution_id="exec-1")
    store.add(ExecutionRecord.from_result(result, workflow=executor.definition.name))

    loaded = store.list()
    assert len(loaded) == 1
    record = loaded[0]
    assert record.execution_id == "exec-1"
    assert record.workflow == "RandomLambdaStateMachine"
    assert record.status == "failed"
    assert record.error == "Error:value is less than .3"
    assert record.cause == "0.1"
    assert record.visited[-1] == "RandomLambdaFailedState"
    assert record.history[0]["type"] == "ExecutionStarted"
    assert record.history[-1]["details"] == {
        "error": "Error:value is less than .3",
        "cause": "0.1",
    }

    assert store.get("exec-1") == record
    assert store.get("missing") is None


def test_store_rejects_duplicate_execution_ids(tmp_path: Path, make_executor) -> None:
    store = ExecutionStore(tmp_path / "executions.json")
    executor, _ = make_executor(0.9, 0.9)

    store.add(ExecutionRecord.from_result(executor.start(execution_id="same"), workflow="w"))
    with pytest.raises(ValueError):
        store.add(ExecutionRecord.from_result(executor.start(execution_id="same"), workflow="w"))


def test_store_tolerates_corrupt_file(tmp_path: Path) -> None:
    path = tmp_path / "executions.json"
    path.write_text("{not json", encoding="utf-8")

    assert ExecutionStore(path).list() == []
