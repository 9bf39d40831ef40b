"""Persisted records of finished local executions.

The workflow itself keeps no state between runs. This store only exists so the
CLI can list what it ran; it is best-effort and local.
"""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from .executor import ExecutionResult


class ExecutionRecord(BaseModel):
    execution_id: str
    workflow: str
    status: str
    started_at: str
    stopped_at: str

    visited: list[str] = Field(default_factory=list)
    history: list[dict[str, Any]] = Field(default_factory=list)
    output: Any = None
    error: str | None = None
    cause: str | None = None

    @classmethod
    def from_result(cls, result: ExecutionResult, *, workflow: str) -> ExecutionRecord:
        return cls(
            execution_id=result.execution_id,
            workflow=workflow,
            status=result.status.value,
            started_at=result.started_at,
            stopped_at=result.stopped_at,
            visited=list(result.visited),
            history=[event.to_json() for event in result.history],
            output=result.output,
            error=result.error,
            cause=result.cause,
        )


@dataclass
class ExecutionStore:
    path: Path

    def __post_init__(self) -> None:
        self._lock = threading.Lock()

    def _load_unlocked(self) -> list[ExecutionRecord]:
        if not self.path.exists():
            return []
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            return []
        if not isinstance(raw, list):
            return []
        return [ExecutionRecord.model_validate(item) for item in raw]

    def _save_unlocked(self, records: list[ExecutionRecord]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = [r.model_dump(mode="json") for r in records]
        self.path.write_text(
            json.dumps(payload, indent=2, ensure_ascii=False) + "\n", encoding="utf-8"
        )

    def list(self) -> list[ExecutionRecord]:
        with self._lock:
            return self._load_unlocked()

    def get(self, execution_id: str) -> ExecutionRecord | None:
        with self._lock:
            for record in self._load_unlocked():
                if record.execution_id == execution_id:
                    return record
            return None

    def add(self, record: ExecutionRecord) -> ExecutionRecord:
        with self._lock:
            records = self._load_unlocked()
            if any(r.execution_id == record.execution_id for r in records):
                raise ValueError(f"Execution already recorded: {record.execution_id}")
            records.append(record)
            self._save_unlocked(records)
            return record
