from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Dict, Literal, Mapping, Optional

ElementType = Literal["node", "edge"]
OperationType = Literal["add", "patch", "delete"]
MutationStatus = Literal["pending", "processing", "applied"]


@dataclass(frozen=True)
class NewMutation:
    """
    Producer-side description of one change to the canvas.

    `changes` holds the full element for "add", a partial element for
    "patch" (deep-merged on apply) and nothing for "delete".
    """

    element_id: str
    element_type: ElementType
    operation_type: OperationType
    changes: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "element_id": self.element_id,
            "element_type": self.element_type,
            "operation_type": self.operation_type,
            "changes": self.changes,
        }

    @staticmethod
    def from_dict(raw: Mapping[str, Any]) -> "NewMutation":
        return NewMutation(
            element_id=str(raw["element_id"]),
            element_type=raw["element_type"],
            operation_type=raw["operation_type"],
            changes=raw.get("changes"),
        )


@dataclass(frozen=True)
class Mutation:
    """
    Queued mutation: immutable log entry.

    Status transitions build a new record; once "applied" a mutation is
    part of the history and is never touched again.
    """

    id: str
    status: MutationStatus

    element_id: str
    element_type: ElementType
    operation_type: OperationType
    changes: Optional[Dict[str, Any]] = None

    delay_ms: float = 0.0
    enqueued_at: float = 0.0
    ready_at: float = 0.0
    applied_at: Optional[datetime] = None

    @staticmethod
    def enqueue(
        new: NewMutation,
        *,
        id: str,
        enqueued_at: float,
        delay_ms: float,
    ) -> "Mutation":
        return Mutation(
            id=id,
            status="pending",
            element_id=new.element_id,
            element_type=new.element_type,
            operation_type=new.operation_type,
            changes=new.changes,
            delay_ms=delay_ms,
            enqueued_at=enqueued_at,
            ready_at=enqueued_at + delay_ms / 1000.0,
        )

    def processing(self) -> "Mutation":
        return replace(self, status="processing")

    def applied(self, at: datetime) -> "Mutation":
        return replace(self, status="applied", applied_at=at)

    def is_ready(self, now: float) -> bool:
        return self.ready_at <= now

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "status": self.status,
            "element_id": self.element_id,
            "element_type": self.element_type,
            "operation_type": self.operation_type,
            "changes": self.changes,
            "delay_ms": self.delay_ms,
            "applied_at": self.applied_at.isoformat() if self.applied_at else None,
        }

    def __str__(self) -> str:
        return f"[{self.id[:8]}] {self.operation_type} {self.element_type}({self.element_id})"
