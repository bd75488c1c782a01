"""Ledger of mutating intents.

Every create/update/delete a service performs is recorded as an operation
that starts ``pending`` and ends ``committed`` or ``failed``. A failed remote
phase is visible here even when the optimistic state was left in place.
"""

from __future__ import annotations

import uuid
from collections import deque
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from webmarker.services.propagation import PropagationResult


class OperationKind(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class OperationStatus(str, Enum):
    """Status of a mutating intent in its lifecycle."""

    PENDING = "pending"
    COMMITTED = "committed"
    FAILED = "failed"


@dataclass
class OperationRecord:
    """One optimistic mutation and what became of its remote phase."""

    entity_type: str
    entity_id: str
    kind: OperationKind
    status: OperationStatus = OperationStatus.PENDING
    error: str | None = None
    reverted: bool = False
    propagation: PropagationResult | None = None
    operation_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    finished_at: datetime | None = None

    def mark_as_committed(self) -> None:
        """Mark the remote phase as acknowledged by the backend.

        Raises:
            ValueError: If the operation already finished.
        """
        if self.status != OperationStatus.PENDING:
            raise ValueError(f"Cannot commit operation from status: {self.status}")
        self.status = OperationStatus.COMMITTED
        self.finished_at = datetime.now(UTC)

    def mark_as_failed(self, error: str) -> None:
        """Mark the remote phase as failed.

        Raises:
            ValueError: If the operation already finished.
        """
        if self.status != OperationStatus.PENDING:
            raise ValueError(f"Cannot fail operation from status: {self.status}")
        self.status = OperationStatus.FAILED
        self.error = error
        self.finished_at = datetime.now(UTC)

    def mark_as_reverted(self) -> None:
        if self.status != OperationStatus.FAILED:
            raise ValueError("Only failed operations can be reverted")
        self.reverted = True

    @property
    def is_committed(self) -> bool:
        return self.status == OperationStatus.COMMITTED

    @property
    def is_failed(self) -> bool:
        return self.status == OperationStatus.FAILED


class OperationLedger:
    """In-memory record of operations for the lifetime of the session."""

    def __init__(self, max_history: int = 1000) -> None:
        self._history: deque[OperationRecord] = deque(maxlen=max_history)
        self._latest: dict[tuple[str, str], OperationRecord] = {}

    def start(self, entity_type: str, entity_id: str, kind: OperationKind) -> OperationRecord:
        record = OperationRecord(entity_type=entity_type, entity_id=entity_id, kind=kind)
        self._history.append(record)
        self._latest[(entity_type, entity_id)] = record
        return record

    def latest(self, entity_type: str, entity_id: str) -> OperationRecord | None:
        """Most recent operation for one entity."""
        return self._latest.get((entity_type, entity_id))

    def pending(self) -> list[OperationRecord]:
        return [r for r in self._history if r.status == OperationStatus.PENDING]

    def failed(self) -> list[OperationRecord]:
        """Operations whose remote phase failed and whose entity has not succeeded since."""
        return [r for r in self._latest.values() if r.status == OperationStatus.FAILED]

    def history(self) -> list[OperationRecord]:
        return list(self._history)
