"""Audit event types and data models."""

from __future__ import annotations

import time
from enum import Enum
from typing import Any

from pydantic import BaseModel
from pydantic import Field


class AuditEventType(str, Enum):
    """Milestones of a synchronization run."""

    SYNC_STARTED = "SYNC_STARTED"
    PHASE_COMPLETED = "PHASE_COMPLETED"
    CHUNK_COMMITTED = "CHUNK_COMMITTED"
    SYNC_COMPLETED = "SYNC_COMPLETED"
    SYNC_FAILED = "SYNC_FAILED"


class AuditEvent(BaseModel):
    """A single immutable audit log entry."""

    model_config = {"frozen": True}

    timestamp: float = Field(
        default_factory=time.time,
        description="Unix epoch when the event occurred.",
    )
    event_type: AuditEventType = Field(
        description="Which run milestone was reached.",
    )
    run_id: str = Field(description="Identifier of the run emitting the event.")
    payload: dict[str, Any] = Field(
        default_factory=dict,
        description="Event-specific data (counters, phase name, error text).",
    )
