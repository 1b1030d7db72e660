"""Audit subsystem: JSONL run event logging."""

from graphsync.audit.schemas import AuditEvent
from graphsync.audit.schemas import AuditEventType
from graphsync.audit.store import AuditLogger

__all__ = [
    "AuditEvent",
    "AuditEventType",
    "AuditLogger",
]
