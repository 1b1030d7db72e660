"""Append-only JSONL audit log for synchronization runs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from graphsync.audit.schemas import AuditEvent
from graphsync.audit.schemas import AuditEventType
from graphsync.config import AuditConfig

logger = logging.getLogger(__name__)


class AuditLogger:
    """Writes one JSON document per line; never rewrites earlier lines."""

    def __init__(self, config: AuditConfig) -> None:
        self.config = config

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def log(self, event: AuditEvent) -> None:
        """Append *event* as a single JSON line to the audit file."""
        if not self.config.enabled:
            return
        path = Path(self.config.file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as fh:
            fh.write(event.model_dump_json() + "\n")

    def emit(self, event_type: AuditEventType, run_id: str, **payload: Any) -> None:
        self.log(AuditEvent(event_type=event_type, run_id=run_id, payload=payload))

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def read_events(
        self,
        *,
        event_type: AuditEventType | None = None,
        run_id: str | None = None,
        since: float | None = None,
    ) -> list[AuditEvent]:
        """Read events back from the audit file, optionally filtered."""
        path = Path(self.config.file_path)
        if not path.exists():
            return []

        events: list[AuditEvent] = []
        raw = path.read_text(encoding="utf-8")
        for line_no, line in enumerate(raw.strip().splitlines(), start=1):
            try:
                evt = AuditEvent.model_validate_json(line)
            except ValidationError:
                logger.warning(
                    "Skipping malformed audit event line %d in %s",
                    line_no,
                    path,
                )
                continue
            if event_type is not None and evt.event_type != event_type:
                continue
            if run_id is not None and evt.run_id != run_id:
                continue
            if since is not None and evt.timestamp < since:
                continue
            events.append(evt)
        return events
