"""Idempotent relationship creation between two target nodes."""

from __future__ import annotations

import logging

from graphsync.engine.context import SyncContext

logger = logging.getLogger(__name__)


class RelationshipLinker:
    """Creates ``from -> to`` only when the pair is not related yet.

    Any existing relationship between the two nodes counts, whatever its
    type or direction, and a node is always considered related to itself.
    """

    def __init__(self, context: SyncContext) -> None:
        self._ctx = context

    def link(self, from_id: str, to_id: str, rel_type: str) -> bool:
        """Return ``True`` when a relationship was created."""
        if from_id == to_id:
            return False
        tx = self._ctx.target_tx
        if tx.are_related(from_id, to_id):
            return False
        tx.create_relationship(from_id, to_id, rel_type)
        self._ctx.stats.relationships_imported += 1
        logger.debug("Linked from=%s to=%s type=%s", from_id, to_id, rel_type)
        self._ctx.committer.record()
        return True
