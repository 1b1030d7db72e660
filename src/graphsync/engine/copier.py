"""Get-or-create of target counterparts for source nodes."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from datetime import timezone

from graphsync.config import ProvenanceConfig
from graphsync.engine.context import SyncContext
from graphsync.models.entities import PROPERTY_KEY
from graphsync.models.entities import PROPERTY_TYPE
from graphsync.models.graph import GraphNode

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class NodeCopier:
    """Maps each source node to exactly one target node.

    Lookup order: the run's identity map, then an existing target node
    with the same ``type`` label and ``key`` (reused untouched), and only
    then a fresh copy.  Not safe for concurrent use.
    """

    def __init__(
        self,
        context: SyncContext,
        provenance: ProvenanceConfig | None = None,
        *,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._ctx = context
        self._provenance = provenance or ProvenanceConfig()
        self._clock = clock

    def get_or_create(self, source_node: GraphNode) -> GraphNode:
        tx = self._ctx.target_tx
        mapped = self._ctx.identity.get(source_node.id)
        if mapped is not None:
            return tx.get_node(mapped)

        target_node = self._find_existing(source_node)
        if target_node is None:
            target_node = self._create_copy(source_node)
        self._ctx.identity.register(source_node.id, target_node.id)
        return target_node

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _find_existing(self, source_node: GraphNode) -> GraphNode | None:
        key = source_node.get(PROPERTY_KEY)
        node_type = source_node.get(PROPERTY_TYPE)
        if key is None or not isinstance(node_type, str) or not node_type:
            logger.debug(
                "Source node id=%s has no key/type; copying without lookup",
                source_node.id,
            )
            return None
        return self._ctx.target_tx.find_unique_node(node_type, PROPERTY_KEY, key)

    def _create_copy(self, source_node: GraphNode) -> GraphNode:
        labels = set(source_node.labels)
        properties = dict(source_node.properties)
        if self._provenance.enabled:
            if self._provenance.timestamp_property:
                properties[self._provenance.timestamp_property] = (
                    self._clock().isoformat()
                )
            if self._provenance.marker_label:
                labels.add(self._provenance.marker_label)

        node = self._ctx.target_tx.create_node(frozenset(labels), properties)
        self._ctx.stats.nodes_imported += 1
        logger.debug("Imported node source_id=%s target_id=%s", source_node.id, node.id)
        self._ctx.committer.record()
        return node
