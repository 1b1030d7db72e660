"""Primary matching of target nodes against the source store."""

from __future__ import annotations

import logging

from graphsync.engine.context import SyncContext
from graphsync.engine.copier import NodeCopier
from graphsync.engine.linker import RelationshipLinker
from graphsync.errors import MalformedNode
from graphsync.models.entities import PROPERTY_KEY
from graphsync.models.entities import PROPERTY_SOURCE
from graphsync.models.entities import PROPERTY_TYPE
from graphsync.models.entities import EntityType
from graphsync.models.entities import resolve_entity_type
from graphsync.models.graph import GraphNode

logger = logging.getLogger(__name__)

_REQUIRED = (PROPERTY_KEY, PROPERTY_SOURCE, PROPERTY_TYPE)


def identity_values(value: object) -> list[str]:
    """Return the string identity values held by a property value.

    A single string yields itself; a list or tuple yields its string
    members.  Anything else carries no identity.
    """
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        return [v for v in value if isinstance(v, str)]
    return []


class NodeMatcher:
    """Finds source nodes sharing an identity key with a target node."""

    def __init__(
        self,
        context: SyncContext,
        copier: NodeCopier,
        linker: RelationshipLinker,
        *,
        relationship_type: str = "augment",
    ) -> None:
        self._ctx = context
        self._copier = copier
        self._linker = linker
        self._relationship_type = relationship_type

    def match(self, target_node: GraphNode) -> int:
        """Copy and link every source match of *target_node*.

        Returns the number of source matches.  Malformed nodes are logged
        and skipped; they are not counted as processed.
        """
        try:
            entity_type = self._check(target_node)
        except MalformedNode as exc:
            logger.warning("Skipping target node: %s", exc)
            return 0

        self._ctx.stats.nodes_processed += 1
        matches = 0
        for key in self._ctx.keys:
            if not target_node.has(key):
                continue
            for value in identity_values(target_node.get(key)):
                for source_node in self._ctx.source_tx.find_nodes(
                    entity_type.label, key, value
                ):
                    matches += 1
                    copy = self._copier.get_or_create(source_node)
                    self._linker.link(target_node.id, copy.id, self._relationship_type)
        return matches

    @staticmethod
    def _check(node: GraphNode) -> EntityType:
        missing = [name for name in _REQUIRED if not node.has(name)]
        if missing:
            raise MalformedNode(node.id, f"missing {', '.join(missing)}")
        entity_type = resolve_entity_type(node.get(PROPERTY_TYPE))
        if entity_type is None:
            raise MalformedNode(
                node.id, f"unrecognized type {node.get(PROPERTY_TYPE)!r}"
            )
        return entity_type
