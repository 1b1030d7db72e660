"""Bounded-depth copy of the source neighborhood around matched nodes."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass

from graphsync.engine.context import SyncContext
from graphsync.engine.copier import NodeCopier
from graphsync.engine.linker import RelationshipLinker
from graphsync.models.graph import GraphNode
from graphsync.models.graph import GraphRelationship

logger = logging.getLogger(__name__)


@dataclass
class _Frame:
    source_id: str
    target: GraphNode
    remaining_depth: int
    relationships: Iterator[GraphRelationship]


class NeighborPropagator:
    """Walks source relationships outward from a matched pair.

    For every relationship incident to the source node, the opposite
    endpoint is copied and linked from the target node (always
    ``target -> copy``, keeping the source relationship type), then walked
    with one hop less.  A pair is only expanded while its remaining depth
    is positive, so depth ``N`` reaches source nodes at most ``N`` hops
    away.  The identity map dedups nodes, not edge walks: a node reachable
    along several paths is visited along each of them.

    The walk uses an explicit stack of frames, one per expanded node, and
    visits relationships in the same depth-first order a recursive walk
    would.
    """

    def __init__(
        self,
        context: SyncContext,
        copier: NodeCopier,
        linker: RelationshipLinker,
    ) -> None:
        self._ctx = context
        self._copier = copier
        self._linker = linker

    def propagate(
        self, source_node: GraphNode, target_node: GraphNode, remaining_depth: int
    ) -> int:
        """Expand around ``(source_node, target_node)``; return hops walked."""
        if remaining_depth <= 0:
            return 0
        hops = 0
        stack = [self._frame(source_node.id, target_node, remaining_depth)]
        while stack:
            frame = stack[-1]
            rel = next(frame.relationships, None)
            if rel is None:
                stack.pop()
                continue
            other = self._ctx.source_tx.get_node(rel.other_id(frame.source_id))
            copy = self._copier.get_or_create(other)
            self._linker.link(frame.target.id, copy.id, rel.type)
            hops += 1
            if frame.remaining_depth > 1:
                stack.append(self._frame(other.id, copy, frame.remaining_depth - 1))
        logger.debug(
            "Propagated source_id=%s depth=%d hops=%d",
            source_node.id,
            remaining_depth,
            hops,
        )
        return hops

    def _frame(self, source_id: str, target: GraphNode, depth: int) -> _Frame:
        rels = self._ctx.source_tx.relationships(source_id)
        return _Frame(source_id, target, depth, iter(rels))
