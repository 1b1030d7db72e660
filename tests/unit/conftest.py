"""Unit test fixtures: in-memory NetworkX stores and a run context."""

from __future__ import annotations

import pytest

from graphsync.engine.batching import BatchCommitter
from graphsync.engine.context import SyncContext
from graphsync.engine.keys import KeyRegistry
from graphsync.graph.networkx_store import NetworkXGraphStore
from graphsync.models.graph import GraphNode


class GraphBuilder:
    """Seeds a store with committed nodes and relationships."""

    def __init__(self, store: NetworkXGraphStore) -> None:
        self.store = store

    def node(self, *labels: str, **properties) -> GraphNode:
        with self.store.begin() as tx:
            node = tx.create_node(frozenset(labels), properties)
            tx.commit()
        return node

    def entity(self, entity_type: str, key: str, **properties) -> GraphNode:
        return self.node(
            entity_type, type=entity_type, key=key, source="nexus", **properties
        )

    def rel(self, a: GraphNode, b: GraphNode, rel_type: str = "relatedTo") -> None:
        with self.store.begin() as tx:
            tx.create_relationship(a.id, b.id, rel_type)
            tx.commit()

    def chain(self, start: GraphNode, length: int, prefix: str) -> list[GraphNode]:
        """Append *length* dataset nodes to *start*, one hop each."""
        nodes = [start]
        for i in range(1, length + 1):
            nxt = self.entity("dataset", f"{prefix}-{i}")
            self.rel(nodes[-1], nxt)
            nodes.append(nxt)
        return nodes


@pytest.fixture()
def source_store():
    store = NetworkXGraphStore(name="source")
    yield store
    store.close()


@pytest.fixture()
def target_store():
    store = NetworkXGraphStore(name="target")
    yield store
    store.close()


@pytest.fixture()
def source(source_store):
    return GraphBuilder(source_store)


@pytest.fixture()
def target(target_store):
    return GraphBuilder(target_store)


@pytest.fixture()
def make_context(source_store, target_store):
    """Build a ``SyncContext`` over the two stores; closes its transactions."""
    opened: list[SyncContext] = []

    def _make(keys=("doi",), chunk_size: int = 1000) -> SyncContext:
        ctx = SyncContext(
            source_tx=source_store.begin(),
            committer=BatchCommitter(target_store, chunk_size=chunk_size),
            keys=KeyRegistry.of(keys),
        )
        opened.append(ctx)
        return ctx

    yield _make
    for ctx in opened:
        ctx.committer.rollback()
        ctx.source_tx.close()
