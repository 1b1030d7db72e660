"""Open a graph store from its descriptor."""

from __future__ import annotations

from pathlib import Path

from graphsync.config import Neo4jConfig
from graphsync.descriptors import is_server_descriptor
from graphsync.graph.base import GraphStore
from graphsync.graph.networkx_store import NetworkXGraphStore
from graphsync.graph.store import Neo4jGraphStore


def open_store(
    descriptor: str | Path, config: Neo4jConfig | None = None
) -> GraphStore:
    """Return an open store for a Bolt URI or a local store directory.

    Raises ``StoreUnavailable`` when the descriptor resolves to nothing
    usable.  Archives and S3 references must be fetched first.
    """
    if isinstance(descriptor, str) and is_server_descriptor(descriptor):
        return Neo4jGraphStore.connect(descriptor.strip(), config)
    return NetworkXGraphStore.open(descriptor)
