"""Capability surface the synchronization engine needs from a graph store.

Concrete adapters (``Neo4jGraphStore``, ``NetworkXGraphStore``) implement
these protocols.  Every read and write happens inside a
``StoreTransaction``; a transaction that is closed without ``commit`` is
rolled back.
"""

from __future__ import annotations

from typing import Any
from typing import Protocol
from typing import runtime_checkable

from graphsync.models.graph import GraphNode
from graphsync.models.graph import GraphRelationship


@runtime_checkable
class StoreTransaction(Protocol):
    """One unit of work against a store."""

    # ----- Lifecycle -----

    def commit(self) -> None: ...

    def rollback(self) -> None: ...

    def close(self) -> None:
        """Release the transaction, rolling back if still open."""

    def __enter__(self) -> StoreTransaction:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ----- Schema -----

    def list_indexes(self, label: str) -> set[str]:
        """Return the property names indexed for *label*."""

    def list_constraints(self, label: str) -> set[str]:
        """Return the property names constrained for *label*."""

    def create_index(self, label: str, prop: str) -> None: ...

    def create_unique_constraint(self, label: str, prop: str) -> None: ...

    # ----- Nodes -----

    def get_node(self, node_id: str) -> GraphNode:
        """Return the node with *node_id*; raise ``KeyError`` if absent."""

    def create_node(
        self, labels: frozenset[str], properties: dict[str, Any]
    ) -> GraphNode: ...

    def find_unique_node(
        self, label: str, prop: str, value: object
    ) -> GraphNode | None: ...

    def find_nodes(self, label: str, prop: str, value: object) -> list[GraphNode]: ...

    def snapshot_node_ids(self) -> list[str]:
        """Return the ids of every node visible right now."""

    def count_by_type(self, prop: str | None = None) -> dict[str, int]:
        """Count nodes per ``type`` value, optionally only those carrying *prop*."""

    def count_distinct_by_type(self, prop: str) -> dict[str, int]:
        """Count distinct values of *prop* per ``type`` value."""

    def sample_values(self, prop: str, limit: int = 10) -> list[Any]:
        """Return up to *limit* values of *prop*, in store order."""

    # ----- Relationships -----

    def relationships(self, node_id: str) -> list[GraphRelationship]:
        """Return every relationship incident to *node_id*, both directions."""

    def are_related(self, a: str, b: str) -> bool:
        """Return ``True`` if any relationship links *a* and *b*."""

    def create_relationship(
        self, from_id: str, to_id: str, rel_type: str
    ) -> GraphRelationship: ...


@runtime_checkable
class GraphStore(Protocol):
    """An open handle on a graph store."""

    name: str

    def begin(self) -> StoreTransaction: ...

    def close(self) -> None: ...


UNTYPED = "(none)"


def type_bucket(value: object) -> str:
    """Normalize a ``type`` property value into a profile bucket name."""
    if value is None:
        return UNTYPED
    return str(value)
