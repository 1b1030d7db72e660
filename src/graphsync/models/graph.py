"""Pydantic value objects for nodes and relationships read from a store.

Both stores hand out immutable snapshots: a ``GraphNode`` is what a store
returned at read time, not a live handle.  Mutations go through the
store transaction, which returns fresh snapshots.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel
from pydantic import Field


class GraphNode(BaseModel):
    """A node as seen by one store (source or target)."""

    model_config = {"frozen": True}

    id: str = Field(description="Store-assigned node identifier.")
    labels: frozenset[str] = Field(
        default_factory=frozenset,
        description="Type tags attached to the node.",
    )
    properties: dict[str, Any] = Field(
        default_factory=dict,
        description="Property name to scalar or list-of-scalar value.",
    )

    def has(self, key: str) -> bool:
        return key in self.properties

    def get(self, key: str, default: Any = None) -> Any:
        return self.properties.get(key, default)


class GraphRelationship(BaseModel):
    """A directed, typed relationship between two nodes of the same store."""

    model_config = {"frozen": True}

    id: str = Field(description="Store-assigned relationship identifier.")
    type: str = Field(description="Relationship type tag.")
    start_id: str = Field(description="Identifier of the start node.")
    end_id: str = Field(description="Identifier of the end node.")

    def other_id(self, node_id: str) -> str:
        """Return the endpoint opposite to *node_id*."""
        if node_id == self.start_id:
            return self.end_id
        if node_id == self.end_id:
            return self.start_id
        msg = f"Node {node_id!r} is not an endpoint of relationship {self.id!r}"
        raise ValueError(msg)
