"""Models domain: graph value objects and entity vocabulary."""

from __future__ import annotations

from graphsync.models.entities import EntityType
from graphsync.models.entities import PROPERTY_KEY
from graphsync.models.entities import PROPERTY_SOURCE
from graphsync.models.entities import PROPERTY_TYPE
from graphsync.models.entities import resolve_entity_type
from graphsync.models.graph import GraphNode
from graphsync.models.graph import GraphRelationship

__all__ = [
    "EntityType",
    "GraphNode",
    "GraphRelationship",
    "PROPERTY_KEY",
    "PROPERTY_SOURCE",
    "PROPERTY_TYPE",
    "resolve_entity_type",
]
