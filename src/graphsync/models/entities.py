"""Research-graph entity vocabulary.

Every node that takes part in matching carries three well-known
properties: the canonical identity ``key``, the provenance ``source``
(which upstream system authored it) and the entity ``type``.  The type
string doubles as the node label.
"""

from __future__ import annotations

from enum import Enum

PROPERTY_KEY = "key"
PROPERTY_SOURCE = "source"
PROPERTY_TYPE = "type"


class EntityType(str, Enum):
    """The four entity types recognized for matching."""

    dataset = "dataset"
    grant = "grant"
    researcher = "researcher"
    publication = "publication"

    @property
    def label(self) -> str:
        return self.value


def resolve_entity_type(value: object) -> EntityType | None:
    """Map a raw ``type`` property value to an ``EntityType``.

    Returns ``None`` for non-string values and unrecognized strings.
    """
    if not isinstance(value, str):
        return None
    try:
        return EntityType(value)
    except ValueError:
        return None
