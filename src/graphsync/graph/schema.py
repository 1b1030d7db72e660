"""Schema preparation for the source and target stores.

The source store gets one index per entity type and identity key so the
matcher's equality lookups stay cheap.  The target store gets a
uniqueness constraint on ``key`` per entity type, which backs the copier's
get-or-create lookup.  Existing rules are read first and skipped, so both
functions are safe to run on every synchronization.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from graphsync.graph.base import GraphStore
from graphsync.models.entities import PROPERTY_KEY
from graphsync.models.entities import EntityType

logger = logging.getLogger(__name__)


def prepare_source_schema(store: GraphStore, keys: Iterable[str]) -> list[str]:
    """Index every identity key for every entity type on *store*.

    Returns the ``Label.prop`` names of the indexes created.
    """
    keys = sorted(keys)
    created: list[str] = []
    with store.begin() as tx:
        # Read every existing rule before the first schema write.
        covered = {
            entity_type: tx.list_indexes(entity_type.label)
            | tx.list_constraints(entity_type.label)
            for entity_type in EntityType
        }
        for entity_type in EntityType:
            for key in keys:
                if key in covered[entity_type]:
                    continue
                logger.info("Creating index on: %s.%s", entity_type.label, key)
                tx.create_index(entity_type.label, key)
                created.append(f"{entity_type.label}.{key}")
        tx.commit()
    return created


def prepare_target_schema(store: GraphStore) -> list[str]:
    """Require a unique ``key`` per entity type on *store*.

    Returns the ``Label.key`` names of the constraints created.
    """
    created: list[str] = []
    with store.begin() as tx:
        constrained = {
            entity_type: tx.list_constraints(entity_type.label)
            for entity_type in EntityType
        }
        for entity_type in EntityType:
            if PROPERTY_KEY in constrained[entity_type]:
                continue
            logger.info(
                "Creating unique constraint on: %s.%s", entity_type.label, PROPERTY_KEY
            )
            tx.create_unique_constraint(entity_type.label, PROPERTY_KEY)
            created.append(f"{entity_type.label}.{PROPERTY_KEY}")
        tx.commit()
    return created
