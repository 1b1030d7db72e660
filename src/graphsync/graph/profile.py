"""Node statistics for a store: how many nodes of each type, how many of
them carry each identity key, and how many distinct values each key takes."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from graphsync.graph.base import GraphStore

logger = logging.getLogger(__name__)

SAMPLE_SIZE = 10


def profile_store(
    store: GraphStore, keys: Iterable[str], *, sample_size: int = SAMPLE_SIZE
) -> dict:
    """Return the profile of *store* for the identity *keys*.

    Shape::

        {"nodes": {type: n},
         "keys": {key: {type: nodes carrying key}},
         "distinct": {key: {type: distinct values}},
         "samples": {key: [value, ...]}}
    """
    keys = sorted(keys)
    with store.begin() as tx:
        profile = {
            "nodes": tx.count_by_type(),
            "keys": {key: tx.count_by_type(key) for key in keys},
            "distinct": {key: tx.count_distinct_by_type(key) for key in keys},
            "samples": {key: tx.sample_values(key, sample_size) for key in keys},
        }
    log_profile(store.name, profile)
    return profile


def log_profile(name: str, profile: dict) -> None:
    for node_type, count in sorted(profile["nodes"].items()):
        logger.info("profile store=%s type=%s nodes=%d", name, node_type, count)
    for key, counts in profile["keys"].items():
        distinct = profile["distinct"].get(key, {})
        for node_type, count in sorted(counts.items()):
            logger.info(
                "profile store=%s key=%s type=%s nodes=%d distinct=%d",
                name,
                key,
                node_type,
                count,
                distinct.get(node_type, 0),
            )
        samples = profile["samples"].get(key)
        if samples:
            logger.info("profile store=%s key=%s samples=%s", name, key, samples)
