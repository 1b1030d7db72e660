"""Graph domain: store adapters, schema preparation and profiling.

Exports are loaded lazily; submodules (and the drivers they wrap) are
imported on first attribute access.
"""

from __future__ import annotations

from importlib import import_module

__all__ = [
    "GraphStore",
    "Neo4jGraphStore",
    "NetworkXGraphStore",
    "StoreTransaction",
    "open_store",
    "prepare_source_schema",
    "prepare_target_schema",
    "profile_store",
]


_EXPORT_TO_MODULE = {
    "GraphStore": "graphsync.graph.base",
    "StoreTransaction": "graphsync.graph.base",
    "open_store": "graphsync.graph.factory",
    "NetworkXGraphStore": "graphsync.graph.networkx_store",
    "profile_store": "graphsync.graph.profile",
    "prepare_source_schema": "graphsync.graph.schema",
    "prepare_target_schema": "graphsync.graph.schema",
    "Neo4jGraphStore": "graphsync.graph.store",
}


def __getattr__(name: str):
    module_name = _EXPORT_TO_MODULE.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module = import_module(module_name)
    return getattr(module, name)
