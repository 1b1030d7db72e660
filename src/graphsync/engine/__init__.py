"""Engine domain: matching, copying, propagation and chunked commit."""

from graphsync.engine.batching import BatchCommitter
from graphsync.engine.context import SyncContext
from graphsync.engine.context import SyncStatistics
from graphsync.engine.copier import NodeCopier
from graphsync.engine.identity import IdentityMap
from graphsync.engine.keys import KeyRegistry
from graphsync.engine.keys import load_key_registry
from graphsync.engine.linker import RelationshipLinker
from graphsync.engine.matcher import NodeMatcher
from graphsync.engine.propagation import NeighborPropagator
from graphsync.engine.sync import run_sync
from graphsync.engine.sync import SyncOrchestrator
from graphsync.engine.sync import SyncPhase
from graphsync.engine.sync import SyncRunResult

__all__ = [
    "BatchCommitter",
    "IdentityMap",
    "KeyRegistry",
    "NeighborPropagator",
    "NodeCopier",
    "NodeMatcher",
    "RelationshipLinker",
    "SyncContext",
    "SyncOrchestrator",
    "SyncPhase",
    "SyncRunResult",
    "SyncStatistics",
    "load_key_registry",
    "run_sync",
]
