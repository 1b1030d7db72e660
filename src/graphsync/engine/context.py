"""Run-scoped state shared by the engine components."""

from __future__ import annotations

from dataclasses import asdict
from dataclasses import dataclass
from dataclasses import field

from graphsync.engine.batching import BatchCommitter
from graphsync.engine.identity import IdentityMap
from graphsync.engine.keys import KeyRegistry
from graphsync.graph.base import StoreTransaction


@dataclass
class SyncStatistics:
    """Counters reported at the end of a run; they only ever grow."""

    nodes_processed: int = 0
    nodes_imported: int = 0
    relationships_imported: int = 0
    chunks_committed: int = 0

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass
class SyncContext:
    """Everything one run mutates, created fresh at run start.

    ``source_tx`` is the long-lived read transaction on the source store;
    target reads and writes go through ``committer.tx``.
    """

    source_tx: StoreTransaction
    committer: BatchCommitter
    keys: KeyRegistry = field(default_factory=KeyRegistry)
    identity: IdentityMap = field(default_factory=IdentityMap)
    stats: SyncStatistics = field(default_factory=SyncStatistics)

    @property
    def target_tx(self) -> StoreTransaction:
        return self.committer.tx
