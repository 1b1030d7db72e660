"""Synchronization orchestrator.

Drives one run through its phases::

    INIT -> SCHEMA_PREP -> PRIMARY_MATCH -> NEIGHBOR_PROPAGATION
         -> FINAL_COMMIT -> DONE

with ``FAILED`` reachable from every phase.  The orchestrator wires the
engine components around a fresh ``SyncContext``; it does not contain
matching or copying logic itself.  It owns both store handles and closes
them when the run ends, whatever the outcome.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from dataclasses import field
from enum import Enum
from pathlib import Path

from graphsync.audit.schemas import AuditEventType
from graphsync.audit.store import AuditLogger
from graphsync.config import SyncConfig
from graphsync.engine.batching import BatchCommitter
from graphsync.engine.context import SyncContext
from graphsync.engine.context import SyncStatistics
from graphsync.engine.copier import NodeCopier
from graphsync.engine.keys import KeyRegistry
from graphsync.engine.keys import load_key_registry
from graphsync.engine.linker import RelationshipLinker
from graphsync.engine.matcher import NodeMatcher
from graphsync.engine.propagation import NeighborPropagator
from graphsync.graph.base import GraphStore
from graphsync.graph.factory import open_store
from graphsync.graph.profile import profile_store
from graphsync.graph.schema import prepare_source_schema
from graphsync.graph.schema import prepare_target_schema
from graphsync.observability import timed

logger = logging.getLogger(__name__)


class SyncPhase(str, Enum):
    INIT = "init"
    SCHEMA_PREP = "schema_prep"
    PRIMARY_MATCH = "primary_match"
    NEIGHBOR_PROPAGATION = "neighbor_propagation"
    FINAL_COMMIT = "final_commit"
    DONE = "done"
    FAILED = "failed"


# ---------------------------------------------------------------------------
# Result dataclass
# ---------------------------------------------------------------------------


@dataclass
class SyncRunResult:
    """Summary of a single synchronization run."""

    run_id: str
    statistics: SyncStatistics = field(default_factory=SyncStatistics)
    # Identity map size once primary matching is over
    unique_nodes: int = 0
    # store role ("source"/"target") -> profile_store() output
    profiles: dict[str, dict] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class SyncOrchestrator:
    """Runs matching and propagation from *source* into *target*."""

    def __init__(
        self,
        source: GraphStore,
        target: GraphStore,
        keys: KeyRegistry,
        config: SyncConfig | None = None,
        audit_logger: AuditLogger | None = None,
    ) -> None:
        self._source = source
        self._target = target
        self._keys = keys
        self._config = config or SyncConfig()
        self._audit = audit_logger or AuditLogger(self._config.audit)
        self.phase = SyncPhase.INIT

    def run(self) -> SyncRunResult:
        """Execute the run; committed chunks survive a failure."""
        result = SyncRunResult(run_id=uuid.uuid4().hex)
        try:
            logger.info(
                "Sync started run_id=%s source=%s target=%s depth=%d",
                result.run_id,
                self._source.name,
                self._target.name,
                self._config.max_depth,
            )
            self._audit.emit(
                AuditEventType.SYNC_STARTED,
                result.run_id,
                source=self._source.name,
                target=self._target.name,
                keys=list(self._keys),
                max_depth=self._config.max_depth,
                provenance=self._config.provenance.enabled,
            )
            self._run(result)
        except Exception as exc:
            failed_in = self.phase
            self.phase = SyncPhase.FAILED
            logger.error(
                "Sync failed run_id=%s phase=%s error=%s",
                result.run_id,
                failed_in.value,
                exc,
            )
            self._audit.emit(
                AuditEventType.SYNC_FAILED,
                result.run_id,
                phase=failed_in.value,
                error=str(exc),
                **result.statistics.as_dict(),
            )
            raise
        finally:
            self._close_stores()

        self.phase = SyncPhase.DONE
        stats = result.statistics
        logger.info(
            "Sync completed run_id=%s processed=%d imported=%d "
            "relationships=%d chunks=%d",
            result.run_id,
            stats.nodes_processed,
            stats.nodes_imported,
            stats.relationships_imported,
            stats.chunks_committed,
        )
        self._audit.emit(
            AuditEventType.SYNC_COMPLETED,
            result.run_id,
            unique_nodes=result.unique_nodes,
            **stats.as_dict(),
        )
        return result

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    def _run(self, result: SyncRunResult) -> None:
        if self._config.profile_stores:
            with timed("sync.profile"):
                result.profiles["source"] = profile_store(self._source, self._keys)
                result.profiles["target"] = profile_store(self._target, self._keys)

        with self._phase(SyncPhase.SCHEMA_PREP, result):
            prepare_source_schema(self._source, self._keys)
            prepare_target_schema(self._target)

        stats = result.statistics

        def on_commit(chunk: int, mutations: int) -> None:
            stats.chunks_committed = chunk
            self._audit.emit(
                AuditEventType.CHUNK_COMMITTED,
                result.run_id,
                chunk=chunk,
                mutations=mutations,
            )

        committer = BatchCommitter(
            self._target, chunk_size=self._config.chunk_size, on_commit=on_commit
        )
        with self._source.begin() as source_tx:
            ctx = SyncContext(
                source_tx=source_tx, committer=committer, keys=self._keys, stats=stats
            )
            copier = NodeCopier(ctx, self._config.provenance)
            linker = RelationshipLinker(ctx)
            try:
                with self._phase(SyncPhase.PRIMARY_MATCH, result):
                    self._primary_match(ctx, copier, linker)
                result.unique_nodes = len(ctx.identity)
                logger.info("Found unique_nodes=%d", result.unique_nodes)

                with self._phase(SyncPhase.NEIGHBOR_PROPAGATION, result):
                    self._propagate(ctx, copier, linker)

                with self._phase(SyncPhase.FINAL_COMMIT, result):
                    committer.flush()
            except BaseException:
                committer.rollback()
                raise

    def _primary_match(
        self, ctx: SyncContext, copier: NodeCopier, linker: RelationshipLinker
    ) -> None:
        matcher = NodeMatcher(
            ctx,
            copier,
            linker,
            relationship_type=self._config.match_relationship_type,
        )
        for node_id in ctx.target_tx.snapshot_node_ids():
            matcher.match(ctx.target_tx.get_node(node_id))

    def _propagate(
        self, ctx: SyncContext, copier: NodeCopier, linker: RelationshipLinker
    ) -> None:
        propagator = NeighborPropagator(ctx, copier, linker)
        for source_id, target_id in ctx.identity.snapshot():
            propagator.propagate(
                ctx.source_tx.get_node(source_id),
                ctx.target_tx.get_node(target_id),
                self._config.max_depth,
            )

    @contextmanager
    def _phase(self, phase: SyncPhase, result: SyncRunResult) -> Iterator[None]:
        self.phase = phase
        logger.info("Sync phase=%s run_id=%s", phase.value, result.run_id)
        with timed(f"sync.{phase.value}"):
            yield
        self._audit.emit(
            AuditEventType.PHASE_COMPLETED,
            result.run_id,
            phase=phase.value,
            **result.statistics.as_dict(),
        )

    def _close_stores(self) -> None:
        try:
            self._source.close()
        finally:
            self._target.close()


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def run_sync(
    config: SyncConfig,
    *,
    source: str | Path | None = None,
    target: str | Path | None = None,
    audit_logger: AuditLogger | None = None,
) -> SyncRunResult:
    """Validate *config*, open both stores and run one synchronization.

    *source* and *target* override the configured descriptors, e.g. with
    the local directories an archive was fetched into.
    """
    config.validate()
    keys = load_key_registry(config.keys_path)
    source_store = open_store(source or config.source, config.neo4j)
    try:
        target_store = open_store(target or config.target, config.neo4j)
    except BaseException:
        source_store.close()
        raise
    orchestrator = SyncOrchestrator(
        source_store, target_store, keys, config, audit_logger=audit_logger
    )
    return orchestrator.run()
