"""Chunked transactional commit of target-store mutations."""

from __future__ import annotations

import logging
from collections.abc import Callable

from graphsync.graph.base import GraphStore
from graphsync.graph.base import StoreTransaction

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1000

# Called with (chunk number, mutations in the chunk) after each commit.
CommitCallback = Callable[[int, int], None]


class BatchCommitter:
    """Owns the open target transaction and commits it in bounded chunks.

    Callers report each mutation through ``record``.  Once more than
    ``chunk_size`` mutations are pending, the transaction is committed and
    the next access to ``tx`` opens a fresh one.  A failure only loses
    the chunk that is still open.
    """

    def __init__(
        self,
        store: GraphStore,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        on_commit: CommitCallback | None = None,
    ) -> None:
        if chunk_size < 1:
            msg = f"chunk_size must be >= 1, got {chunk_size}"
            raise ValueError(msg)
        self._store = store
        self._chunk_size = chunk_size
        self._on_commit = on_commit
        self._tx: StoreTransaction | None = None
        self.pending = 0
        self.chunks = 0

    @property
    def tx(self) -> StoreTransaction:
        """The open transaction, started on first use."""
        if self._tx is None:
            self._tx = self._store.begin()
        return self._tx

    def record(self, count: int = 1) -> None:
        """Count *count* mutations against the open chunk."""
        self.pending += count
        if self.pending > self._chunk_size:
            self._commit()

    def flush(self) -> None:
        """Commit the trailing partial chunk."""
        if self._tx is None:
            return
        if self.pending:
            self._commit(final=True)
        else:
            self._tx.commit()
            self._tx = None

    def rollback(self) -> None:
        """Discard the open chunk; already committed chunks stay."""
        if self._tx is None:
            return
        tx, self._tx = self._tx, None
        discarded, self.pending = self.pending, 0
        tx.rollback()
        if discarded:
            logger.warning("Rolled back open chunk mutations=%d", discarded)

    def _commit(self, *, final: bool = False) -> None:
        tx, self._tx = self.tx, None
        mutations, self.pending = self.pending, 0
        tx.commit()
        self.chunks += 1
        logger.info(
            "Wrote %schunk=%d mutations=%d",
            "final " if final else "",
            self.chunks,
            mutations,
        )
        if self._on_commit is not None:
            self._on_commit(self.chunks, mutations)
