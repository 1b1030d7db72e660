"""Exception taxonomy for a synchronization run.

Everything derives from ``GraphSyncError`` so the command-line entry
point can turn any expected failure into a non-zero exit status while
unexpected exceptions keep their tracebacks.
"""

from __future__ import annotations


class GraphSyncError(Exception):
    """Base class for expected synchronization failures."""


class ConfigurationError(GraphSyncError):
    """A required setting is missing, empty or inconsistent."""


class StoreUnavailable(GraphSyncError):
    """A store descriptor does not resolve to a usable graph store."""


class SchemaConflict(GraphSyncError):
    """Index or constraint creation collided with an existing schema rule."""


class ConstraintViolation(GraphSyncError):
    """A write would break a uniqueness constraint of the store."""


class PropertyValueError(GraphSyncError):
    """A property value has no representation in the receiving store."""


class MalformedNode(GraphSyncError):
    """A target node cannot take part in matching.

    Raised per node and contained by the matcher: the node is skipped and
    the run continues.
    """

    def __init__(self, node_id: str, reason: str) -> None:
        super().__init__(f"node {node_id}: {reason}")
        self.node_id = node_id
        self.reason = reason


class TransferError(GraphSyncError):
    """Fetching or publishing a store archive failed."""
