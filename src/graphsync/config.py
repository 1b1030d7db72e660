"""Run configuration dataclasses.

Frozen dataclasses with sensible defaults for each subsystem.  The
command-line entry point builds them from arguments; library callers
construct them directly.  ``SyncConfig.validate`` is the pre-flight check
run before any store is opened.
"""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field

from graphsync.descriptors import is_server_descriptor
from graphsync.errors import ConfigurationError


@dataclass(frozen=True)
class ProvenanceConfig:
    """Stamping applied to nodes created by the engine.

    Either half can be switched off by setting it to ``None``.
    """

    enabled: bool = False
    timestamp_property: str | None = "augmented_at"
    marker_label: str | None = "researchgraph.org"


@dataclass(frozen=True)
class Neo4jConfig:
    """Connection settings for server-backed stores."""

    user: str | None = None
    password: str | None = None
    database: str | None = None
    connection_timeout_seconds: float = 30.0

    @property
    def auth(self) -> tuple[str, str] | None:
        if not self.user:
            return None
        return (self.user, self.password or "")


@dataclass(frozen=True)
class AuditConfig:
    """Settings for the JSONL run audit log."""

    file_path: str = "graphsync_audit.jsonl"
    enabled: bool = True


@dataclass(frozen=True)
class SyncConfig:
    """Settings for one synchronization run."""

    source: str = ""
    target: str = ""
    work_dir: str = "sync"
    publish_to: str | None = None
    keys_path: str = "keys.list"
    # Neighbor hops expanded around every matched node
    max_depth: int = 3
    # Pending creations/links tolerated before an intermediate commit
    chunk_size: int = 1000
    match_relationship_type: str = "augment"
    profile_stores: bool = False
    provenance: ProvenanceConfig = field(default_factory=ProvenanceConfig)
    neo4j: Neo4jConfig = field(default_factory=Neo4jConfig)
    audit: AuditConfig = field(default_factory=AuditConfig)

    def validate(self) -> None:
        """Raise ``ConfigurationError`` for missing or inconsistent settings."""
        if not self.source.strip():
            raise ConfigurationError("Source store can not be empty")
        if not self.target.strip():
            raise ConfigurationError("Target store can not be empty")
        if not self.keys_path.strip():
            raise ConfigurationError("Identity key list path can not be empty")
        if not self.work_dir.strip():
            raise ConfigurationError("Work directory can not be empty")
        if self.max_depth < 0:
            msg = f"max_depth must be >= 0, got {self.max_depth}"
            raise ConfigurationError(msg)
        if self.chunk_size < 1:
            msg = f"chunk_size must be >= 1, got {self.chunk_size}"
            raise ConfigurationError(msg)
        if not self.match_relationship_type.strip():
            raise ConfigurationError("match_relationship_type can not be empty")
        if self.publish_to and is_server_descriptor(self.target):
            raise ConfigurationError(
                "publish_to requires a file-backed target; "
                f"{self.target!r} is a server store"
            )
