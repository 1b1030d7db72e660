"""Command-line entry point.

Usage:
    graphsync --source bolt://nexus:7687 --target client-graph.zip \
      --publish-to s3://drops/enriched --depth 3 --keys keys.list
"""

from __future__ import annotations

import argparse
import logging
import os
import tempfile
from collections.abc import Sequence
from pathlib import Path

from graphsync.audit.store import AuditLogger
from graphsync.config import AuditConfig
from graphsync.config import Neo4jConfig
from graphsync.config import ProvenanceConfig
from graphsync.config import SyncConfig
from graphsync.descriptors import is_server_descriptor
from graphsync.engine.sync import run_sync
from graphsync.errors import GraphSyncError
from graphsync.transfer import archive_store
from graphsync.transfer import enriched_archive_name
from graphsync.transfer import fetch
from graphsync.transfer import publish

logger = logging.getLogger(__name__)

RUN_DIR_PREFIX = "sync_"


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    defaults = SyncConfig()
    parser = argparse.ArgumentParser(
        prog="graphsync",
        description="Enrich a target research graph from a canonical source graph.",
    )
    parser.add_argument("--source", required=True, help="Source store descriptor")
    parser.add_argument("--target", required=True, help="Target store descriptor")
    parser.add_argument("--work-dir", default=defaults.work_dir)
    parser.add_argument(
        "--publish-to",
        default=None,
        help="s3://bucket[/prefix] or local directory for the enriched archive",
    )
    parser.add_argument("--depth", type=int, default=defaults.max_depth)
    parser.add_argument("--keys", default=defaults.keys_path)
    parser.add_argument("--chunk-size", type=int, default=defaults.chunk_size)
    parser.add_argument(
        "--relationship-type", default=defaults.match_relationship_type
    )
    parser.add_argument(
        "--stamp-provenance",
        action="store_true",
        help="Stamp copied nodes with a timestamp property and marker label",
    )
    parser.add_argument(
        "--profile", action="store_true", help="Log store statistics before syncing"
    )
    parser.add_argument("--audit-file", default=AuditConfig().file_path)
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> SyncConfig:
    return SyncConfig(
        source=args.source,
        target=args.target,
        work_dir=args.work_dir,
        publish_to=args.publish_to,
        keys_path=args.keys,
        max_depth=args.depth,
        chunk_size=args.chunk_size,
        match_relationship_type=args.relationship_type,
        profile_stores=args.profile,
        provenance=ProvenanceConfig(enabled=args.stamp_provenance),
        neo4j=Neo4jConfig(
            user=os.getenv("GRAPHSYNC_NEO4J_USER"),
            password=os.getenv("GRAPHSYNC_NEO4J_PASSWORD"),
            database=os.getenv("GRAPHSYNC_NEO4J_DATABASE"),
        ),
        audit=AuditConfig(file_path=args.audit_file),
    )


def _local_store(descriptor: str, destination: Path) -> str | Path:
    if is_server_descriptor(descriptor):
        return descriptor
    return fetch(descriptor, destination)


def synchronize(config: SyncConfig) -> Path | None:
    """Fetch, synchronize and (for file-backed targets) archive and publish.

    Returns the enriched archive path, or ``None`` for a server target.
    """
    config.validate()
    work_dir = Path(config.work_dir)
    work_dir.mkdir(parents=True, exist_ok=True)
    run_dir = Path(tempfile.mkdtemp(prefix=RUN_DIR_PREFIX, dir=work_dir))
    logger.info("Run directory path=%s", run_dir)

    source = _local_store(config.source, run_dir / "source")
    target = _local_store(config.target, run_dir / "target")
    run_sync(
        config,
        source=source,
        target=target,
        audit_logger=AuditLogger(config.audit),
    )

    if isinstance(target, str):
        return None
    archive = archive_store(target, run_dir / enriched_archive_name())
    logger.info("Enriched store archive=%s", archive)
    if config.publish_to:
        location = publish(archive, config.publish_to)
        logger.info("Published archive to=%s", location)
    return archive


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    try:
        synchronize(build_config(args))
    except GraphSyncError as exc:
        logger.error("graphsync failed: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
