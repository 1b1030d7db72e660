"""Print node statistics for a graph store.

Usage:
    python scripts/profile_store.py --store sync/sync_x1y2/target \
      --keys keys.list --output reports/target-profile.json
"""

from __future__ import annotations

import argparse
import json
import logging
import os
from pathlib import Path

from graphsync.config import Neo4jConfig
from graphsync.engine.keys import load_key_registry
from graphsync.errors import GraphSyncError
from graphsync.graph.factory import open_store
from graphsync.graph.profile import profile_store


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser()
    parser.add_argument("--store", required=True)
    parser.add_argument("--keys", default="keys.list")
    parser.add_argument("--output", default=None)
    return parser.parse_args()


def _main() -> int:
    args = _parse_args()
    logging.basicConfig(level=logging.WARNING)
    config = Neo4jConfig(
        user=os.getenv("GRAPHSYNC_NEO4J_USER"),
        password=os.getenv("GRAPHSYNC_NEO4J_PASSWORD"),
        database=os.getenv("GRAPHSYNC_NEO4J_DATABASE"),
    )
    keys = load_key_registry(args.keys)
    try:
        store = open_store(args.store, config)
    except GraphSyncError as exc:
        print(f"error: {exc}")
        return 1
    try:
        profile = profile_store(store, keys)
    finally:
        store.close()

    report = {"store": args.store, **profile}
    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with output_path.open("w", encoding="utf-8") as handle:
            json.dump(
                report, handle, indent=2, sort_keys=True, ensure_ascii=True, default=str
            )
            handle.write("\n")

    print(json.dumps(report, indent=2, sort_keys=True, ensure_ascii=True, default=str))
    return 0


if __name__ == "__main__":
    raise SystemExit(_main())
