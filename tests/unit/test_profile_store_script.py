"""Tests for the store profiling script."""

from __future__ import annotations

import json
import os
import subprocess
import sys
from pathlib import Path

from graphsync.graph.networkx_store import NetworkXGraphStore
from graphsync.graph.profile import profile_store

_ROOT = Path(__file__).resolve().parents[2]


def _run_script(*args: str) -> subprocess.CompletedProcess[str]:
    script = _ROOT / "scripts" / "profile_store.py"
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(
        p for p in (str(_ROOT / "src"), env.get("PYTHONPATH")) if p
    )
    return subprocess.run(
        [sys.executable, str(script), *args],
        check=False,
        capture_output=True,
        text=True,
        env=env,
    )


def _seed(directory: Path) -> None:
    store = NetworkXGraphStore.create(directory)
    with store.begin() as tx:
        tx.create_node(frozenset({"grant"}), {"type": "grant", "key": "g1", "purl": "p"})
        tx.create_node(frozenset({"grant"}), {"type": "grant", "key": "g2"})
        tx.create_node(frozenset({"researcher"}), {"type": "researcher", "key": "r1"})
        tx.create_node(frozenset(), {"name": "untyped"})
        tx.commit()
    store.close()


class TestProfileStore:
    def test_counts_per_type_and_key(self, tmp_path: Path):
        _seed(tmp_path / "db")
        store = NetworkXGraphStore.open(tmp_path / "db")

        profile = profile_store(store, ["key", "purl"])

        assert profile["nodes"] == {"grant": 2, "researcher": 1, "(none)": 1}
        assert profile["keys"]["key"] == {"grant": 2, "researcher": 1}
        assert profile["keys"]["purl"] == {"grant": 1}

    def test_distinct_values_and_samples(self, tmp_path: Path):
        store = NetworkXGraphStore.create(tmp_path / "db")
        with store.begin() as tx:
            for key, doi in (("d1", "10.1/a"), ("d2", "10.1/a"), ("d3", "10.1/b")):
                tx.create_node(
                    frozenset({"dataset"}), {"type": "dataset", "key": key, "doi": doi}
                )
            tx.create_node(
                frozenset({"publication"}),
                {"type": "publication", "key": "p1", "doi": "10.1/a"},
            )
            tx.commit()

        profile = profile_store(store, ["doi"], sample_size=2)

        assert profile["keys"]["doi"] == {"dataset": 3, "publication": 1}
        assert profile["distinct"]["doi"] == {"dataset": 2, "publication": 1}
        assert profile["samples"]["doi"] == ["10.1/a", "10.1/a"]


class TestProfileStoreScript:
    def test_writes_report(self, tmp_path: Path):
        _seed(tmp_path / "db")
        keys = tmp_path / "keys.list"
        keys.write_text("purl\n", encoding="utf-8")
        output = tmp_path / "reports" / "profile.json"

        completed = _run_script(
            "--store", str(tmp_path / "db"), "--keys", str(keys), "--output", str(output)
        )

        assert completed.returncode == 0, completed.stderr
        report = json.loads(output.read_text(encoding="utf-8"))
        assert report["nodes"]["grant"] == 2
        assert report["keys"]["purl"] == {"grant": 1}
        assert report["distinct"]["purl"] == {"grant": 1}
        assert report["samples"]["purl"] == ["p"]
        assert json.loads(completed.stdout) == report

    def test_missing_store_returns_one(self, tmp_path: Path):
        completed = _run_script("--store", str(tmp_path / "nothing"))

        assert completed.returncode == 1
        assert "error" in completed.stdout
