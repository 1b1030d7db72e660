"""Unit tests for the identity key registry and identity map."""

from __future__ import annotations

from pathlib import Path

import pytest

from graphsync.engine.identity import IdentityMap
from graphsync.engine.keys import KeyRegistry
from graphsync.engine.keys import load_key_registry


class TestKeyRegistry:
    def test_always_contains_key(self):
        assert "key" in KeyRegistry()
        assert "key" in KeyRegistry(frozenset({"doi"}))

    def test_of_trims_and_skips_blanks(self):
        registry = KeyRegistry.of(["  doi ", "", "   ", "orcid"])
        assert list(registry) == ["doi", "key", "orcid"]
        assert len(registry) == 3

    def test_load_from_file(self, tmp_path: Path):
        path = tmp_path / "keys.list"
        path.write_text("doi\n\n  orcid  \nkey\n", encoding="utf-8")
        registry = load_key_registry(path)
        assert registry.keys == frozenset({"doi", "orcid", "key"})

    def test_missing_file_yields_key_only(self, tmp_path: Path, caplog):
        registry = load_key_registry(tmp_path / "absent.list")
        assert registry.keys == frozenset({"key"})
        assert "not found" in caplog.text

    def test_immutable(self):
        registry = KeyRegistry.of(["doi"])
        with pytest.raises(AttributeError):
            registry.keys = frozenset()


class TestIdentityMap:
    def test_register_and_get(self):
        identity = IdentityMap()
        identity.register("s1", "t1")
        assert identity.get("s1") == "t1"
        assert identity.get("s2") is None
        assert "s1" in identity
        assert len(identity) == 1

    def test_re_registering_same_pair_is_noop(self):
        identity = IdentityMap()
        identity.register("s1", "t1")
        identity.register("s1", "t1")
        assert identity.snapshot() == [("s1", "t1")]

    def test_entries_are_never_overwritten(self):
        identity = IdentityMap()
        identity.register("s1", "t1")
        with pytest.raises(ValueError):
            identity.register("s1", "t2")
        assert identity.get("s1") == "t1"

    def test_snapshot_is_detached(self):
        identity = IdentityMap()
        identity.register("s1", "t1")
        snapshot = identity.snapshot()
        identity.register("s2", "t2")
        assert snapshot == [("s1", "t1")]
