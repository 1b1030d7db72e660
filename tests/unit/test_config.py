"""Unit tests for configuration dataclasses."""

from dataclasses import FrozenInstanceError

import pytest

from graphsync.config import AuditConfig
from graphsync.config import Neo4jConfig
from graphsync.config import ProvenanceConfig
from graphsync.config import SyncConfig
from graphsync.errors import ConfigurationError


def _valid(**overrides) -> SyncConfig:
    values = {"source": "nexus.zip", "target": "client.zip"}
    values.update(overrides)
    return SyncConfig(**values)


# ---------------------------------------------------------------------------
# SyncConfig
# ---------------------------------------------------------------------------


class TestSyncConfig:
    def test_defaults(self):
        cfg = SyncConfig()
        assert cfg.work_dir == "sync"
        assert cfg.keys_path == "keys.list"
        assert cfg.max_depth == 3
        assert cfg.chunk_size == 1000
        assert cfg.match_relationship_type == "augment"
        assert cfg.publish_to is None
        assert cfg.profile_stores is False

    def test_frozen(self):
        cfg = SyncConfig()
        with pytest.raises(FrozenInstanceError):
            cfg.max_depth = 5

    def test_valid_config_passes(self):
        _valid().validate()

    @pytest.mark.parametrize(
        "overrides",
        [
            {"source": ""},
            {"target": "  "},
            {"keys_path": ""},
            {"work_dir": ""},
            {"max_depth": -1},
            {"chunk_size": 0},
            {"match_relationship_type": ""},
        ],
    )
    def test_invalid_settings_raise(self, overrides):
        with pytest.raises(ConfigurationError):
            _valid(**overrides).validate()

    def test_depth_zero_is_allowed(self):
        _valid(max_depth=0).validate()

    def test_publish_with_server_target_is_rejected(self):
        cfg = _valid(target="bolt://localhost:7687", publish_to="s3://drops")
        with pytest.raises(ConfigurationError, match="file-backed target"):
            cfg.validate()

    def test_publish_with_archive_target_is_allowed(self):
        _valid(publish_to="s3://drops").validate()


# ---------------------------------------------------------------------------
# ProvenanceConfig
# ---------------------------------------------------------------------------


class TestProvenanceConfig:
    def test_defaults(self):
        cfg = ProvenanceConfig()
        assert cfg.enabled is False
        assert cfg.timestamp_property == "augmented_at"
        assert cfg.marker_label == "researchgraph.org"


# ---------------------------------------------------------------------------
# Neo4jConfig
# ---------------------------------------------------------------------------


class TestNeo4jConfig:
    def test_no_user_means_no_auth(self):
        assert Neo4jConfig().auth is None

    def test_auth_tuple(self):
        assert Neo4jConfig(user="neo4j", password="secret").auth == ("neo4j", "secret")

    def test_missing_password_is_empty(self):
        assert Neo4jConfig(user="neo4j").auth == ("neo4j", "")


# ---------------------------------------------------------------------------
# AuditConfig
# ---------------------------------------------------------------------------


class TestAuditConfig:
    def test_defaults(self):
        cfg = AuditConfig()
        assert cfg.file_path == "graphsync_audit.jsonl"
        assert cfg.enabled is True
