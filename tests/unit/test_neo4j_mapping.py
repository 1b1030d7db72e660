"""Unit tests for mapping Neo4j driver records to graph value objects."""

from __future__ import annotations

from neo4j.spatial import WGS84Point
from neo4j.time import Date
from neo4j.time import DateTime
from neo4j.time import Duration

from graphsync.graph.store import _quote
from graphsync.graph.store import _to_graph_node


class _DriverNode(dict):
    """Stand-in for ``neo4j.graph.Node``: a property mapping with ids and labels."""

    def __init__(self, element_id: str, labels: set[str], **properties) -> None:
        super().__init__(properties)
        self.element_id = element_id
        self.labels = frozenset(labels)


class TestToGraphNode:
    def test_ids_and_labels(self):
        node = _to_graph_node(_DriverNode("4:db:1", {"grant"}, key="G1"))
        assert node.id == "4:db:1"
        assert node.labels == frozenset({"grant"})
        assert node.properties == {"key": "G1"}

    def test_duration_is_kept_whole(self):
        embargo = Duration(months=14, days=3)

        node = _to_graph_node(_DriverNode("4:db:1", {"dataset"}, embargo=embargo))

        assert node.properties["embargo"] == embargo
        assert isinstance(node.properties["embargo"], Duration)
        assert node.properties["embargo"].months == 14

    def test_nanosecond_datetime_is_kept(self):
        issued = DateTime(2024, 1, 31, 12, 0, 0, 123456789)

        node = _to_graph_node(_DriverNode("4:db:1", {"dataset"}, issued=issued))

        assert node.properties["issued"] == issued
        assert node.properties["issued"].nanosecond == 123456789

    def test_dates_and_points_pass_through(self):
        published = Date(2020, 2, 29)
        site = WGS84Point((151.2, -33.9))

        node = _to_graph_node(
            _DriverNode("4:db:1", {"dataset"}, published=published, site=site)
        )

        assert node.properties["published"] == published
        assert node.properties["site"] == site
        assert isinstance(node.properties["site"], WGS84Point)


class TestQuote:
    def test_escapes_backticks(self):
        assert _quote("researchgraph.org") == "`researchgraph.org`"
        assert _quote("a`b") == "`a``b`"
