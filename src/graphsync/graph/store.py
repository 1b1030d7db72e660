"""Neo4j-backed graph store over Bolt.

``Neo4jGraphStore`` wraps a synchronous ``neo4j.Driver``; every
``begin()`` opens a session with one explicit transaction.  Node and
relationship ids are Neo4j element ids.  Labels, property names and
relationship types come from data, so they are always backtick-quoted
rather than validated against a fixed vocabulary.
"""

from __future__ import annotations

import logging
from typing import Any

from neo4j import Driver
from neo4j import GraphDatabase
from neo4j.exceptions import ClientError
from neo4j.exceptions import DriverError
from neo4j.exceptions import Neo4jError
from neo4j.graph import Node as Neo4jNode
from neo4j.graph import Relationship as Neo4jRelationship

from graphsync.config import Neo4jConfig
from graphsync.errors import ConstraintViolation
from graphsync.errors import SchemaConflict
from graphsync.errors import StoreUnavailable
from graphsync.graph.base import StoreTransaction
from graphsync.graph.base import type_bucket
from graphsync.models.entities import PROPERTY_TYPE
from graphsync.models.graph import GraphNode
from graphsync.models.graph import GraphRelationship

logger = logging.getLogger(__name__)

_SCHEMA_ERROR_PREFIX = "Neo.ClientError.Schema."
_CONSTRAINT_FAILED = "Neo.ClientError.Schema.ConstraintValidationFailed"

# ---------------------------------------------------------------------------
# Query helpers
# ---------------------------------------------------------------------------


def _quote(name: str) -> str:
    """Backtick-quote a label, property key or relationship type."""
    if not name:
        raise ValueError("Cypher identifiers can not be empty")
    return "`" + name.replace("`", "``") + "`"


def _to_graph_node(node: Neo4jNode) -> GraphNode:
    # Values keep their driver types (neo4j.time, neo4j.spatial) so they
    # are written back to another store unchanged.
    return GraphNode(
        id=node.element_id,
        labels=frozenset(node.labels),
        properties=dict(node),
    )


def _to_graph_relationship(rel: Neo4jRelationship) -> GraphRelationship:
    return GraphRelationship(
        id=rel.element_id,
        type=rel.type,
        start_id=rel.start_node.element_id,
        end_id=rel.end_node.element_id,
    )


# ---------------------------------------------------------------------------
# Neo4jGraphStore
# ---------------------------------------------------------------------------


class Neo4jGraphStore:
    """Synchronous store handle on a Neo4j server."""

    def __init__(
        self,
        driver: Driver,
        *,
        database: str | None = None,
        name: str = "neo4j",
    ) -> None:
        self._driver = driver
        self._database = database
        self.name = name

    @classmethod
    def connect(cls, uri: str, config: Neo4jConfig | None = None) -> Neo4jGraphStore:
        """Open a driver on *uri* and verify the server answers."""
        config = config or Neo4jConfig()
        try:
            driver = GraphDatabase.driver(
                uri,
                auth=config.auth,
                connection_timeout=config.connection_timeout_seconds,
            )
        except (ValueError, DriverError) as exc:
            msg = f"Unable to open Neo4j store at {uri}: {exc}"
            raise StoreUnavailable(msg) from exc
        try:
            driver.verify_connectivity()
        except (DriverError, Neo4jError) as exc:
            driver.close()
            msg = f"Unable to open Neo4j store at {uri}: {exc}"
            raise StoreUnavailable(msg) from exc
        logger.info("Connected to Neo4j store uri=%s database=%s", uri, config.database)
        return cls(driver, database=config.database, name=uri)

    def begin(self) -> Neo4jTransaction:
        session = self._driver.session(database=self._database)
        try:
            tx = session.begin_transaction()
        except Exception:
            session.close()
            raise
        return Neo4jTransaction(session, tx)

    def close(self) -> None:
        self._driver.close()


class Neo4jTransaction(StoreTransaction):
    """One explicit Neo4j transaction bound to its own session."""

    def __init__(self, session, tx) -> None:
        self._session = session
        self._tx = tx

    # ----- Lifecycle -----

    def commit(self) -> None:
        try:
            self._tx.commit()
        finally:
            self._release()

    def rollback(self) -> None:
        if self._session is None:
            return
        try:
            if not self._tx.closed():
                self._tx.rollback()
        finally:
            self._release()

    def close(self) -> None:
        self.rollback()

    def _release(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None

    # ----- Internal helpers -----

    def _records(self, query: str, **params: object) -> list:
        return list(self._tx.run(query, **params))

    def _single(self, query: str, **params: object):
        return self._tx.run(query, **params).single()

    def _schema_rules(self, command: str, label: str) -> set[str]:
        props: set[str] = set()
        for record in self._records(
            f"{command} YIELD labelsOrTypes, properties, entityType"
        ):
            if record["entityType"] != "NODE":
                continue
            if label not in (record["labelsOrTypes"] or []):
                continue
            props.update(record["properties"] or [])
        return props

    def _run_schema(self, query: str) -> None:
        try:
            self._tx.run(query).consume()
        except ClientError as exc:
            if exc.code and exc.code.startswith(_SCHEMA_ERROR_PREFIX):
                raise SchemaConflict(exc.message or str(exc)) from exc
            raise

    # ----- Schema -----

    def list_indexes(self, label: str) -> set[str]:
        return self._schema_rules("SHOW INDEXES", label)

    def list_constraints(self, label: str) -> set[str]:
        return self._schema_rules("SHOW CONSTRAINTS", label)

    def create_index(self, label: str, prop: str) -> None:
        self._run_schema(f"CREATE INDEX FOR (n:{_quote(label)}) ON (n.{_quote(prop)})")

    def create_unique_constraint(self, label: str, prop: str) -> None:
        self._run_schema(
            f"CREATE CONSTRAINT FOR (n:{_quote(label)}) "
            f"REQUIRE n.{_quote(prop)} IS UNIQUE"
        )

    # ----- Nodes -----

    def get_node(self, node_id: str) -> GraphNode:
        record = self._single("MATCH (n) WHERE elementId(n) = $id RETURN n", id=node_id)
        if record is None:
            msg = f"No node with id {node_id!r}"
            raise KeyError(msg)
        return _to_graph_node(record["n"])

    def create_node(
        self, labels: frozenset[str], properties: dict[str, Any]
    ) -> GraphNode:
        label_clause = "".join(f":{_quote(label)}" for label in sorted(labels))
        try:
            record = self._single(
                f"CREATE (n{label_clause}) SET n = $props RETURN n",
                props=properties,
            )
        except ClientError as exc:
            if exc.code == _CONSTRAINT_FAILED:
                raise ConstraintViolation(exc.message or str(exc)) from exc
            raise
        return _to_graph_node(record["n"])

    def find_unique_node(
        self, label: str, prop: str, value: object
    ) -> GraphNode | None:
        record = self._single(
            f"MATCH (n:{_quote(label)}) WHERE n.{_quote(prop)} = $value "
            "RETURN n LIMIT 1",
            value=value,
        )
        return None if record is None else _to_graph_node(record["n"])

    def find_nodes(self, label: str, prop: str, value: object) -> list[GraphNode]:
        records = self._records(
            f"MATCH (n:{_quote(label)}) WHERE n.{_quote(prop)} = $value RETURN n",
            value=value,
        )
        return [_to_graph_node(record["n"]) for record in records]

    def snapshot_node_ids(self) -> list[str]:
        return [r["id"] for r in self._records("MATCH (n) RETURN elementId(n) AS id")]

    def count_by_type(self, prop: str | None = None) -> dict[str, int]:
        where = "" if prop is None else "WHERE n[$prop] IS NOT NULL "
        records = self._records(
            f"MATCH (n) {where}"
            f"RETURN n.{_quote(PROPERTY_TYPE)} AS type, count(n) AS count",
            prop=prop,
        )
        counts: dict[str, int] = {}
        for record in records:
            bucket = type_bucket(record["type"])
            counts[bucket] = counts.get(bucket, 0) + record["count"]
        return counts

    def count_distinct_by_type(self, prop: str) -> dict[str, int]:
        records = self._records(
            "MATCH (n) WHERE n[$prop] IS NOT NULL "
            f"RETURN n.{_quote(PROPERTY_TYPE)} AS type, "
            "count(DISTINCT n[$prop]) AS count",
            prop=prop,
        )
        counts: dict[str, int] = {}
        for record in records:
            bucket = type_bucket(record["type"])
            counts[bucket] = counts.get(bucket, 0) + record["count"]
        return counts

    def sample_values(self, prop: str, limit: int = 10) -> list[Any]:
        records = self._records(
            "MATCH (n) WHERE n[$prop] IS NOT NULL RETURN n[$prop] AS value LIMIT $limit",
            prop=prop,
            limit=limit,
        )
        return [record["value"] for record in records]

    # ----- Relationships -----

    def relationships(self, node_id: str) -> list[GraphRelationship]:
        records = self._records(
            "MATCH (n)-[r]-() WHERE elementId(n) = $id RETURN DISTINCT r",
            id=node_id,
        )
        return [_to_graph_relationship(record["r"]) for record in records]

    def are_related(self, a: str, b: str) -> bool:
        record = self._single(
            "MATCH (a)-[r]-(b) WHERE elementId(a) = $a AND elementId(b) = $b "
            "RETURN count(r) > 0 AS related",
            a=a,
            b=b,
        )
        return bool(record and record["related"])

    def create_relationship(
        self, from_id: str, to_id: str, rel_type: str
    ) -> GraphRelationship:
        record = self._single(
            "MATCH (a), (b) WHERE elementId(a) = $a AND elementId(b) = $b "
            f"CREATE (a)-[r:{_quote(rel_type)}]->(b) RETURN r",
            a=from_id,
            b=to_id,
        )
        if record is None:
            msg = f"Cannot link missing nodes {from_id!r} -> {to_id!r}"
            raise KeyError(msg)
        return _to_graph_relationship(record["r"])
