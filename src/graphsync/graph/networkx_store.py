"""File-backed graph store over a ``networkx.MultiDiGraph``.

The graph lives in memory and is persisted with networkx's node-link JSON
(``graph.json`` inside the store directory).  Node attributes hold
``labels`` (list) and ``properties`` (dict); edge attributes hold the
relationship ``type``, with the edge key doubling as relationship id.
Schema rules are kept in the graph attributes so they survive a reload.
Property values go through ``graph.values`` so temporal and spatial
values read from Neo4j survive the round trip.

Transactions keep an undo journal: ``rollback`` replays it backwards,
``commit`` discards it and writes the file.  Only one transaction may
write at a time.
"""

from __future__ import annotations

import json
import logging
import os
from collections import Counter
from collections.abc import Callable
from pathlib import Path
from typing import Any

import networkx as nx

from graphsync.errors import ConstraintViolation
from graphsync.errors import PropertyValueError
from graphsync.errors import SchemaConflict
from graphsync.errors import StoreUnavailable
from graphsync.graph.base import StoreTransaction
from graphsync.graph.base import type_bucket
from graphsync.graph.values import decode_properties
from graphsync.graph.values import encode_properties
from graphsync.graph.values import encode_value
from graphsync.models.entities import PROPERTY_TYPE
from graphsync.models.graph import GraphNode
from graphsync.models.graph import GraphRelationship

logger = logging.getLogger(__name__)

GRAPH_FILE = "graph.json"

_INDEXES = "indexes"
_CONSTRAINTS = "constraints"
_NEXT_NODE_ID = "next_node_id"
_NEXT_REL_ID = "next_rel_id"


def _copy_value(value: Any) -> Any:
    # Exact types only: Duration and Point are tuple subclasses.
    if type(value) in (list, tuple):
        return list(value)
    return value


def _copy_props(properties: dict[str, Any]) -> dict[str, Any]:
    return {k: _copy_value(v) for k, v in properties.items()}


class NetworkXGraphStore:
    """In-memory property graph with optional on-disk persistence."""

    def __init__(
        self,
        graph: nx.MultiDiGraph | None = None,
        *,
        path: Path | None = None,
        name: str = "memory",
    ) -> None:
        self._graph = graph if graph is not None else nx.MultiDiGraph()
        attrs = self._graph.graph
        attrs.setdefault(_INDEXES, [])
        attrs.setdefault(_CONSTRAINTS, [])
        attrs.setdefault(_NEXT_NODE_ID, 0)
        attrs.setdefault(_NEXT_REL_ID, 0)
        self._path = path
        self._writer: NetworkXTransaction | None = None
        self._closed = False
        self.name = name

    # ----- Construction -----

    @classmethod
    def open(cls, directory: Path | str, *, name: str | None = None) -> NetworkXGraphStore:
        """Load the store persisted in *directory*."""
        directory = Path(directory)
        graph_file = directory / GRAPH_FILE
        if not graph_file.is_file():
            msg = (
                f"The {directory} folder is not a valid graph store: "
                f"{GRAPH_FILE} is missing"
            )
            raise StoreUnavailable(msg)
        try:
            data = json.loads(graph_file.read_text(encoding="utf-8"))
            for node in data["nodes"]:
                node["properties"] = decode_properties(node.get("properties", {}))
            graph = nx.node_link_graph(
                data, directed=True, multigraph=True, edges="edges"
            )
        except (OSError, ValueError, KeyError, TypeError, PropertyValueError) as exc:
            msg = f"Unable to load graph store at {directory}: {exc}"
            raise StoreUnavailable(msg) from exc
        logger.info(
            "Opened graph store path=%s nodes=%d relationships=%d",
            directory,
            graph.number_of_nodes(),
            graph.number_of_edges(),
        )
        return cls(graph, path=directory, name=name or directory.name)

    @classmethod
    def create(cls, directory: Path | str, *, name: str | None = None) -> NetworkXGraphStore:
        """Create an empty store persisted in *directory*."""
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        store = cls(path=directory, name=name or directory.name)
        store.save()
        return store

    # ----- Store API -----

    @property
    def path(self) -> Path | None:
        return self._path

    @property
    def graph(self) -> nx.MultiDiGraph:
        return self._graph

    def begin(self) -> NetworkXTransaction:
        if self._closed:
            msg = f"Graph store {self.name!r} is closed"
            raise RuntimeError(msg)
        return NetworkXTransaction(self)

    def close(self) -> None:
        if self._writer is not None:
            self._writer.rollback()
        self._closed = True

    def save(self) -> None:
        """Write the graph to ``graph.json`` (no-op for unpersisted stores)."""
        if self._path is None:
            return
        data = nx.node_link_data(self._graph, edges="edges")
        for node in data["nodes"]:
            node["properties"] = encode_properties(node.get("properties", {}))
        target = self._path / GRAPH_FILE
        tmp = target.with_suffix(".json.tmp")
        tmp.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp, target)

    # ----- Internal helpers used by transactions -----

    def _claim_writer(self, tx: NetworkXTransaction) -> None:
        if self._writer is None:
            self._writer = tx
        elif self._writer is not tx:
            msg = f"Graph store {self.name!r} already has an open write transaction"
            raise RuntimeError(msg)

    def _release_writer(self, tx: NetworkXTransaction) -> None:
        if self._writer is tx:
            self._writer = None

    def _next_id(self, counter: str) -> str:
        value = self._graph.graph[counter]
        self._graph.graph[counter] = value + 1
        return str(value)

    def _to_node(self, node_id: str) -> GraphNode:
        data = self._graph.nodes[node_id]
        return GraphNode(
            id=node_id,
            labels=frozenset(data.get("labels", [])),
            properties=_copy_props(data.get("properties", {})),
        )


class NetworkXTransaction(StoreTransaction):
    """Journaled unit of work on a ``NetworkXGraphStore``."""

    def __init__(self, store: NetworkXGraphStore) -> None:
        self._store = store
        self._graph = store.graph
        self._undo: list[Callable[[], None]] = []
        self._open = True

    # ----- Lifecycle -----

    def commit(self) -> None:
        self._ensure_open()
        if self._undo:
            self._store.save()
        self._undo.clear()
        self._finish()

    def rollback(self) -> None:
        if not self._open:
            return
        for undo in reversed(self._undo):
            undo()
        if self._undo:
            logger.debug(
                "Rolled back %d mutations on store=%s", len(self._undo), self._store.name
            )
        self._undo.clear()
        self._finish()

    def close(self) -> None:
        self.rollback()

    def _finish(self) -> None:
        self._open = False
        self._store._release_writer(self)

    def _ensure_open(self) -> None:
        if not self._open:
            raise RuntimeError("Transaction is already closed")

    def _begin_write(self) -> None:
        self._ensure_open()
        self._store._claim_writer(self)

    def _journal(self, undo: Callable[[], None]) -> None:
        self._undo.append(undo)

    # ----- Schema -----

    def _rules(self, kind: str, label: str) -> set[str]:
        return {prop for lbl, prop in self._graph.graph[kind] if lbl == label}

    def list_indexes(self, label: str) -> set[str]:
        self._ensure_open()
        # Uniqueness constraints are backed by an index, as in Neo4j.
        return self._rules(_INDEXES, label) | self._rules(_CONSTRAINTS, label)

    def list_constraints(self, label: str) -> set[str]:
        self._ensure_open()
        return self._rules(_CONSTRAINTS, label)

    def create_index(self, label: str, prop: str) -> None:
        self._begin_write()
        if prop in self.list_indexes(label):
            msg = f"An equivalent index already exists for :{label}({prop})"
            raise SchemaConflict(msg)
        self._add_rule(_INDEXES, label, prop)

    def create_unique_constraint(self, label: str, prop: str) -> None:
        self._begin_write()
        if prop in self.list_indexes(label):
            msg = f"An index or constraint already exists for :{label}({prop})"
            raise SchemaConflict(msg)
        values: set[str] = set()
        for node_id in self._nodes_with(label, prop):
            value = json.dumps(
                encode_value(self._graph.nodes[node_id]["properties"][prop]),
                sort_keys=True,
            )
            if value in values:
                msg = f"Existing :{label} nodes share {prop}={value}"
                raise ConstraintViolation(msg)
            values.add(value)
        self._add_rule(_CONSTRAINTS, label, prop)

    def _add_rule(self, kind: str, label: str, prop: str) -> None:
        rules = self._graph.graph[kind]
        entry = [label, prop]
        rules.append(entry)
        self._journal(lambda: rules.remove(entry))

    # ----- Nodes -----

    def _nodes_with(self, label: str, prop: str) -> list[str]:
        return [
            node_id
            for node_id, data in self._graph.nodes(data=True)
            if label in data.get("labels", ()) and prop in data.get("properties", {})
        ]

    def get_node(self, node_id: str) -> GraphNode:
        self._ensure_open()
        if node_id not in self._graph:
            msg = f"No node with id {node_id!r} in store {self._store.name!r}"
            raise KeyError(msg)
        return self._store._to_node(node_id)

    def create_node(
        self, labels: frozenset[str], properties: dict[str, Any]
    ) -> GraphNode:
        self._begin_write()
        # Raises PropertyValueError before anything is written.
        encode_properties(properties)
        for label in labels:
            for prop in self._rules(_CONSTRAINTS, label):
                if prop in properties and self.find_nodes(label, prop, properties[prop]):
                    msg = (
                        f"Node :{label} with {prop}={properties[prop]!r} already exists"
                    )
                    raise ConstraintViolation(msg)
        node_id = self._store._next_id(_NEXT_NODE_ID)
        self._graph.add_node(
            node_id,
            labels=sorted(labels),
            properties=_copy_props(properties),
        )
        self._journal(lambda: self._graph.remove_node(node_id))
        return self._store._to_node(node_id)

    def find_unique_node(
        self, label: str, prop: str, value: object
    ) -> GraphNode | None:
        matches = self.find_nodes(label, prop, value)
        return matches[0] if matches else None

    def find_nodes(self, label: str, prop: str, value: object) -> list[GraphNode]:
        self._ensure_open()
        return [
            self._store._to_node(node_id)
            for node_id in self._nodes_with(label, prop)
            if self._graph.nodes[node_id]["properties"][prop] == value
        ]

    def snapshot_node_ids(self) -> list[str]:
        self._ensure_open()
        return list(self._graph.nodes)

    def count_by_type(self, prop: str | None = None) -> dict[str, int]:
        self._ensure_open()
        counts: Counter[str] = Counter()
        for _, data in self._graph.nodes(data=True):
            props = data.get("properties", {})
            if prop is not None and prop not in props:
                continue
            counts[type_bucket(props.get(PROPERTY_TYPE))] += 1
        return dict(counts)

    def count_distinct_by_type(self, prop: str) -> dict[str, int]:
        self._ensure_open()
        seen: dict[str, set[str]] = {}
        for _, data in self._graph.nodes(data=True):
            props = data.get("properties", {})
            if prop not in props:
                continue
            value = json.dumps(encode_value(props[prop]), sort_keys=True)
            seen.setdefault(type_bucket(props.get(PROPERTY_TYPE)), set()).add(value)
        return {bucket: len(values) for bucket, values in seen.items()}

    def sample_values(self, prop: str, limit: int = 10) -> list[Any]:
        self._ensure_open()
        samples: list[Any] = []
        for _, data in self._graph.nodes(data=True):
            if len(samples) >= limit:
                break
            props = data.get("properties", {})
            if prop in props:
                samples.append(_copy_value(props[prop]))
        return samples

    # ----- Relationships -----

    def relationships(self, node_id: str) -> list[GraphRelationship]:
        self._ensure_open()
        if node_id not in self._graph:
            msg = f"No node with id {node_id!r} in store {self._store.name!r}"
            raise KeyError(msg)
        seen: set[str] = set()
        rels: list[GraphRelationship] = []
        edges = [
            *self._graph.out_edges(node_id, keys=True, data=True),
            *self._graph.in_edges(node_id, keys=True, data=True),
        ]
        for start, end, key, data in edges:
            if key in seen:
                continue
            seen.add(key)
            rels.append(
                GraphRelationship(id=key, type=data["type"], start_id=start, end_id=end)
            )
        return rels

    def are_related(self, a: str, b: str) -> bool:
        self._ensure_open()
        return self._graph.has_edge(a, b) or self._graph.has_edge(b, a)

    def create_relationship(
        self, from_id: str, to_id: str, rel_type: str
    ) -> GraphRelationship:
        self._begin_write()
        for node_id in (from_id, to_id):
            if node_id not in self._graph:
                msg = f"No node with id {node_id!r} in store {self._store.name!r}"
                raise KeyError(msg)
        rel_id = self._store._next_id(_NEXT_REL_ID)
        self._graph.add_edge(from_id, to_id, key=rel_id, type=rel_type)
        self._journal(lambda: self._graph.remove_edge(from_id, to_id, key=rel_id))
        return GraphRelationship(id=rel_id, type=rel_type, start_id=from_id, end_id=to_id)
