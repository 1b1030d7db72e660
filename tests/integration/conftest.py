"""Integration fixtures: a session-scoped Neo4j Community container.

Each test starts from an empty database with no user-defined indexes or
constraints.
"""

from __future__ import annotations

import logging
import time

import pytest
from neo4j import GraphDatabase
from testcontainers.core.container import DockerContainer

from graphsync.graph.store import Neo4jGraphStore

logger = logging.getLogger(__name__)


@pytest.fixture(scope="session")
def neo4j_container():
    """Spin up a Neo4j Community container and yield its bolt URI.

    Session-scoped: one container for the entire test run.
    """
    container = (
        DockerContainer("neo4j:community")
        .with_exposed_ports(7687)
        .with_env("NEO4J_AUTH", "none")
    )
    with container as c:
        host = c.get_container_host_ip()
        port = c.get_exposed_port(7687)
        uri = f"bolt://{host}:{port}"

        driver = GraphDatabase.driver(uri)
        max_attempts = 30
        try:
            for attempt in range(max_attempts):
                try:
                    driver.verify_connectivity()
                    break
                except Exception as exc:
                    if attempt == max_attempts - 1:
                        raise
                    logger.debug(
                        "Neo4j not ready (attempt %d/%d): %s",
                        attempt + 1,
                        max_attempts,
                        exc,
                    )
                    time.sleep(1)
        finally:
            driver.close()
        yield uri


@pytest.fixture()
def neo4j_driver(neo4j_container):
    """Yield a Neo4j driver connected to the test container."""
    driver = GraphDatabase.driver(neo4j_container)
    yield driver
    driver.close()


@pytest.fixture(autouse=True)
def clean_neo4j(neo4j_driver):
    """Wipe data and schema rules before each test."""
    with neo4j_driver.session() as session:
        session.run("MATCH (n) DETACH DELETE n").consume()
        for record in list(session.run("SHOW CONSTRAINTS YIELD name")):
            session.run(f"DROP CONSTRAINT `{record['name']}`").consume()
        for record in list(
            session.run("SHOW INDEXES YIELD name, type WHERE type <> 'LOOKUP'")
        ):
            session.run(f"DROP INDEX `{record['name']}`").consume()
    yield


@pytest.fixture()
def neo4j_store(neo4j_container):
    """Yield a ``Neo4jGraphStore`` on the test container."""
    store = Neo4jGraphStore.connect(neo4j_container)
    yield store
    store.close()
