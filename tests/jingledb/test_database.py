# SPDX-License-Identifier: MIT
"""Tests for the graph database client."""

import pytest
from neo4j.exceptions import ServiceUnavailable

from jingledb.config import settings


@pytest.fixture
def driver(mocker):
    """Patch the Neo4j driver factory; sessions run work against a fake transaction."""
    driver = mocker.MagicMock()
    mocker.patch("jingledb.database.GraphDatabase.driver", return_value=driver)

    record = mocker.MagicMock()
    record.data.return_value = {"id": "j1a2b3c4d"}

    result = mocker.MagicMock()
    result.__iter__.return_value = [record]

    tx = mocker.MagicMock()
    tx.run.return_value = result

    session = driver.session.return_value.__enter__.return_value
    session.execute_read.side_effect = lambda work: work(tx)
    session.execute_write.side_effect = lambda work: work(tx)

    driver.tx = tx
    driver.active_session = session
    return driver


@pytest.fixture
def no_sleep(mocker):
    """Skip tenacity backoff waits."""
    return mocker.patch("tenacity.nap.time.sleep")


class TestGraphClient:
    """Query execution."""

    def test_driver_configuration(self, driver):
        from jingledb.database import GraphDatabase, GraphClient

        GraphClient("bolt://db:7687", "neo4j", "secret", max_connection_pool_size=5, connection_timeout=2.0)

        GraphDatabase.driver.assert_called_once_with(
            "bolt://db:7687",
            auth=("neo4j", "secret"),
            max_connection_pool_size=5,
            connection_timeout=2.0,
        )

    def test_read_query_returns_dicts(self, driver):
        from jingledb.database import GraphClient

        client = GraphClient("bolt://db:7687", "neo4j", "secret")
        rows = client.execute_query("MATCH (j:Jingle) RETURN j.id AS id", {"limit": 1})

        assert rows == [{"id": "j1a2b3c4d"}]
        driver.tx.run.assert_called_once_with("MATCH (j:Jingle) RETURN j.id AS id", {"limit": 1})
        driver.active_session.execute_read.assert_called_once()
        driver.active_session.execute_write.assert_not_called()

    def test_write_query_uses_write_transaction(self, driver):
        from jingledb.database import GraphClient, WRITE_ACCESS

        client = GraphClient("bolt://db:7687", "neo4j", "secret", database="jingles")
        client.execute_query("CREATE (n:Jingle {id: $id})", {"id": "j1"}, write=True)

        driver.active_session.execute_write.assert_called_once()
        driver.session.assert_called_with(database="jingles", default_access_mode=WRITE_ACCESS)

    def test_execute_write(self, driver):
        from jingledb.database import GraphClient

        client = GraphClient("bolt://db:7687", "neo4j", "secret")
        assert client.execute_write("CREATE INDEX x IF NOT EXISTS FOR (n:Jingle) ON n.id") is None
        driver.tx.run.return_value.consume.assert_called_once()

    def test_retries_transient_errors(self, driver, no_sleep):
        from jingledb.database import GraphClient

        tx = driver.tx
        tx.run.side_effect = [ServiceUnavailable("paused"), tx.run.return_value]
        client = GraphClient("bolt://db:7687", "neo4j", "secret")

        assert client.execute_query("RETURN 1") == [{"id": "j1a2b3c4d"}]
        assert tx.run.call_count == 2

    def test_gives_up_after_max_retries(self, driver, no_sleep):
        from jingledb.database import GraphClient

        driver.tx.run.side_effect = ServiceUnavailable("paused")
        client = GraphClient("bolt://db:7687", "neo4j", "secret")

        with pytest.raises(ServiceUnavailable):
            client.execute_query("RETURN 1")
        assert driver.tx.run.call_count == settings.neo4j.retry_max

    def test_non_transient_errors_fail_fast(self, driver, no_sleep):
        from jingledb.database import GraphClient

        driver.tx.run.side_effect = RuntimeError("syntax error")
        client = GraphClient("bolt://db:7687", "neo4j", "secret")

        with pytest.raises(RuntimeError):
            client.execute_query("RETRUN 1")
        assert driver.tx.run.call_count == 1

    def test_verify_connection(self, driver, no_sleep):
        from jingledb.database import GraphClient

        client = GraphClient("bolt://db:7687", "neo4j", "secret")
        assert client.verify_connection() is True

        driver.tx.run.side_effect = RuntimeError("down")
        assert client.verify_connection() is False

    def test_context_manager_closes_driver(self, driver):
        from jingledb.database import GraphClient

        with GraphClient("bolt://db:7687", "neo4j", "secret"):
            pass
        driver.close.assert_called_once()


class TestCreateClient:
    """Building a client from settings."""

    def test_requires_password(self, mocker):
        from jingledb.database import GraphConfigurationError, create_client

        mocker.patch.object(settings.neo4j, "password", "")
        with pytest.raises(GraphConfigurationError, match="NEO4J_PASSWORD"):
            create_client()

    def test_uses_settings(self, driver):
        from jingledb.database import create_client

        client = create_client()
        assert client.uri == settings.neo4j.uri
        assert client.database == settings.neo4j.database
