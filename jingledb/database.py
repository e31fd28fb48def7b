"""
Graph database client for the jingle catalogue.

Thin wrapper over the official Neo4j driver: one driver (connection pool) per
process, one session per query, managed read/write transactions, and retries
on transient connection failures.
"""

from functools import lru_cache
from typing import Any, Optional

from loguru import logger
from neo4j import GraphDatabase, READ_ACCESS, WRITE_ACCESS
from neo4j.exceptions import ServiceUnavailable, SessionExpired, TransientError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from jingledb.config import settings


TRANSIENT_ERRORS = (ServiceUnavailable, SessionExpired, TransientError)


class GraphConfigurationError(Exception):
    """Raised when the graph connection is not configured."""
    pass


def _log_retry(retry_state) -> None:
    logger.warning(
        f"Transient database error (attempt {retry_state.attempt_number}), "
        f"retrying: {retry_state.outcome.exception()}"
    )


_retry_transient = retry(
    stop=stop_after_attempt(settings.neo4j.retry_max),
    wait=wait_exponential(multiplier=settings.neo4j.retry_initial_delay, min=1, max=60),
    retry=retry_if_exception_type(TRANSIENT_ERRORS),
    before_sleep=_log_retry,
    reraise=True,
)


class GraphClient:
    """
    Neo4j client used by the schema tooling and importers.

    Non-transient errors (syntax errors, constraint violations) fail fast.
    """

    def __init__(
        self,
        uri: str,
        user: str,
        password: str,
        database: Optional[str] = None,
        max_connection_pool_size: int = 100,
        connection_timeout: float = 30.0,
    ):
        self.uri = uri
        self.database = database
        self.driver = GraphDatabase.driver(
            uri,
            auth=(user, password),
            max_connection_pool_size=max_connection_pool_size,
            connection_timeout=connection_timeout,
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    @_retry_transient
    def execute_query(
        self,
        cypher: str,
        params: Optional[dict[str, Any]] = None,
        write: bool = False,
    ) -> list[dict[str, Any]]:
        """
        Run a query in a managed transaction.

        Args:
            cypher: Cypher statement
            params: Query parameters
            write: Run in a write transaction instead of a read transaction

        Returns:
            One dict per result record, keyed by the RETURN aliases
        """
        params = params or {}

        def work(tx):
            result = tx.run(cypher, params)
            return [record.data() for record in result]

        access_mode = WRITE_ACCESS if write else READ_ACCESS
        with self.driver.session(database=self.database, default_access_mode=access_mode) as session:
            if write:
                return session.execute_write(work)
            return session.execute_read(work)

    @_retry_transient
    def execute_write(self, cypher: str, params: Optional[dict[str, Any]] = None) -> None:
        """Run a write statement, discarding any result."""
        params = params or {}

        def work(tx):
            tx.run(cypher, params).consume()

        with self.driver.session(database=self.database, default_access_mode=WRITE_ACCESS) as session:
            session.execute_write(work)

    def verify_connection(self) -> bool:
        """Check that the database answers a trivial query."""
        try:
            self.execute_query("RETURN 1 AS ok")
            return True
        except Exception as e:
            logger.error(f"Database connection failed: {e}")
            return False

    def close(self) -> None:
        self.driver.close()


def create_client() -> GraphClient:
    """Build a client from NEO4J_* settings."""
    neo4j_settings = settings.neo4j
    if not neo4j_settings.password:
        raise GraphConfigurationError("NEO4J_PASSWORD must be set in environment variables")

    return GraphClient(
        uri=neo4j_settings.uri,
        user=neo4j_settings.user,
        password=neo4j_settings.password,
        database=neo4j_settings.database,
        max_connection_pool_size=neo4j_settings.max_connection_pool_size,
        connection_timeout=neo4j_settings.connection_timeout,
    )


@lru_cache()
def get_client() -> GraphClient:
    """
    Get the process-wide client.

    Uses lru_cache so the driver and its connection pool are created once.
    """
    return create_client()
