"""
PostgreSQL client wrapper.

Connection pooling via psycopg2 ``SimpleConnectionPool``; rows are returned as
plain dicts. Driver failures are logged once and re-raised as ``PostgresError``.
"""

import math
import time
from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar

import psycopg2
from psycopg2.extras import RealDictCursor
from psycopg2.pool import SimpleConnectionPool

from fbo_lambda.clients.base import BaseClient
from fbo_lambda.config.app_config import PostgresConfig
from fbo_lambda.handlers.utils.observability import tracer
from fbo_lambda.utils.errors import PostgresError
from fbo_lambda.utils.helpers import truncate_string
from fbo_lambda.utils.logger import StructuredLogger

T = TypeVar('T')

QueryParams = Optional[Sequence[Any]]

_LOGGED_QUERY_LENGTH = 100


def _run_query(connection: Any, sql: str, params: QueryParams) -> List[Dict[str, Any]]:
    with connection.cursor(cursor_factory=RealDictCursor) as cursor:
        cursor.execute(sql, params)
        # Statements without a result set (INSERT without RETURNING, DDL) have no description
        if cursor.description is None:
            return []
        return [dict(row) for row in cursor.fetchall()]


class PostgresTransactionClient:
    """Query interface bound to the connection of an open transaction."""

    def __init__(self, connection: Any, logger: StructuredLogger) -> None:
        self._connection = connection
        self.logger = logger

    @property
    def is_connected(self) -> bool:
        return True

    def connect(self) -> None:
        pass

    def disconnect(self) -> None:
        # The owning transaction returns the connection to the pool
        pass

    def query(self, sql: str, params: QueryParams = None) -> List[Dict[str, Any]]:
        start = time.monotonic()
        try:
            rows = _run_query(self._connection, sql, params)
        except psycopg2.Error as exc:
            self.logger.error('PostgreSQL transaction query failed', exc, {
                'query': truncate_string(sql, _LOGGED_QUERY_LENGTH),
            })
            raise PostgresError('Transaction query execution failed', details={'error': exc, 'query': sql}) from exc

        self.logger.debug('PostgreSQL transaction query executed', {
            'query': truncate_string(sql, _LOGGED_QUERY_LENGTH),
            'rowCount': len(rows),
            'duration': int((time.monotonic() - start) * 1000),
        })
        return rows

    def query_one(self, sql: str, params: QueryParams = None) -> Optional[Dict[str, Any]]:
        rows = self.query(sql, params)
        return rows[0] if rows else None

    def transaction(self, callback: Callable[['PostgresTransactionClient'], T]) -> T:
        # Nested transactions run on the already open transaction
        return callback(self)


class PostgresClient(BaseClient):
    """Pooled PostgreSQL access for queries and transactions."""

    service_name = 'PostgresClient'

    def __init__(self, postgres_config: PostgresConfig, logger: Optional[StructuredLogger] = None) -> None:
        super().__init__(logger)
        self.config = postgres_config
        self._pool: Optional[SimpleConnectionPool] = None

    @property
    def is_connected(self) -> bool:
        return self._pool is not None

    def connect(self) -> None:
        """
        Create the connection pool and verify it with ``SELECT 1``.

        Raises:
            PostgresError: If the pool cannot be created or the check fails
        """
        if self._pool is not None:
            self.logger.debug('PostgreSQL pool already exists')
            return

        pool = None
        try:
            pool = SimpleConnectionPool(
                minconn=1,
                maxconn=self.config.max_connections,
                dsn=self.config.uri,
                connect_timeout=max(1, math.ceil(self.config.connection_timeout_ms / 1000)),
                options=f'-c idle_in_transaction_session_timeout={self.config.idle_timeout_ms}',
            )
            connection = pool.getconn()
            try:
                _run_query(connection, 'SELECT 1', None)
                connection.rollback()
            finally:
                pool.putconn(connection)
        except psycopg2.Error as exc:
            if pool is not None:
                pool.closeall()
            self.logger.error('PostgreSQL connection failed', exc)
            raise PostgresError('Failed to connect to PostgreSQL', details={'error': exc}) from exc

        self._pool = pool
        self.logger.info('PostgreSQL connection pool established', {
            'maxConnections': self.config.max_connections,
        })

    def disconnect(self) -> None:
        if self._pool is None:
            return
        try:
            self._pool.closeall()
        except psycopg2.Error as exc:
            self.logger.error('PostgreSQL disconnect failed', exc)
            raise PostgresError('Failed to close PostgreSQL connection', details={'error': exc}) from exc
        finally:
            self._pool = None
        self.logger.info('PostgreSQL connection pool closed')

    def _acquire(self) -> Any:
        self.connect()
        try:
            return self._pool.getconn()
        except psycopg2.Error as exc:
            self.logger.error('PostgreSQL connection checkout failed', exc)
            raise PostgresError('Failed to acquire PostgreSQL connection', details={'error': exc}) from exc

    def _rollback(self, connection: Any) -> None:
        # A connection dropped by the server also fails to roll back
        try:
            connection.rollback()
            self.logger.debug('PostgreSQL transaction rolled back')
        except psycopg2.Error as exc:
            self.logger.error('PostgreSQL rollback failed', exc)

    @tracer.capture_method
    def query(self, sql: str, params: QueryParams = None) -> List[Dict[str, Any]]:
        """
        Execute a statement on a pooled connection and commit it.

        Args:
            sql: SQL text with ``%s`` placeholders
            params: Positional parameters

        Returns:
            Result rows as dicts; empty for statements without a result set

        Raises:
            PostgresError: If the statement fails
        """
        connection = self._acquire()
        start = time.monotonic()
        try:
            rows = _run_query(connection, sql, params)
            connection.commit()
        except psycopg2.Error as exc:
            self._rollback(connection)
            self.logger.error('PostgreSQL query failed', exc, {
                'query': truncate_string(sql, _LOGGED_QUERY_LENGTH),
                'params': len(params or ()),
            })
            raise PostgresError('Query execution failed', details={'error': exc, 'query': sql}) from exc
        finally:
            self._pool.putconn(connection)

        self.logger.debug('PostgreSQL query executed', {
            'query': truncate_string(sql, _LOGGED_QUERY_LENGTH),
            'params': len(params or ()),
            'rowCount': len(rows),
            'duration': int((time.monotonic() - start) * 1000),
        })
        return rows

    def query_one(self, sql: str, params: QueryParams = None) -> Optional[Dict[str, Any]]:
        """Execute a statement and return its first row, or None."""
        rows = self.query(sql, params)
        return rows[0] if rows else None

    @tracer.capture_method
    def transaction(self, callback: Callable[[PostgresTransactionClient], T]) -> T:
        """
        Run ``callback`` inside BEGIN/COMMIT on a single pooled connection.

        Any exception from the callback rolls the transaction back and is raised
        as ``PostgresError``; a ``PostgresError`` raised by a query inside the
        callback is re-raised as is.
        """
        connection = self._acquire()
        transaction_client = PostgresTransactionClient(connection, self.logger)
        try:
            self.logger.debug('PostgreSQL transaction started')
            result = callback(transaction_client)
            connection.commit()
            self.logger.debug('PostgreSQL transaction committed')
            return result
        except Exception as exc:
            self._rollback(connection)
            self.logger.error('PostgreSQL transaction failed', exc)
            if isinstance(exc, PostgresError):
                raise
            raise PostgresError('Transaction failed', details={'error': exc}) from exc
        finally:
            self._pool.putconn(connection)
