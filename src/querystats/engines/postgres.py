"""
src.querystats.engines.postgres
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

:class:`BaseEngine` over a single psycopg2 connection.

The engine opens its connection lazily in read-only autocommit mode and
reopens it if the server closed it between scrapes.  Interrupting a query
sends a cancel request on a separate socket (``connection.cancel()``),
which makes the blocked ``execute`` raise
:class:`psycopg2.extensions.QueryCanceledError`.
"""

from __future__ import annotations

import threading
from typing import Optional

import psycopg2
import psycopg2.extensions

from src.querystats.engines.base import BaseEngine


class PostgresEngine(BaseEngine):
    def __init__(
        self,
        dsn: str,
        *,
        connect_timeout: int = 5,
        application_name: str = "querystats",
    ):
        self._dsn = dsn
        self._connect_timeout = connect_timeout
        self._application_name = application_name
        self._conn: Optional[psycopg2.extensions.connection] = None
        self._lock = threading.Lock()

    def _connection(self) -> psycopg2.extensions.connection:
        with self._lock:
            if self._conn is None or self._conn.closed:
                conn = psycopg2.connect(
                    self._dsn,
                    connect_timeout=self._connect_timeout,
                    application_name=self._application_name,
                )
                conn.set_session(readonly=True, autocommit=True)
                self._conn = conn
            return self._conn

    # ------------------------------------------------------------------ #
    # BaseEngine interface                                               #
    # ------------------------------------------------------------------ #
    def _open_cursor(self):
        return self._connection().cursor()

    def _interrupt(self, cursor) -> None:
        cursor.connection.cancel()

    def get_dialect(self) -> str:  # noqa: D401
        return "postgres"

    def close(self) -> None:  # noqa: D401
        with self._lock:
            if self._conn is not None and not self._conn.closed:
                self._conn.close()
            self._conn = None
