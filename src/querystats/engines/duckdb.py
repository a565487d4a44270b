"""
src.querystats.engines.duckdb
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

Concrete implementation of :class:`src.querystats.engines.base.BaseEngine`
for an embedded DuckDB database.  Perfect for unit-tests and local
experimentation against hand-built copies of the statistics views.

Highlights
----------
* Accepts either **in-memory** (default) or on-disk database file.
* Every query runs on its own duplicated connection (``conn.cursor()``),
  so concurrent collectors never share a cursor.
* In-flight queries are aborted with ``DuckDBPyConnection.interrupt()``.
"""

from __future__ import annotations

import contextlib
from pathlib import Path

import duckdb
import pandas as pd

from src.querystats.engines.base import BaseEngine


class DuckDBEngine(BaseEngine):
    """
    Parameters
    ----------
    database : str | Path, optional
        Filepath for a persistent database, or ``":memory:"`` (default)
        for an ephemeral one.
    read_only : bool, default False
        Open the database in read-only mode (ignored for in-memory DBs).
    """

    def __init__(self, database: str | Path = ":memory:", *, read_only: bool = False):
        self._dialect = "duckdb"
        self._conn = duckdb.connect(str(database), read_only=read_only)

    # ------------------------------------------------------------------ #
    # BaseEngine interface                                               #
    # ------------------------------------------------------------------ #
    def _open_cursor(self) -> duckdb.DuckDBPyConnection:
        return self._conn.cursor()

    def _interrupt(self, cursor: duckdb.DuckDBPyConnection) -> None:
        cursor.interrupt()

    def get_dialect(self) -> str:  # noqa: D401
        return self._dialect

    def close(self):  # noqa: D401
        with contextlib.suppress(duckdb.Error):
            self._conn.close()

    # ------------------------------------------------------------------ #
    # Convenience helpers                                                #
    # ------------------------------------------------------------------ #
    @property
    def connection(self) -> duckdb.DuckDBPyConnection:  # pragma: no cover
        """Expose the primary DuckDB connection."""
        return self._conn

    def append_dataframe(self, table: str, df: pd.DataFrame) -> None:
        """Insert the rows of *df* into the existing *table*.

        Column order of *df* must match the table definition; DuckDB casts
        each column to the declared type and keeps ``None`` as ``NULL``.
        """
        self._conn.register("_append_frame", df)
        try:
            self._conn.execute(f"INSERT INTO {table} SELECT * FROM _append_frame")
        finally:
            self._conn.unregister("_append_frame")

    def __repr__(self) -> str:  # pragma: no cover
        return "<DuckDBEngine>"
