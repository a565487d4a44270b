"""
src.querystats.engines.base
~~~~~~~~~~~~~~~~~~~~~~~~~~~

Minimal contract every database engine must satisfy.
Keeps the API surface tiny: new back-ends only need to open a DB-API
cursor, interrupt it, and report their sqlglot dialect, plus a `close()`.

Query content is supplied as either a raw SQL string or a sqlglot
Expression – the engine stringifies it in its own dialect.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Iterator, Optional, Tuple

from sqlglot import exp

from src.querystats.context import ScrapeContext
from src.querystats.errors import ScrapeCancelled


class RowCursor:
    """Forward-only view over an executed DB-API cursor.

    Rows are pulled one at a time with ``fetchone``.  The underlying cursor
    is released exactly once, by :meth:`close` or by leaving the ``with``
    block, whichever comes first.
    """

    def __init__(self, cursor: Any, release: Callable[[Any], None]):
        self._cursor = cursor
        self._release = release
        self._closed = False

    @property
    def column_names(self) -> Tuple[str, ...]:
        description = self._cursor.description or ()
        return tuple(col[0] for col in description)

    @property
    def closed(self) -> bool:
        return self._closed

    def __iter__(self) -> Iterator[Tuple[Any, ...]]:
        while not self._closed:
            row = self._cursor.fetchone()
            if row is None:
                return
            yield tuple(row)

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._release(self._cursor)

    def __enter__(self) -> "RowCursor":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class BaseEngine(ABC):
    """Abstract base for all statistics-source engines."""

    # ------------------------------------------------------------------ #
    # Mandatory hooks                                                    #
    # ------------------------------------------------------------------ #
    @abstractmethod
    def _open_cursor(self) -> Any:
        """Return a fresh DB-API cursor owned by the caller."""

    @abstractmethod
    def _interrupt(self, cursor: Any) -> None:
        """Abort the statement currently running on *cursor*."""

    @abstractmethod
    def get_dialect(self) -> str:  # noqa: D401
        """Return the SQL dialect identifier understood by sqlglot."""

    @abstractmethod
    def close(self) -> None:  # noqa: D401
        """Clean up all open resources (connections, cursors, etc.)."""

    # ------------------------------------------------------------------ #
    # Optional hook                                                      #
    # ------------------------------------------------------------------ #
    def _release_cursor(self, cursor: Any) -> None:
        cursor.close()

    # ------------------------------------------------------------------ #
    # Public API                                                         #
    # ------------------------------------------------------------------ #
    def render(self, sql: str | exp.Expression) -> str:
        if isinstance(sql, exp.Expression):
            return sql.sql(dialect=self.get_dialect(), pretty=False)
        return str(sql)

    def execute(self, sql: str | exp.Expression, *, ctx: Optional[ScrapeContext] = None) -> RowCursor:
        """
        Run *sql* and return a :class:`RowCursor` over its result.

        The statement is bound to *ctx*: cancelling the context while the
        statement runs interrupts it and raises :class:`ScrapeCancelled`
        chained to the driver error.  Any other driver error propagates
        unchanged.  The cursor is released on every failure path; on
        success the caller owns the returned :class:`RowCursor`.
        """
        ctx = ctx or ScrapeContext()
        text = self.render(sql)
        ctx.check()
        cursor = self._open_cursor()
        try:
            with ctx.on_cancel(lambda: self._interrupt(cursor)):
                cursor.execute(text)
        except ScrapeCancelled:
            self._release_cursor(cursor)
            raise
        except Exception as exc:
            self._release_cursor(cursor)
            if ctx.cancelled:
                raise ScrapeCancelled(f"query interrupted: {ctx.reason}") from exc
            raise
        return RowCursor(cursor, self._release_cursor)

    # ------------------------------------------------------------------ #
    # Repr                                                               #
    # ------------------------------------------------------------------ #
    def __repr__(self) -> str:  # pragma: no cover
        return f"<{self.__class__.__name__} dialect={self.get_dialect()!r}>"
