"""
src.querystats.stats.decoder
~~~~~~~~~~~~~~~~~~~~~~~~~~~~

Turn one nullable result row into a :class:`StatementRecord`.

NULL handling is uniform and silent:

==================  ===============
field kind          NULL becomes
==================  ===============
identifier / text   ``"unknown"``
timing              ``0.0``
call count          ``0``
==================  ===============

Anything else that does not fit – wrong column count, text where a number
belongs, a fractional call count – is a structural problem and raises
:class:`RowDecodeError`.
"""

from __future__ import annotations

import numbers
from decimal import Decimal
from typing import Any, Sequence

from src.querystats.errors import RowDecodeError

from .models import STATEMENT_COLUMNS, StatementRecord

UNKNOWN = "unknown"


def _text(value: Any, column: str) -> str:
    if value is None:
        return UNKNOWN
    if isinstance(value, str):
        return value
    raise RowDecodeError(f"column {column!r}: expected text, got {type(value).__name__}")


def _seconds(value: Any, column: str) -> float:
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (numbers.Real, Decimal)):
        raise RowDecodeError(f"column {column!r}: expected a number, got {type(value).__name__}")
    return float(value)


def _count(value: Any, column: str) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise RowDecodeError(f"column {column!r}: expected an integer, got {type(value).__name__}")
    return int(value)


def decode_row(row: Sequence[Any]) -> StatementRecord:
    """Resolve *row* (ordered as :data:`STATEMENT_COLUMNS`) into a record."""
    if len(row) != len(STATEMENT_COLUMNS):
        raise RowDecodeError(
            f"expected {len(STATEMENT_COLUMNS)} columns, got {len(row)}"
        )
    queryid, query, user, datname, mean, total, minimum, maximum, calls = row
    return StatementRecord(
        queryid=_text(queryid, "queryid"),
        query=_text(query, "query"),
        user=_text(user, "username"),
        datname=_text(datname, "datname"),
        mean_seconds=_seconds(mean, "mean_seconds"),
        total_seconds=_seconds(total, "total_seconds"),
        min_seconds=_seconds(minimum, "min_seconds"),
        max_seconds=_seconds(maximum, "max_seconds"),
        calls=_count(calls, "calls"),
    )
