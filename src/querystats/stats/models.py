from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

# Column order of every statistics query; the decoder reads rows positionally.
STATEMENT_COLUMNS: Tuple[str, ...] = (
    "queryid",
    "query",
    "username",
    "datname",
    "mean_seconds",
    "total_seconds",
    "min_seconds",
    "max_seconds",
    "calls",
)


@dataclass(frozen=True, slots=True)
class StatementRecord:
    """Execution statistics of one statement with every NULL resolved.

    Examples
    --------
    >>> StatementRecord("42", "SELECT 1", "app", "db", 0.5, 1.0, 0.1, 0.9, 2).calls
    2
    """

    queryid: str
    query: str
    user: str
    datname: str
    mean_seconds: float
    total_seconds: float
    min_seconds: float
    max_seconds: float
    calls: int
