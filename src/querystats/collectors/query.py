"""
src.querystats.collectors.query
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

Builds the single read-only statement-statistics query as a sqlglot AST.
Dialect compilation is delegated to the engine that runs it.

The select list always follows
:data:`src.querystats.stats.models.STATEMENT_COLUMNS`; only the sources
change with configuration:

* timing columns are ``*_exec_time`` (PostgreSQL 13+) or the legacy
  ``*_time`` names, converted from milliseconds to seconds;
* the user name comes from a LEFT JOIN on the roles view;
* the database name comes from a LEFT JOIN on the database catalog when
  ``join_database`` is set.

``pg_stat_statements`` keeps one row per (user, database, statement), which
is finer than most label sets.  Rows are therefore grouped by the columns
behind the published labels: calls and total time are summed, min and max
are folded, and the mean is weighted by calls.  Columns that no label needs
are selected as ``NULL``.

Groups are ordered by total time descending (NULLs last, grouping keys as
tie-breaker) and bounded by ``LIMIT``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

from sqlglot import exp, select

from src.querystats.errors import CollectorConfigError
from src.querystats.metrics.labels import validate_label_names
from src.querystats.metrics.utils import validate_relation_name

DEFAULT_LIMIT = 10

_TIMING_COLUMNS: Dict[bool, Dict[str, str]] = {
    False: {
        "mean_seconds": "mean_exec_time",
        "total_seconds": "total_exec_time",
        "min_seconds": "min_exec_time",
        "max_seconds": "max_exec_time",
    },
    True: {
        "mean_seconds": "mean_time",
        "total_seconds": "total_time",
        "min_seconds": "min_time",
        "max_seconds": "max_time",
    },
}

# label name -> (result column, source table alias, source column)
_LABEL_SOURCES: Dict[str, Tuple[str, str, str]] = {
    "queryid": ("queryid", "s", "queryid"),
    "query": ("query", "s", "query"),
    "user": ("username", "r", "rolname"),
    "datname": ("datname", "d", "datname"),
}


def _aliased(name: str, alias: str) -> exp.Table:
    table = validate_relation_name(name)
    table.set("alias", exp.TableAlias(this=exp.to_identifier(alias)))
    return table


def _seconds(value: exp.Expression) -> exp.Expression:
    return exp.Div(this=value, expression=exp.Literal.number("1000.0"))


@dataclass(frozen=True, slots=True)
class StatementQuery:
    """Fixed top-statements query for one collector configuration.

    ``labels`` names every label the collector publishes; one result row is
    produced per distinct combination of their values.

    Examples
    --------
    >>> StatementQuery(limit=1).sql("postgres").endswith("LIMIT 1")
    True
    """

    limit: int = DEFAULT_LIMIT
    labels: Tuple[str, ...] = ("queryid",)
    join_database: bool = False
    legacy_timing_columns: bool = False
    statements_relation: str = "pg_stat_statements"
    roles_relation: str = "pg_roles"
    database_relation: str = "pg_database"

    def __post_init__(self) -> None:
        if isinstance(self.limit, bool) or not isinstance(self.limit, int) or self.limit < 1:
            raise CollectorConfigError(f"limit must be a positive integer, got {self.limit!r}")
        object.__setattr__(self, "labels", validate_label_names(self.labels))
        if "datname" in self.labels and not self.join_database:
            raise CollectorConfigError("the 'datname' label requires join_database")
        validate_relation_name(self.statements_relation)
        validate_relation_name(self.roles_relation)
        if self.join_database:
            validate_relation_name(self.database_relation)

    # ------------------------------------------------------------------ #
    # Public API                                                         #
    # ------------------------------------------------------------------ #
    def group_keys(self) -> Tuple[exp.Column, ...]:
        """Source columns that define one result row, in label order."""
        return tuple(
            exp.column(_LABEL_SOURCES[name][2], table=_LABEL_SOURCES[name][1])
            for name in self.labels
        )

    def build_query_ast(self) -> exp.Select:
        timing = _TIMING_COLUMNS[self.legacy_timing_columns]

        def stat(name: str) -> exp.Column:
            return exp.column(timing[name], table="s")

        calls = exp.column("calls", table="s")
        label_columns = {}
        for name, (alias, table, column) in _LABEL_SOURCES.items():
            if name in self.labels:
                source: exp.Expression = exp.column(column, table=table)
                if name == "queryid":
                    source = exp.cast(source, "TEXT")
            else:
                source = exp.cast(exp.null(), "TEXT")
            label_columns[alias] = source

        # mean weighted by calls; a NULL mean stays NULL
        mean = exp.Div(
            this=exp.Sum(this=exp.Mul(this=stat("mean_seconds"), expression=calls.copy())),
            expression=exp.Nullif(
                this=exp.Sum(this=calls.copy()), expression=exp.Literal.number(0)
            ),
        )

        projections = [exp.alias_(label_columns[c], c) for c in ("queryid", "query", "username", "datname")]
        projections += [
            exp.alias_(_seconds(mean), "mean_seconds"),
            exp.alias_(_seconds(exp.Sum(this=stat("total_seconds"))), "total_seconds"),
            exp.alias_(_seconds(exp.Min(this=stat("min_seconds"))), "min_seconds"),
            exp.alias_(_seconds(exp.Max(this=stat("max_seconds"))), "max_seconds"),
            # SUM(bigint) is numeric on PostgreSQL
            exp.alias_(exp.cast(exp.Sum(this=calls.copy()), "BIGINT"), "calls"),
        ]

        query = select(*projections).from_(_aliased(self.statements_relation, "s"))
        if "user" in self.labels:
            query = query.join(
                _aliased(self.roles_relation, "r"), on="r.oid = s.userid", join_type="left"
            )
        if self.join_database:
            query = query.join(
                _aliased(self.database_relation, "d"), on="d.oid = s.dbid", join_type="left"
            )

        keys = self.group_keys()
        return (
            query.group_by(*(k.copy() for k in keys))
            .order_by(
                exp.Ordered(this=exp.column("total_seconds"), desc=True, nulls_first=False),
                *(exp.Ordered(this=k.copy(), nulls_first=False) for k in keys),
            )
            .limit(self.limit)
        )

    def sql(self, dialect: str = "postgres") -> str:
        return self.build_query_ast().sql(dialect=dialect, pretty=False)
