import hypothesis.strategies as st
import pytest
from hypothesis import given
from sqlglot import exp

from src.querystats.collectors.query import StatementQuery
from src.querystats.errors import CollectorConfigError
from src.querystats.metrics.utils import validate_relation_name


def _tables(ast):
    return {t.alias: t.name for t in ast.find_all(exp.Table)}


def _divided_columns(ast):
    # timing columns converted from milliseconds, whatever casts the dialect adds
    return {
        col.name
        for div in ast.find_all(exp.Div)
        if div.expression.is_number and div.expression.name == "1000.0"
        for col in div.this.find_all(exp.Column)
        if col.name != "calls"
    }


def _group_keys(ast):
    return [(c.table, c.name) for c in ast.find(exp.Group).expressions]


def test_default_query_shape():
    ast = StatementQuery().build_query_ast()
    assert _tables(ast) == {"s": "pg_stat_statements"}
    assert _divided_columns(ast) == {
        "total_exec_time",
        "mean_exec_time",
        "min_exec_time",
        "max_exec_time",
    }
    assert _group_keys(ast) == [("s", "queryid")]
    first = ast.find(exp.Order).expressions[0]
    assert first.this.name == "total_seconds"
    assert first.args.get("desc")
    assert ast.selects[-1].alias == "calls"
    assert StatementQuery().sql("postgres").endswith("LIMIT 10")


def test_select_list_follows_statement_columns():
    from src.querystats.stats.models import STATEMENT_COLUMNS

    for labels in [("queryid",), ("queryid", "query", "user")]:
        ast = StatementQuery(labels=labels).build_query_ast()
        assert tuple(s.alias for s in ast.selects) == STATEMENT_COLUMNS


def test_user_label_joins_roles():
    ast = StatementQuery(labels=("queryid", "query", "user")).build_query_ast()
    assert _tables(ast) == {"s": "pg_stat_statements", "r": "pg_roles"}
    join = ast.find(exp.Join)
    assert join.side == "LEFT"
    assert {(c.table, c.name) for c in join.args["on"].find_all(exp.Column)} == {
        ("r", "oid"),
        ("s", "userid"),
    }
    assert _group_keys(ast) == [("s", "queryid"), ("s", "query"), ("r", "rolname")]


def test_join_database():
    query = StatementQuery(labels=("user", "datname", "queryid"), join_database=True, limit=100)
    ast = query.build_query_ast()
    assert _tables(ast)["d"] == "pg_database"
    datname = next(s for s in ast.selects if s.alias == "datname")
    assert (datname.this.table, datname.this.name) == ("d", "datname")
    assert _group_keys(ast) == [("r", "rolname"), ("d", "datname"), ("s", "queryid")]
    assert query.sql("postgres").endswith("LIMIT 100")


def test_unlabelled_columns_are_null():
    ast = StatementQuery().build_query_ast()
    for alias in ("query", "username", "datname"):
        node = next(s for s in ast.selects if s.alias == alias)
        assert isinstance(node.this, exp.Cast)
        assert isinstance(node.this.this, exp.Null)


def test_statistics_are_aggregated():
    ast = StatementQuery().build_query_ast()
    by_alias = {s.alias: s.this for s in ast.selects}
    assert by_alias["total_seconds"].find(exp.Sum) is not None
    assert by_alias["min_seconds"].find(exp.Min) is not None
    assert by_alias["max_seconds"].find(exp.Max) is not None
    assert by_alias["mean_seconds"].find(exp.Nullif) is not None
    assert isinstance(by_alias["calls"], exp.Cast)
    assert isinstance(by_alias["calls"].this, exp.Sum)


def test_legacy_timing_columns():
    query = StatementQuery(legacy_timing_columns=True)
    assert _divided_columns(query.build_query_ast()) == {
        "total_time",
        "mean_time",
        "min_time",
        "max_time",
    }
    assert "exec_time" not in query.sql("postgres")


def test_datname_label_requires_join():
    with pytest.raises(CollectorConfigError):
        StatementQuery(labels=("queryid", "datname"))


@pytest.mark.parametrize("labels", [(), ("host",), ("queryid", "queryid")])
def test_invalid_labels(labels):
    with pytest.raises(CollectorConfigError):
        StatementQuery(labels=labels)


@given(limit=st.integers(min_value=1, max_value=10_000))
def test_limit_is_rendered(limit):
    for dialect in ["postgres", "duckdb"]:
        assert StatementQuery(limit=limit).sql(dialect).endswith(f"LIMIT {limit}")


@pytest.mark.parametrize("limit", [0, -1, True, 1.5])
def test_invalid_limit(limit):
    with pytest.raises(CollectorConfigError):
        StatementQuery(limit=limit)


@pytest.mark.parametrize(
    "name",
    [
        "",
        "pg_stat_statements; DROP TABLE users",
        "pg_stat_statements AS x",
        "(SELECT 1)",
        "generate_series(1, 10)",
    ],
)
def test_invalid_relation_names(name):
    with pytest.raises(CollectorConfigError):
        validate_relation_name(name)


def test_schema_qualified_relation():
    table = validate_relation_name("monitoring.pg_stat_statements")
    assert table.name == "pg_stat_statements"
    assert table.db == "monitoring"
    ast = StatementQuery(statements_relation="monitoring.pg_stat_statements").build_query_ast()
    source = ast.find(exp.From).this
    assert (source.db, source.name, source.alias) == ("monitoring", "pg_stat_statements", "s")
