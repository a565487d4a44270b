import pandas as pd
from faker import Faker

from src.querystats.config.settings import CollectorSettings
from src.querystats.engines.base import BaseEngine
from src.querystats.engines.duckdb import DuckDBEngine


fake = Faker()
Faker.seed(0)

STATEMENTS = "stats.pg_stat_statements"
LEGACY_STATEMENTS = "stats.pg_stat_statements_legacy"
ROLES = "stats.pg_roles"
DATABASES = "stats.pg_database"

STATEMENT_TABLE_COLUMNS = [
    "userid",
    "dbid",
    "queryid",
    "query",
    "calls",
    "total_exec_time",
    "mean_exec_time",
    "min_exec_time",
    "max_exec_time",
]


def create_statistics_views(engine: DuckDBEngine) -> None:
    """Create empty copies of the statistics views under the ``stats`` schema."""
    conn = engine.connection
    conn.execute("CREATE SCHEMA IF NOT EXISTS stats")
    conn.execute(
        f"""
        CREATE TABLE {STATEMENTS}(
            userid BIGINT,
            dbid BIGINT,
            queryid BIGINT,
            query TEXT,
            calls BIGINT,
            total_exec_time DOUBLE,
            mean_exec_time DOUBLE,
            min_exec_time DOUBLE,
            max_exec_time DOUBLE
        )
        """
    )
    conn.execute(
        f"""
        CREATE TABLE {LEGACY_STATEMENTS}(
            userid BIGINT,
            dbid BIGINT,
            queryid BIGINT,
            query TEXT,
            calls BIGINT,
            total_time DOUBLE,
            mean_time DOUBLE,
            min_time DOUBLE,
            max_time DOUBLE
        )
        """
    )
    conn.execute(f"CREATE TABLE {ROLES}(oid BIGINT, rolname TEXT)")
    conn.execute(f"CREATE TABLE {DATABASES}(oid BIGINT, datname TEXT)")
    conn.execute(f"INSERT INTO {ROLES} VALUES (10, 'postgres'), (20, 'app')")
    conn.execute(f"INSERT INTO {DATABASES} VALUES (1, 'orders'), (2, 'billing')")


def statements_frame(rows) -> pd.DataFrame:
    """Build a frame in table column order; ``None`` stays ``None``."""
    return pd.DataFrame(
        {
            col: pd.Series([r.get(col) for r in rows], dtype=object)
            for col in STATEMENT_TABLE_COLUMNS
        }
    )


def insert_statements(engine: DuckDBEngine, rows, table: str = STATEMENTS) -> None:
    engine.append_dataframe(table, statements_frame(rows))


def random_statement_rows(n: int):
    """Return *n* Faker-generated statement rows with distinct total times."""
    rows = []
    for i in range(n):
        calls = fake.pyint(min_value=1, max_value=1000)
        total = float((n - i) * 1000 + fake.pyint(min_value=0, max_value=999))
        rows.append(
            {
                "userid": fake.random_element([10, 20]),
                "dbid": fake.random_element([1, 2]),
                "queryid": 1000 + i,
                "query": f"SELECT * FROM {fake.word()} WHERE id = $1",
                "calls": calls,
                "total_exec_time": total,
                "mean_exec_time": total / calls,
                "min_exec_time": fake.pyfloat(min_value=0, max_value=1, right_digits=3),
                "max_exec_time": total,
            }
        )
    return rows


def stats_settings(**kwargs) -> CollectorSettings:
    """Collector settings pointing at the ``stats`` schema copies."""
    kwargs.setdefault("statements_relation", STATEMENTS)
    kwargs.setdefault("roles_relation", ROLES)
    kwargs.setdefault("database_relation", DATABASES)
    return CollectorSettings(**kwargs)


def setup_stats_engine() -> DuckDBEngine:
    """Create a DuckDB engine preloaded with the statistics views."""
    eng = DuckDBEngine()
    create_statistics_views(eng)
    return eng


# --------------------------------------------------------------------------- #
# Scripted engine for failure paths                                           #
# --------------------------------------------------------------------------- #
class FakeCursor:
    def __init__(self, rows, error=None):
        self.rows = list(rows)
        self.error = error
        self.closed = False
        self.executed = []
        self.description = [("c",)]

    def execute(self, sql):
        self.executed.append(sql)
        if self.error is not None:
            raise self.error

    def fetchone(self):
        return self.rows.pop(0) if self.rows else None

    def close(self):
        self.closed = True


class FakeEngine(BaseEngine):
    """Engine returning scripted rows, or raising *error* from ``execute``."""

    def __init__(self, rows=(), error=None):
        self.rows = list(rows)
        self.error = error
        self.cursors = []

    def _open_cursor(self):
        cur = FakeCursor(self.rows, self.error)
        self.cursors.append(cur)
        return cur

    def _interrupt(self, cursor):
        pass

    def get_dialect(self):
        return "postgres"

    def close(self):
        pass
