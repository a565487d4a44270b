import pytest

from src.querystats.engines.duckdb import DuckDBEngine
from src.querystats.instance import DatabaseInstance
from .utils import create_statistics_views


@pytest.fixture
def duckdb_engine():
    """Return a fresh DuckDBEngine instance."""
    eng = DuckDBEngine()
    yield eng
    # ensure resources are released
    eng.close()


@pytest.fixture
def stats_engine(duckdb_engine: DuckDBEngine):
    """Create empty statistics views on the provided engine."""
    create_statistics_views(duckdb_engine)
    return duckdb_engine


@pytest.fixture
def instance(stats_engine: DuckDBEngine):
    """Provide a DatabaseInstance wired to the statistics engine."""
    return DatabaseInstance(stats_engine)
