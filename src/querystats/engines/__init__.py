"""Database engine implementations."""

from .duckdb import DuckDBEngine
from .postgres import PostgresEngine

__all__ = ["DuckDBEngine", "PostgresEngine"]
