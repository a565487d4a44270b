"""Statement statistics collectors."""

from .base import Collector, SampleSink
from .query import StatementQuery
from .registry import CollectorCatalog, default_catalog, register_builtin_collectors
from .top_queries import TopQueriesCollector

__all__ = [
    "Collector",
    "SampleSink",
    "StatementQuery",
    "CollectorCatalog",
    "default_catalog",
    "register_builtin_collectors",
    "TopQueriesCollector",
]
