"""
src.querystats.collectors.top_queries
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

Publishes execution statistics of the most expensive statements.

For every row of :class:`StatementQuery` the collector emits one sample
per descriptor, in descriptor order (total, mean, min, max, calls), so a
scrape returning *n* rows yields ``n * 5`` samples.  The first query or
decode error is raised as-is; samples of earlier rows stay in the sink.

The query groups rows by the columns behind the descriptor labels, so each
label set appears at most once per descriptor and scrape.
"""

from __future__ import annotations

from typing import Dict

from src.querystats.collectors.base import Collector, SampleSink
from src.querystats.collectors.query import StatementQuery
from src.querystats.config.settings import CollectorSettings
from src.querystats.context import ScrapeContext
from src.querystats.errors import CollectorConfigError
from src.querystats.instance import DatabaseInstance
from src.querystats.metrics.descriptors import NAMESPACE, SUBSYSTEM, DescriptorSet
from src.querystats.metrics.sample import Sample, ValueType
from src.querystats.stats.decoder import decode_row


class TopQueriesCollector(Collector):
    name = SUBSYSTEM

    def __init__(
        self,
        *,
        query: StatementQuery,
        descriptors: DescriptorSet,
        value_type: ValueType = ValueType.COUNTER,
    ):
        if set(descriptors.label_names) != set(query.labels):
            raise CollectorConfigError(
                f"query groups by {list(query.labels)} but descriptors are labelled "
                f"{list(descriptors.label_names)}"
            )
        self.query = query
        self.descriptors = descriptors
        self.value_type = value_type
        self._sql: Dict[str, str] = {}

    @classmethod
    def from_settings(
        cls, settings: CollectorSettings, *, namespace: str = NAMESPACE
    ) -> "TopQueriesCollector":
        return cls(
            query=StatementQuery(
                limit=settings.limit,
                labels=settings.resolved_labels(),
                join_database=settings.join_database,
                legacy_timing_columns=settings.legacy_timing_columns,
                statements_relation=settings.statements_relation,
                roles_relation=settings.roles_relation,
                database_relation=settings.database_relation,
            ),
            descriptors=DescriptorSet(
                labels=settings.resolved_labels(),
                calls_labels=settings.resolved_calls_labels(),
                namespace=namespace,
            ),
        )

    def _sql_for(self, dialect: str) -> str:
        # compiled once per dialect; the query never changes after construction
        if dialect not in self._sql:
            self._sql[dialect] = self.query.sql(dialect)
        return self._sql[dialect]

    def update(self, ctx: ScrapeContext, instance: DatabaseInstance, sink: SampleSink) -> None:
        db = instance.get_db()
        with db.execute(self._sql_for(db.get_dialect()), ctx=ctx) as rows:
            for row in rows:
                ctx.check()
                record = decode_row(row)
                for entry in self.descriptors:
                    sink.put(
                        Sample(
                            descriptor=entry.descriptor,
                            value_type=self.value_type,
                            value=float(getattr(record, entry.statistic.field)),
                            label_values=entry.labels.build(record),
                        )
                    )
