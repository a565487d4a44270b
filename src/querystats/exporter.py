"""
src.querystats.exporter
~~~~~~~~~~~~~~~~~~~~~~~

Runs every enabled collector once per scrape and hands the result to
prometheus_client.

Collectors run concurrently on a thread pool and share one
:class:`queue.Queue` as their sink.  A collector that raises is logged and
reported through ``<namespace>_scrape_collector_success{collector}`` = 0;
it never affects the other collectors.
"""

from __future__ import annotations

import logging
import queue
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

from prometheus_client.core import GaugeMetricFamily, Metric

from src.querystats.collectors.base import Collector
from src.querystats.collectors.registry import CollectorCatalog, default_catalog
from src.querystats.config.settings import ExporterConfig
from src.querystats.context import ScrapeContext
from src.querystats.instance import DatabaseInstance
from src.querystats.metrics.descriptors import NAMESPACE, build_fq_name
from src.querystats.metrics.exposition import samples_to_families
from src.querystats.metrics.sample import Sample

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CollectorOutcome:
    name: str
    success: bool
    duration: float
    error: Optional[BaseException] = None


class StatsExporter:
    """Custom prometheus_client collector wrapping the statement collectors.

    Parameters
    ----------
    collectors : sequence of (name, Collector)
        Collectors to run on every scrape.
    instance : DatabaseInstance
        Database the collectors read from.
    scrape_timeout : float, optional
        Deadline for one scrape; in-flight queries are interrupted when it
        passes.
    """

    def __init__(
        self,
        collectors: Sequence[Tuple[str, Collector]],
        instance: DatabaseInstance,
        *,
        namespace: str = NAMESPACE,
        scrape_timeout: Optional[float] = None,
    ):
        self.collectors = list(collectors)
        self.instance = instance
        self.namespace = namespace
        self.scrape_timeout = scrape_timeout

    @classmethod
    def from_config(
        cls,
        config: ExporterConfig,
        instance: DatabaseInstance,
        catalog: Optional[CollectorCatalog] = None,
    ) -> "StatsExporter":
        catalog = catalog or default_catalog()
        return cls(
            catalog.build_enabled(config),
            instance,
            namespace=config.namespace,
            scrape_timeout=config.scrape_timeout_seconds,
        )

    # ------------------------------------------------------------------ #
    # Scrape                                                             #
    # ------------------------------------------------------------------ #
    def _run_one(
        self, name: str, collector: Collector, ctx: ScrapeContext, sink: "queue.Queue[Sample]"
    ) -> CollectorOutcome:
        start = time.perf_counter()
        try:
            collector.update(ctx, self.instance, sink)
        except Exception as exc:
            duration = time.perf_counter() - start
            logger.error("collector %s failed after %.3fs: %s", name, duration, exc, exc_info=exc)
            return CollectorOutcome(name, False, duration, exc)
        duration = time.perf_counter() - start
        logger.debug("collector %s succeeded after %.3fs", name, duration)
        return CollectorOutcome(name, True, duration)

    def scrape(self, ctx: Optional[ScrapeContext] = None) -> Tuple[List[Sample], List[CollectorOutcome]]:
        """Run all collectors once and return their samples and outcomes."""
        own_ctx = ctx is None
        ctx = ctx or ScrapeContext(self.scrape_timeout)
        sink: "queue.Queue[Sample]" = queue.Queue()
        try:
            with ThreadPoolExecutor(max_workers=max(1, len(self.collectors))) as pool:
                futures = [
                    pool.submit(self._run_one, name, collector, ctx, sink)
                    for name, collector in self.collectors
                ]
                outcomes = [f.result() for f in futures]
        finally:
            if own_ctx:
                ctx.close()

        samples: List[Sample] = []
        while True:
            try:
                samples.append(sink.get_nowait())
            except queue.Empty:
                break
        return samples, outcomes

    # ------------------------------------------------------------------ #
    # prometheus_client collector protocol                               #
    # ------------------------------------------------------------------ #
    def describe(self) -> List[Metric]:
        return []

    def collect(self) -> Iterator[Metric]:
        samples, outcomes = self.scrape()
        yield from samples_to_families(samples)

        duration = GaugeMetricFamily(
            build_fq_name(self.namespace, "scrape", "collector_duration_seconds"),
            "Duration of a collector scrape",
            labels=["collector"],
        )
        success = GaugeMetricFamily(
            build_fq_name(self.namespace, "scrape", "collector_success"),
            "Whether a collector succeeded",
            labels=["collector"],
        )
        for outcome in outcomes:
            duration.add_metric([outcome.name], outcome.duration)
            success.add_metric([outcome.name], 1.0 if outcome.success else 0.0)
        yield duration
        yield success
