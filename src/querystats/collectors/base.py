"""
src.querystats.collectors.base
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

Common parent for all collectors.

A collector is invoked once per scrape with the scrape's
:class:`ScrapeContext`, the :class:`DatabaseInstance` to read from, and a
*sink* that accepts :class:`Sample` objects (a :class:`queue.Queue` in the
exporter).  It either returns normally or raises on the first failure;
samples already put into the sink stay there.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Protocol

from src.querystats.context import ScrapeContext
from src.querystats.instance import DatabaseInstance
from src.querystats.metrics.sample import Sample


class SampleSink(Protocol):
    def put(self, item: Sample) -> None:
        ...


class Collector(ABC):
    """Foundation for every collector."""

    name: str = ""

    @abstractmethod
    def update(self, ctx: ScrapeContext, instance: DatabaseInstance, sink: SampleSink) -> None:
        """Query *instance* and put every resulting sample into *sink*."""

    def __repr__(self) -> str:  # pragma: no cover
        return f"<{self.__class__.__name__} name={self.name!r}>"
