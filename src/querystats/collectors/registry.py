"""
src.querystats.collectors.registry
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

**Collector catalog** mapping a collector name (e.g. ``"stat_top_queries"``)
to a *factory* – a callable that receives the collector's
:class:`CollectorSettings` and the metric namespace and returns a ready
:class:`Collector` – together with its default-enabled flag.

Nothing registers itself on import.  The composition root creates a
catalog and calls :func:`register_builtin_collectors` (and any extra
``register`` calls) at startup.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Callable, Dict, List, Tuple

from src.querystats.collectors.base import Collector
from src.querystats.collectors.top_queries import TopQueriesCollector
from src.querystats.config.settings import CollectorSettings, ExporterConfig

CollectorFactory = Callable[..., Collector]

DEFAULT_ENABLED = True
DEFAULT_DISABLED = False


@dataclass(frozen=True, slots=True)
class CollectorEntry:
    name: str
    factory: CollectorFactory
    default_enabled: bool


class CollectorCatalog:
    """Thread-safe registry of collector factories."""

    def __init__(self) -> None:
        self._entries: Dict[str, CollectorEntry] = {}
        self._lock = threading.RLock()

    # ------------------------------------------------------------------ #
    # Public API                                                        #
    # ------------------------------------------------------------------ #
    def register(
        self, name: str, factory: CollectorFactory, *, default_enabled: bool = DEFAULT_ENABLED
    ) -> None:
        with self._lock:
            if name in self._entries:
                raise KeyError(f"Collector '{name}' already registered")
            self._entries[name] = CollectorEntry(name, factory, default_enabled)

    def get(self, name: str) -> CollectorEntry:
        with self._lock:
            try:
                return self._entries[name]
            except KeyError as exc:
                raise KeyError(
                    f"Unknown collector '{name}'. Available: {', '.join(sorted(self._entries))}"
                ) from exc

    def names(self) -> Tuple[str, ...]:
        with self._lock:
            return tuple(self._entries)

    def is_enabled(self, name: str, config: ExporterConfig) -> bool:
        settings = config.settings_for(name)
        if settings.enabled is not None:
            return settings.enabled
        return self.get(name).default_enabled

    def build(self, name: str, settings: CollectorSettings, *, namespace: str) -> Collector:
        return self.get(name).factory(settings, namespace=namespace)

    def build_enabled(self, config: ExporterConfig) -> List[Tuple[str, Collector]]:
        """Instantiate every collector enabled by *config*, in registration order."""
        for name in config.collectors:
            self.get(name)
        return [
            (name, self.build(name, config.settings_for(name), namespace=config.namespace))
            for name in self.names()
            if self.is_enabled(name, config)
        ]


def register_builtin_collectors(catalog: CollectorCatalog) -> CollectorCatalog:
    catalog.register(
        TopQueriesCollector.name,
        TopQueriesCollector.from_settings,
        default_enabled=DEFAULT_ENABLED,
    )
    return catalog


def default_catalog() -> CollectorCatalog:
    return register_builtin_collectors(CollectorCatalog())
