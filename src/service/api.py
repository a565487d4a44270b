from __future__ import annotations

"""Minimal web service exposing the exporter to Prometheus."""

from typing import Any, Dict, List

from fastapi import FastAPI, Response
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest

from src.querystats.collectors.registry import CollectorCatalog
from src.querystats.config.settings import ExporterConfig
from src.querystats.exporter import StatsExporter


class Service:
    """Wrap FastAPI app around an exporter and its collector catalog."""

    def __init__(
        self,
        exporter: StatsExporter,
        catalog: CollectorCatalog,
        config: ExporterConfig,
    ) -> None:
        self.exporter = exporter
        self.catalog = catalog
        self.config = config
        self.registry = CollectorRegistry(auto_describe=False)
        self.registry.register(exporter)
        self.app = FastAPI(title="Query Stats Exporter")
        self._init_routes()

    # -------------------------------------------------------------- #
    # API definitions                                               #
    # -------------------------------------------------------------- #
    def _init_routes(self) -> None:
        app = self.app

        @app.get("/metrics")
        def metrics() -> Response:
            return Response(generate_latest(self.registry), media_type=CONTENT_TYPE_LATEST)

        @app.get("/collectors")
        def list_collectors() -> List[Dict[str, Any]]:
            return [
                {
                    "name": name,
                    "enabled": self.catalog.is_enabled(name, self.config),
                    "default_enabled": self.catalog.get(name).default_enabled,
                }
                for name in self.catalog.names()
            ]


__all__ = ["Service"]
