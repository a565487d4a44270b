"""
Query Stats Exporter

Serves statement statistics from ``pg_stat_statements`` on ``/metrics``.

Environment Variables:
    DATA_SOURCE_NAME: PostgreSQL DSN, used when neither ``--dsn`` nor the
                      config file provides one

CLI Usage:
    python -m src.service.main --config exporter.yml --port 9187
"""

from __future__ import annotations

import argparse
import logging
import os
from typing import Optional, Sequence

import uvicorn

from src.querystats.collectors.registry import default_catalog
from src.querystats.config.settings import ExporterConfig
from src.querystats.engines.postgres import PostgresEngine
from src.querystats.exporter import StatsExporter
from src.querystats.instance import DatabaseInstance
from src.service.api import Service

logger = logging.getLogger(__name__)


def build_service(config: ExporterConfig) -> Service:
    if not config.dsn:
        raise ValueError("no DSN configured; use --dsn, the config file or DATA_SOURCE_NAME")
    catalog = default_catalog()
    instance = DatabaseInstance(PostgresEngine(config.dsn))
    exporter = StatsExporter.from_config(config, instance, catalog)
    return Service(exporter, catalog, config)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Export pg_stat_statements to Prometheus")
    parser.add_argument("--config", help="YAML or JSON exporter config")
    parser.add_argument("--dsn", help="PostgreSQL DSN (overrides the config file)")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=9187)
    parser.add_argument("--log-level", default="info", choices=["debug", "info", "warning", "error"])
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = ExporterConfig.from_file(args.config) if args.config else ExporterConfig()
    dsn = args.dsn or config.dsn or os.environ.get("DATA_SOURCE_NAME")
    config = config.model_copy(update={"dsn": dsn})

    service = build_service(config)
    logger.info(
        "Starting exporter on %s:%d with collectors: %s",
        args.host,
        args.port,
        ", ".join(name for name, _ in service.exporter.collectors) or "none",
    )
    uvicorn.run(service.app, host=args.host, port=args.port, log_level=args.log_level)


if __name__ == "__main__":
    main()
