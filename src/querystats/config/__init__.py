"""Exporter configuration models."""

from .settings import DEFAULT_LABEL_SCOPE, CollectorSettings, ExporterConfig

__all__ = ["DEFAULT_LABEL_SCOPE", "CollectorSettings", "ExporterConfig"]
