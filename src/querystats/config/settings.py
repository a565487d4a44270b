"""
src.querystats.config.settings
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

Pydantic models describing the exporter and per-collector settings, plus
YAML / JSON loaders.

Example
-------
.. code-block:: yaml

    namespace: pg
    dsn: postgresql://monitor@db:5432/postgres
    scrape_timeout_seconds: 5
    collectors:
      stat_top_queries:
        limit: 100
        label_scope: database_user
        join_database: true
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.querystats.errors import CollectorConfigError
from src.querystats.metrics.labels import resolve_label_scope, validate_label_names
from src.querystats.metrics.utils import validate_relation_name

DEFAULT_LABEL_SCOPE = "statement"


# --------------------------------------------------------------------------- #
# Model definitions                                                           #
# --------------------------------------------------------------------------- #
class CollectorSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    enabled: Optional[bool] = None  # None -> catalog default
    limit: int = Field(default=10, ge=1)
    label_scope: Optional[str] = None
    labels: Optional[List[str]] = None
    calls_labels: Optional[List[str]] = None
    join_database: bool = False
    legacy_timing_columns: bool = False
    statements_relation: str = "pg_stat_statements"
    roles_relation: str = "pg_roles"
    database_relation: str = "pg_database"

    @model_validator(mode="after")
    def check_labels_and_relations(self):
        if self.label_scope is not None and self.labels is not None:
            raise CollectorConfigError("label_scope and labels are mutually exclusive")
        all_labels = set(self.resolved_labels())
        if self.calls_labels is not None and set(validate_label_names(self.calls_labels)) != all_labels:
            raise CollectorConfigError(
                f"calls_labels must name the same labels as the timing metrics: {sorted(all_labels)}"
            )
        if "datname" in all_labels and not self.join_database:
            raise CollectorConfigError("the datname label requires join_database: true")
        for relation in (self.statements_relation, self.roles_relation, self.database_relation):
            validate_relation_name(relation)
        return self

    def resolved_labels(self) -> Tuple[str, ...]:
        if self.labels is not None:
            return validate_label_names(self.labels)
        return resolve_label_scope(self.label_scope or DEFAULT_LABEL_SCOPE)

    def resolved_calls_labels(self) -> Optional[Tuple[str, ...]]:
        if self.calls_labels is None:
            return None
        return validate_label_names(self.calls_labels)


class ExporterConfig(BaseModel):
    namespace: str = "pg"
    dsn: Optional[str] = None
    scrape_timeout_seconds: Optional[float] = Field(default=10.0, gt=0)
    collectors: Dict[str, CollectorSettings] = Field(default_factory=dict)

    def settings_for(self, name: str) -> CollectorSettings:
        return self.collectors.get(name) or CollectorSettings()

    # ------------------------------------------------------------------ #
    # I/O                                                                 #
    # ------------------------------------------------------------------ #
    @classmethod
    def from_yaml(cls, path: str | Path) -> "ExporterConfig":
        with open(path, "r") as fh:
            return cls.model_validate(yaml.safe_load(fh) or {})

    @classmethod
    def from_json(cls, path: str | Path) -> "ExporterConfig":
        with open(path, "r") as fh:
            return cls.model_validate_json(fh.read())

    @classmethod
    def from_file(cls, path: str | Path) -> "ExporterConfig":
        ext = Path(path).suffix.lower()
        if ext in {".yml", ".yaml"}:
            return cls.from_yaml(path)
        if ext == ".json":
            return cls.from_json(path)
        raise ValueError(f"Unsupported config extension: {ext}")

    # round-trip helper ----------------------------
    def to_yaml(self) -> str:
        """Serialize this config back to YAML."""
        data = self.model_dump(exclude_defaults=True, exclude_none=True)
        return yaml.safe_dump(data, sort_keys=False)
