"""
src.querystats.metrics.labels
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

Label names a statement metric may carry and how each one is read from a
:class:`StatementRecord`.

Operators trade cardinality for detail by choosing a *label scope*:

=======================  ================================
scope                    labels
=======================  ================================
``statement``            ``queryid``
``statement_text_user``  ``queryid``, ``query``, ``user``
``database_user``        ``user``, ``datname``, ``queryid``
=======================  ================================
"""

from __future__ import annotations

from typing import Dict, Iterable, Sequence, Tuple

from src.querystats.errors import CollectorConfigError
from src.querystats.stats.models import StatementRecord

# label name -> StatementRecord attribute
LABEL_FIELDS: Dict[str, str] = {
    "queryid": "queryid",
    "query": "query",
    "user": "user",
    "datname": "datname",
}

LABEL_SCOPES: Dict[str, Tuple[str, ...]] = {
    "statement": ("queryid",),
    "statement_text_user": ("queryid", "query", "user"),
    "database_user": ("user", "datname", "queryid"),
}


def validate_label_names(names: Iterable[str]) -> Tuple[str, ...]:
    """Return *names* as a tuple, rejecting empty, unknown or repeated labels."""
    labels = tuple(names)
    if not labels:
        raise CollectorConfigError("at least one label is required")
    unknown = [n for n in labels if n not in LABEL_FIELDS]
    if unknown:
        raise CollectorConfigError(
            f"Unknown labels: {', '.join(unknown)}. Available: {', '.join(sorted(LABEL_FIELDS))}"
        )
    if len(set(labels)) != len(labels):
        raise CollectorConfigError(f"Duplicate labels in {list(labels)}")
    return labels


def resolve_label_scope(scope: str) -> Tuple[str, ...]:
    try:
        return LABEL_SCOPES[scope]
    except KeyError as exc:
        raise CollectorConfigError(
            f"Unknown label scope '{scope}'. Available: {', '.join(sorted(LABEL_SCOPES))}"
        ) from exc


class LabelBuilder:
    """Read label values off a record in a descriptor's declared order."""

    def __init__(self, label_names: Sequence[str]):
        self.label_names = validate_label_names(label_names)
        self._fields = tuple(LABEL_FIELDS[n] for n in self.label_names)

    def build(self, record: StatementRecord) -> Tuple[str, ...]:
        return tuple(getattr(record, f) for f in self._fields)

    def __repr__(self) -> str:  # pragma: no cover
        return f"<LabelBuilder labels={self.label_names!r}>"
