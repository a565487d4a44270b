"""
src.querystats.metrics.descriptors
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

Immutable definitions of the published statement metrics.

Each :class:`MetricDescriptor` carries a fully-qualified name, help text
and the ordered label names every sample under it must supply.  A
:class:`DescriptorSet` pairs the five statement statistics with their
descriptors for one collector configuration; it is built once and shared
read-only by every scrape of that collector.

Built-ins
---------
suffix               | record field      | meaning
---------------------|-------------------|--------------------------------
``total_seconds``    | ``total_seconds`` | total time spent in the statement
``mean_time``        | ``mean_seconds``  | mean time per execution
``min_time_seconds`` | ``min_seconds``   | fastest execution
``max_time_seconds`` | ``max_seconds``   | slowest execution
``calls``            | ``calls``         | number of executions
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence, Tuple

from src.querystats.errors import CollectorConfigError
from src.querystats.metrics.labels import LabelBuilder, validate_label_names

NAMESPACE = "pg"
SUBSYSTEM = "stat_top_queries"

_METRIC_NAME_RE = re.compile(r"^[a-zA-Z_:][a-zA-Z0-9_:]*$")
_LABEL_NAME_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


def build_fq_name(namespace: str, subsystem: str, name: str) -> str:
    """Join the non-empty parts with ``_``; an empty *name* yields ``""``.

    Examples
    --------
    >>> build_fq_name("pg", "stat_top_queries", "calls")
    'pg_stat_top_queries_calls'
    >>> build_fq_name("", "stat_top_queries", "calls")
    'stat_top_queries_calls'
    """
    if not name:
        return ""
    return "_".join(part for part in (namespace, subsystem, name) if part)


@dataclass(frozen=True, slots=True)
class MetricDescriptor:
    fq_name: str
    help: str
    label_names: Tuple[str, ...]

    def __post_init__(self) -> None:
        if not _METRIC_NAME_RE.match(self.fq_name):
            raise ValueError(f"Invalid metric name: {self.fq_name!r}")
        for label in self.label_names:
            if not _LABEL_NAME_RE.match(label) or label.startswith("__"):
                raise ValueError(f"Invalid label name {label!r} on {self.fq_name}")
        if len(set(self.label_names)) != len(self.label_names):
            raise ValueError(f"Duplicate label names on {self.fq_name}")


@dataclass(frozen=True, slots=True)
class Statistic:
    suffix: str
    field: str
    help: str


STATISTICS: Tuple[Statistic, ...] = (
    Statistic("total_seconds", "total_seconds", "Total time spent in the statement, in seconds"),
    Statistic("mean_time", "mean_seconds", "Mean time spent in the statement, in seconds"),
    Statistic("min_time_seconds", "min_seconds", "Minimum time spent in the statement, in seconds"),
    Statistic("max_time_seconds", "max_seconds", "Maximum time spent in the statement, in seconds"),
    Statistic("calls", "calls", "Number of times executed"),
)


@dataclass(frozen=True, slots=True)
class DescriptorEntry:
    statistic: Statistic
    descriptor: MetricDescriptor
    labels: LabelBuilder


class DescriptorSet:
    """Ordered, read-only pairing of each statistic with its descriptor.

    Parameters
    ----------
    labels : sequence of str
        Label schema of the timing descriptors.
    calls_labels : sequence of str, optional
        Label order of the ``calls`` descriptor; defaults to *labels* and
        must name the same labels.
    """

    def __init__(
        self,
        *,
        labels: Sequence[str],
        calls_labels: Optional[Sequence[str]] = None,
        namespace: str = NAMESPACE,
        subsystem: str = SUBSYSTEM,
    ):
        timing_labels = validate_label_names(labels)
        count_labels = validate_label_names(calls_labels) if calls_labels else timing_labels
        if set(count_labels) != set(timing_labels):
            # every descriptor is published at the same row grain
            raise CollectorConfigError(
                f"calls labels {list(count_labels)} must name the same labels as {list(timing_labels)}"
            )

        entries = []
        for stat in STATISTICS:
            label_names = count_labels if stat.field == "calls" else timing_labels
            entries.append(
                DescriptorEntry(
                    statistic=stat,
                    descriptor=MetricDescriptor(
                        fq_name=build_fq_name(namespace, subsystem, stat.suffix),
                        help=stat.help,
                        label_names=label_names,
                    ),
                    labels=LabelBuilder(label_names),
                )
            )
        self._entries: Tuple[DescriptorEntry, ...] = tuple(entries)

    def __iter__(self) -> Iterator[DescriptorEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def label_names(self) -> Tuple[str, ...]:
        """Timing label names; the calls descriptor carries the same set."""
        return self._entries[0].descriptor.label_names

    @property
    def descriptors(self) -> Tuple[MetricDescriptor, ...]:
        return tuple(e.descriptor for e in self._entries)

    def get(self, suffix: str) -> MetricDescriptor:
        for entry in self._entries:
            if entry.statistic.suffix == suffix:
                return entry.descriptor
        raise KeyError(f"Unknown statistic '{suffix}'")
