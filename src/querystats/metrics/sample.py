from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple

from src.querystats.metrics.descriptors import MetricDescriptor


class ValueType(str, Enum):
    COUNTER = "counter"
    GAUGE = "gauge"
    UNTYPED = "untyped"


@dataclass(frozen=True, slots=True)
class Sample:
    """One observation for the current scrape.

    Construction fails when the label values do not line up with the
    descriptor's label names, so a malformed sample never reaches a sink.
    """

    descriptor: MetricDescriptor
    value_type: ValueType
    value: float
    label_values: Tuple[str, ...]

    def __post_init__(self) -> None:
        expected = len(self.descriptor.label_names)
        if len(self.label_values) != expected:
            raise ValueError(
                f"{self.descriptor.fq_name}: expected {expected} label values, "
                f"got {len(self.label_values)}"
            )
        for value in self.label_values:
            if not isinstance(value, str):
                raise ValueError(f"{self.descriptor.fq_name}: label values must be str, got {value!r}")

    @property
    def labels(self) -> Dict[str, str]:
        return dict(zip(self.descriptor.label_names, self.label_values))
