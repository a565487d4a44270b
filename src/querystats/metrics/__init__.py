"""Metric descriptors, samples and label schemas."""

from .descriptors import (
    NAMESPACE,
    STATISTICS,
    SUBSYSTEM,
    DescriptorSet,
    MetricDescriptor,
    build_fq_name,
)
from .labels import LABEL_FIELDS, LABEL_SCOPES, LabelBuilder
from .sample import Sample, ValueType

__all__ = [
    "NAMESPACE",
    "STATISTICS",
    "SUBSYSTEM",
    "DescriptorSet",
    "MetricDescriptor",
    "build_fq_name",
    "LABEL_FIELDS",
    "LABEL_SCOPES",
    "LabelBuilder",
    "Sample",
    "ValueType",
]
