"""Group scrape samples into prometheus_client metric families."""

from __future__ import annotations

from typing import Dict, Iterable, List

from prometheus_client.core import GaugeMetricFamily, Metric, UnknownMetricFamily

from src.querystats.metrics.sample import Sample, ValueType

# The Python client appends ``_total`` to counter families, so counters are
# exposed as gauges to keep descriptor names unchanged.
_FAMILY_TYPES = {
    ValueType.COUNTER: GaugeMetricFamily,
    ValueType.GAUGE: GaugeMetricFamily,
    ValueType.UNTYPED: UnknownMetricFamily,
}


def samples_to_families(samples: Iterable[Sample]) -> List[Metric]:
    """Return one family per descriptor, in first-seen order."""
    families: Dict[str, Metric] = {}
    for sample in samples:
        name = sample.descriptor.fq_name
        family = families.get(name)
        if family is None:
            family = _FAMILY_TYPES[sample.value_type](
                name,
                sample.descriptor.help,
                labels=list(sample.descriptor.label_names),
            )
            families[name] = family
        family.add_metric(list(sample.label_values), sample.value)
    return list(families.values())
