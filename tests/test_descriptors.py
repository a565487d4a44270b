import pytest

from src.querystats.errors import CollectorConfigError
from src.querystats.metrics import DescriptorSet, MetricDescriptor, build_fq_name


def test_build_fq_name():
    assert build_fq_name("pg", "stat_top_queries", "calls") == "pg_stat_top_queries_calls"
    assert build_fq_name("pg", "", "calls") == "pg_calls"
    assert build_fq_name("pg", "stat_top_queries", "") == ""


def test_descriptor_set_names_in_order():
    ds = DescriptorSet(labels=["queryid"])
    assert [d.fq_name for d in ds.descriptors] == [
        "pg_stat_top_queries_total_seconds",
        "pg_stat_top_queries_mean_time",
        "pg_stat_top_queries_min_time_seconds",
        "pg_stat_top_queries_max_time_seconds",
        "pg_stat_top_queries_calls",
    ]
    assert len(ds) == 5
    assert all(d.label_names == ("queryid",) for d in ds.descriptors)


def test_descriptor_set_calls_labels():
    ds = DescriptorSet(labels=["queryid", "query", "user"], calls_labels=["user", "queryid", "query"])
    assert ds.get("total_seconds").label_names == ("queryid", "query", "user")
    assert ds.get("calls").label_names == ("user", "queryid", "query")
    assert ds.label_names == ("queryid", "query", "user")


@pytest.mark.parametrize("calls_labels", [["queryid"], ["queryid", "query", "user", "datname"]])
def test_calls_labels_must_match_timing_labels(calls_labels):
    with pytest.raises(CollectorConfigError):
        DescriptorSet(labels=["queryid", "query", "user"], calls_labels=calls_labels)


def test_descriptor_set_custom_namespace():
    ds = DescriptorSet(labels=["queryid"], namespace="postgres")
    assert ds.get("calls").fq_name == "postgres_stat_top_queries_calls"


def test_descriptor_set_unknown_statistic():
    with pytest.raises(KeyError):
        DescriptorSet(labels=["queryid"]).get("p99")


@pytest.mark.parametrize("labels", [[], ["queryid", "queryid"], ["queryid", "host"]])
def test_descriptor_set_rejects_bad_labels(labels):
    with pytest.raises(CollectorConfigError):
        DescriptorSet(labels=labels)


def test_metric_descriptor_validation():
    with pytest.raises(ValueError):
        MetricDescriptor("pg-calls", "help", ())
    with pytest.raises(ValueError):
        MetricDescriptor("pg_calls", "help", ("__name__",))
    with pytest.raises(ValueError):
        MetricDescriptor("pg_calls", "help", ("a", "a"))


def test_metric_descriptor_is_immutable():
    d = MetricDescriptor("pg_calls", "help", ("queryid",))
    with pytest.raises(AttributeError):
        d.fq_name = "other"
