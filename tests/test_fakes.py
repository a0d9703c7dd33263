import pytest

from nodeprobe.metrics.fakes import FakeInt64Metric
from nodeprobe.metrics.metric import Aggregation, Int64MetricRepresentation


def _rep(labels, value):
    return Int64MetricRepresentation("foo", labels, value)


def _key(metric):
    return sorted(metric.labels.items())


CASES = [
    ("empty sum metric", Aggregation.SUM, [], [], []),
    (
        "sum metric with no tag",
        Aggregation.SUM,
        [],
        [({}, 1), ({}, 2)],
        [_rep({}, 3)],
    ),
    (
        "sum metric with one tag",
        Aggregation.SUM,
        ["A"],
        [({"A": "1"}, 1), ({"A": "1"}, 2)],
        [_rep({"A": "1"}, 3)],
    ),
    (
        "sum metric with different tags",
        Aggregation.SUM,
        ["A", "B"],
        [({"A": "1"}, 1), ({"B": "2"}, 2), ({}, 4), ({"B": "3"}, 8), ({"A": "1"}, 16)],
        [_rep({}, 4), _rep({"A": "1"}, 17), _rep({"B": "2"}, 2), _rep({"B": "3"}, 8)],
    ),
    ("empty gauge metric", Aggregation.LAST_VALUE, [], [], []),
    (
        "gauge metric with one measurement",
        Aggregation.LAST_VALUE,
        [],
        [({}, 2)],
        [_rep({}, 2)],
    ),
    (
        "gauge metric with multiple measurements under same tag",
        Aggregation.LAST_VALUE,
        ["A"],
        [({"A": "1"}, 2), ({"A": "1"}, 4)],
        [_rep({"A": "1"}, 4)],
    ),
    (
        "gauge metric with multiple measurements under different tags",
        Aggregation.LAST_VALUE,
        ["A", "B"],
        [({"A": "1"}, 2), ({"B": "2"}, 4), ({"A": "1", "B": "2"}, 8)],
        [_rep({"A": "1"}, 2), _rep({"B": "2"}, 4), _rep({"A": "1", "B": "2"}, 8)],
    ),
]


@pytest.mark.parametrize(
    "aggregation, tag_names, records, expected",
    [case[1:] for case in CASES],
    ids=[case[0] for case in CASES],
)
def test_fake_int64_metric(aggregation, tag_names, records, expected):
    metric = FakeInt64Metric("foo", aggregation, tag_names)
    for tags, measurement in records:
        metric.record(tags, measurement)
    got = metric.list_metrics()
    assert sorted(got, key=_key) == sorted(expected, key=_key)


def test_disallowed_tag_raises():
    metric = FakeInt64Metric("foo", Aggregation.SUM, ["A"])
    with pytest.raises(ValueError, match='tag "B" is not allowed'):
        metric.record({"B": "1"}, 1)
    assert metric.list_metrics() == []


def test_empty_name_raises():
    with pytest.raises(ValueError):
        FakeInt64Metric("", Aggregation.SUM, [])


def test_unsupported_aggregation_raises_on_record():
    metric = FakeInt64Metric("foo", "Median", [])
    with pytest.raises(ValueError, match="unsupported aggregation type"):
        metric.record({}, 1)


def test_list_metrics_is_a_snapshot():
    metric = FakeInt64Metric("foo", Aggregation.SUM, [])
    metric.record({}, 1)
    snapshot = metric.list_metrics()
    metric.record({}, 2)
    assert snapshot == [_rep({}, 1)]
    assert metric.list_metrics() == [_rep({}, 3)]