import uuid

import pytest

from nodeprobe.metrics.metric import (
    METRIC_MAP,
    Aggregation,
    Float64MetricRepresentation,
    Int64MetricRepresentation,
    MetricID,
    MetricMapping,
    get_view_rows,
    new_float64_metric,
    new_int64_metric,
)


def _view_name(prefix):
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def test_aggregation_from_source_name_drives_sum():
    name = _view_name("sum_by_name")
    metric = new_int64_metric(MetricID.PROBLEM_COUNTER, name, "d", "1", Aggregation("Sum"), [])
    metric.record({}, 2)
    metric.record({}, 3)
    assert get_view_rows(name) == [Int64MetricRepresentation(name, {}, 5)]


@pytest.mark.parametrize(
    "raw, member",
    [
        ("cpu/usage_time", MetricID.CPU_USAGE_TIME),
        ("problem_counter", MetricID.PROBLEM_COUNTER),
        ("net/tx_compressed", MetricID.NET_DEV_TX_COMPRESSED),
    ],
)
def test_metric_id_from_source_value_is_mapped(raw, member):
    mapping = MetricMapping()
    mapping.add_mapping(MetricID(raw), "view")
    assert mapping.view_name_to_metric_id("view") is member


def test_metric_mapping_round_trip():
    mapping = MetricMapping()
    mapping.add_mapping(MetricID.HOST_UPTIME, "host_uptime")
    assert mapping.view_name_to_metric_id("host_uptime") is MetricID.HOST_UPTIME
    assert mapping.view_name_to_metric_id("missing") is None


def test_empty_view_name_gives_no_metric():
    assert new_float64_metric(MetricID.HOST_UPTIME, "", "d", "1", Aggregation.SUM, []) is None
    assert new_int64_metric(MetricID.HOST_UPTIME, "", "d", "1", Aggregation.SUM, []) is None


def test_new_metric_registers_mapping():
    name = _view_name("disk_io")
    metric = new_int64_metric(MetricID.DISK_IO_TIME, name, "io", "ms", Aggregation.SUM, ["device"])
    assert metric.name == name
    assert METRIC_MAP.view_name_to_metric_id(name) is MetricID.DISK_IO_TIME


def test_unknown_aggregation_raises():
    with pytest.raises(ValueError, match="unknown aggregation option"):
        new_float64_metric(MetricID.CPU_LOAD_1M, _view_name("load"), "d", "1", "Median", [])


def test_invalid_tag_name_raises():
    with pytest.raises(ValueError, match="tag creation failure"):
        new_float64_metric(MetricID.CPU_LOAD_1M, _view_name("load"), "d", "1", Aggregation.SUM, [""])


def test_aggregation_accepts_plain_string():
    name = _view_name("gauge")
    metric = new_int64_metric(MetricID.PROBLEM_GAUGE, name, "d", "1", "LastValue", [])
    metric.record({}, 5)
    metric.record({}, 9)
    assert get_view_rows(name) == [Int64MetricRepresentation(name, {}, 9)]


def test_sum_accumulates_per_label_set():
    name = _view_name("counter")
    metric = new_int64_metric(MetricID.PROBLEM_COUNTER, name, "d", "1", Aggregation.SUM, ["reason"])
    metric.record({"reason": "OOMKilling"}, 1)
    metric.record({"reason": "OOMKilling"}, 1)
    metric.record({"reason": "DockerHung"}, 1)
    rows = {row.labels["reason"]: row.value for row in get_view_rows(name)}
    assert rows == {"OOMKilling": 2, "DockerHung": 1}


def test_float_last_value_overwrites():
    name = _view_name("usage")
    metric = new_float64_metric(
        MetricID.MEMORY_PERCENT_USED, name, "d", "%", Aggregation.LAST_VALUE, ["state"]
    )
    metric.record({"state": "used"}, 0.25)
    metric.record({"state": "used"}, 0.75)
    assert get_view_rows(name) == [Float64MetricRepresentation(name, {"state": "used"}, 0.75)]


def test_record_with_unknown_tag_raises():
    name = _view_name("unknown_tag")
    metric = new_float64_metric(MetricID.CPU_LOAD_5M, name, "d", "1", Aggregation.SUM, [])
    tag = "never_registered_" + uuid.uuid4().hex
    with pytest.raises(ValueError, match="referencing none existing tag"):
        metric.record({tag: "x"}, 1.0)
    assert get_view_rows(name) == []


def test_tags_outside_view_are_dropped_from_rows():
    other = _view_name("other")
    new_float64_metric(MetricID.CPU_LOAD_15M, other, "d", "1", Aggregation.SUM, ["extra"])
    name = _view_name("narrow")
    metric = new_float64_metric(MetricID.CPU_LOAD_15M, name, "d", "1", Aggregation.SUM, ["core"])
    metric.record({"core": "0", "extra": "yes"}, 2.0)
    rows = get_view_rows(name)
    assert [row.labels for row in rows] == [{"core": "0"}]


def test_get_view_rows_unknown_view_raises():
    with pytest.raises(KeyError):
        get_view_rows(_view_name("missing"))