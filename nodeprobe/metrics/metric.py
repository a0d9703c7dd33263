"""Metric identifiers, tagged metrics and an in-process view registry."""

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

_MAX_TAG_LENGTH = 255


class Aggregation(str, Enum):
    """How measurements are combined into data points."""

    # The last measurement overwrites earlier ones (gauge metric).
    LAST_VALUE = "LastValue"
    # Measurements are added onto earlier ones (counter metric).
    SUM = "Sum"


class MetricID(str, Enum):
    """Stable identifiers of the metrics the detector exports."""

    CPU_RUNNABLE_TASK_COUNT = "cpu/runnable_task_count"
    CPU_USAGE_TIME = "cpu/usage_time"
    CPU_LOAD_1M = "cpu/load_1m"
    CPU_LOAD_5M = "cpu/load_5m"
    CPU_LOAD_15M = "cpu/load_15m"
    PROBLEM_COUNTER = "problem_counter"
    PROBLEM_GAUGE = "problem_gauge"
    DISK_IO_TIME = "disk/io_time"
    DISK_WEIGHTED_IO = "disk/weighted_io"
    DISK_AVG_QUEUE_LEN = "disk/avg_queue_len"
    DISK_OPS_COUNT = "disk/operation_count"
    DISK_MERGED_OPS_COUNT = "disk/merged_operation_count"
    DISK_OPS_BYTES = "disk/operation_bytes_count"
    DISK_OPS_TIME = "disk/operation_time"
    DISK_BYTES_USED = "disk/bytes_used"
    DISK_PERCENT_USED = "disk/percent_used"
    HOST_UPTIME = "host/uptime"
    MEMORY_BYTES_USED = "memory/bytes_used"
    MEMORY_ANONYMOUS_USED = "memory/anonymous_used"
    MEMORY_PAGE_CACHE_USED = "memory/page_cache_used"
    MEMORY_UNEVICTABLE_USED = "memory/unevictable_used"
    MEMORY_DIRTY_USED = "memory/dirty_used"
    MEMORY_PERCENT_USED = "memory/percent_used"
    OS_FEATURE = "system/os_feature"
    SYSTEM_PROCESSES_TOTAL = "system/processes_total"
    SYSTEM_PROCS_RUNNING = "system/procs_running"
    SYSTEM_PROCS_BLOCKED = "system/procs_blocked"
    SYSTEM_INTERRUPTS_TOTAL = "system/interrupts_total"
    SYSTEM_CPU_STAT = "system/cpu_stat"
    NET_DEV_RX_BYTES = "net/rx_bytes"
    NET_DEV_RX_PACKETS = "net/rx_packets"
    NET_DEV_RX_ERRORS = "net/rx_errors"
    NET_DEV_RX_DROPPED = "net/rx_dropped"
    NET_DEV_RX_FIFO = "net/rx_fifo"
    NET_DEV_RX_FRAME = "net/rx_frame"
    NET_DEV_RX_COMPRESSED = "net/rx_compressed"
    NET_DEV_RX_MULTICAST = "net/rx_multicast"
    NET_DEV_TX_BYTES = "net/tx_bytes"
    NET_DEV_TX_PACKETS = "net/tx_packets"
    NET_DEV_TX_ERRORS = "net/tx_errors"
    NET_DEV_TX_DROPPED = "net/tx_dropped"
    NET_DEV_TX_FIFO = "net/tx_fifo"
    NET_DEV_TX_COLLISIONS = "net/tx_collisions"
    NET_DEV_TX_CARRIER = "net/tx_carrier"
    NET_DEV_TX_COMPRESSED = "net/tx_compressed"


class MetricMapping:
    """Thread-safe map from view names to metric identifiers."""

    def __init__(self) -> None:
        self._view_to_id: Dict[str, MetricID] = {}
        self._lock = threading.RLock()

    def add_mapping(self, metric_id, view_name: str) -> None:
        """Remember that ``view_name`` exports the metric ``metric_id``."""
        with self._lock:
            self._view_to_id[view_name] = metric_id

    def view_name_to_metric_id(self, view_name: str) -> Optional[MetricID]:
        """Return the metric identifier of a view, or None if unknown."""
        with self._lock:
            return self._view_to_id.get(view_name)


METRIC_MAP = MetricMapping()


@dataclass
class Float64MetricRepresentation:
    """Snapshot of a float metric, used to inspect metric internals."""

    name: str
    labels: Dict[str, str] = field(default_factory=dict)
    value: float = 0.0


@dataclass
class Int64MetricRepresentation:
    """Snapshot of an integer metric, used to inspect metric internals."""

    name: str
    labels: Dict[str, str] = field(default_factory=dict)
    value: int = 0


def _is_printable(text: str) -> bool:
    return all(32 <= ord(ch) <= 126 for ch in text)


_known_tags: set = set()
_tags_lock = threading.RLock()


def _register_tag_names(tag_names) -> Tuple[str, ...]:
    with _tags_lock:
        keys = []
        for tag_name in tag_names:
            if tag_name not in _known_tags:
                if not (0 < len(tag_name) <= _MAX_TAG_LENGTH and _is_printable(tag_name)):
                    raise ValueError(f'failed to create tag "{tag_name}": invalid key name')
                _known_tags.add(tag_name)
            keys.append(tag_name)
        return tuple(keys)


class _View:
    """Aggregated rows of one measure, split by the values of its tag keys."""

    def __init__(self, name, description, unit, aggregation, tag_keys, integral) -> None:
        self.name = name
        self.description = description
        self.unit = unit
        self.aggregation = aggregation
        self.tag_keys = tag_keys
        self.integral = integral
        self._rows: Dict[Tuple[Tuple[str, str], ...], Union[int, float]] = {}
        self._lock = threading.Lock()

    def record(self, tags: Dict[str, str], measurement) -> None:
        key = tuple((k, tags[k]) for k in self.tag_keys if k in tags)
        with self._lock:
            if self.aggregation is Aggregation.LAST_VALUE:
                self._rows[key] = measurement
            else:
                self._rows[key] = self._rows.get(key, 0) + measurement

    def rows(self) -> list:
        representation = Int64MetricRepresentation if self.integral else Float64MetricRepresentation
        with self._lock:
            return [representation(self.name, dict(key), value) for key, value in self._rows.items()]


_views: Dict[str, _View] = {}
_views_lock = threading.Lock()


def _register_view(view: _View) -> _View:
    with _views_lock:
        return _views.setdefault(view.name, view)


def get_view_rows(view_name: str) -> list:
    """Return snapshots of every row aggregated by a registered view.

    Raises KeyError when no view of that name was registered.
    """
    with _views_lock:
        view = _views.get(view_name)
    if view is None:
        raise KeyError(f'no view named "{view_name}" is registered')
    return view.rows()


class _TaggedMetric:
    def __init__(self, name: str, view: _View) -> None:
        self.name = name
        self._view = view

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"

    def _record(self, tags, measurement) -> None:
        tags = dict(tags or {})
        with _tags_lock:
            for tag_name, tag_value in tags.items():
                if tag_name not in _known_tags:
                    raise ValueError(
                        f'referencing none existing tag "{tag_name}" in metric "{self.name}"'
                    )
                if len(tag_value) > _MAX_TAG_LENGTH or not _is_printable(tag_value):
                    raise ValueError(f'invalid value "{tag_value}" for tag "{tag_name}"')
        self._view.record(tags, measurement)


class Float64Metric(_TaggedMetric):
    """A float metric recorded into its view."""

    def record(self, tags, measurement: float) -> None:
        """Record a measurement, with ``tags`` as metric labels."""
        self._record(tags, float(measurement))


class Int64Metric(_TaggedMetric):
    """An integer metric recorded into its view."""

    def record(self, tags, measurement: int) -> None:
        """Record a measurement, with ``tags`` as metric labels."""
        self._record(tags, int(measurement))


def _new_metric(cls, integral, metric_id, view_name, description, unit, aggregation, tag_names):
    if not view_name:
        return None

    METRIC_MAP.add_mapping(metric_id, view_name)

    try:
        tag_keys = _register_tag_names(tag_names or [])
    except ValueError as exc:
        raise ValueError(
            f'failed to create metric "{view_name}" because of tag creation failure: {exc}'
        ) from exc

    try:
        method = Aggregation(aggregation)
    except ValueError:
        raise ValueError(f'unknown aggregation option "{aggregation}"') from None

    view = _register_view(_View(view_name, description, unit, method, tag_keys, integral))
    return cls(view_name, view)


def new_float64_metric(metric_id, view_name, description, unit, aggregation, tag_names):
    """Create a float metric and register its view; None when ``view_name`` is empty."""
    return _new_metric(
        Float64Metric, False, metric_id, view_name, description, unit, aggregation, tag_names
    )


def new_int64_metric(metric_id, view_name, description, unit, aggregation, tag_names):
    """Create an integer metric and register its view; None when ``view_name`` is empty."""
    return _new_metric(
        Int64Metric, True, metric_id, view_name, description, unit, aggregation, tag_names
    )