"""Parsing of Prometheus text exposition and lookup of parsed metrics."""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from nodeprobe.metrics.metric import Float64MetricRepresentation

_TYPE_NAMES = {
    "counter": "COUNTER",
    "gauge": "GAUGE",
    "summary": "SUMMARY",
    "untyped": "UNTYPED",
    "histogram": "HISTOGRAM",
}
_SUFFIXES = {"SUMMARY": ("_sum", "_count"), "HISTOGRAM": ("_bucket", "_sum", "_count")}

_METRIC_NAME = re.compile(r"[a-zA-Z_:][a-zA-Z0-9_:]*")
_LABEL_NAME = re.compile(r"[a-zA-Z_][a-zA-Z0-9_]*")
_TIMESTAMP = re.compile(r"[+-]?\d+")
_ESCAPES = {"\\": "\\", '"': '"', "n": "\n"}


class PrometheusParseError(ValueError):
    """Raised when metrics text is not valid Prometheus text format."""


class MetricNotFoundError(LookupError):
    """Raised when no metric matches the requested name and labels."""


@dataclass
class _Family:
    name: str
    type: Optional[str] = None
    samples: List[Tuple[Dict[str, str], float]] = field(default_factory=list)


def _error(lineno: int, message: str) -> PrometheusParseError:
    return PrometheusParseError(f"text format parsing error in line {lineno}: {message}")


def _skip_spaces(line: str, pos: int) -> int:
    while pos < len(line) and line[pos] in " \t":
        pos += 1
    return pos


def _parse_comment(line: str, families: Dict[str, _Family], lineno: int) -> None:
    tokens = line[1:].split(None, 2)
    if len(tokens) < 2 or tokens[0] not in ("HELP", "TYPE"):
        return
    name = tokens[1]
    if not _METRIC_NAME.fullmatch(name):
        raise _error(lineno, f"invalid metric name in comment: {name!r}")
    if tokens[0] == "HELP":
        families.setdefault(name, _Family(name))
        return
    if len(tokens) < 3:
        raise _error(lineno, f"missing type for metric {name!r}")
    type_name = _TYPE_NAMES.get(tokens[2].strip())
    if type_name is None:
        raise _error(lineno, f"unknown metric type {tokens[2].strip()!r}")
    family = families.setdefault(name, _Family(name))
    if family.type is not None or family.samples:
        raise _error(lineno, f"second TYPE line for metric name {name!r}, or TYPE reported after samples")
    family.type = type_name


def _parse_label_value(line: str, pos: int, lineno: int) -> Tuple[str, int]:
    chars = []
    while pos < len(line):
        ch = line[pos]
        if ch == '"':
            return "".join(chars), pos + 1
        if ch == "\\":
            if pos + 1 >= len(line) or line[pos + 1] not in _ESCAPES:
                raise _error(lineno, "invalid escape sequence in label value")
            chars.append(_ESCAPES[line[pos + 1]])
            pos += 2
            continue
        chars.append(ch)
        pos += 1
    raise _error(lineno, "unterminated label value")


def _parse_labels(line: str, pos: int, lineno: int) -> Tuple[Dict[str, str], int]:
    labels: Dict[str, str] = {}
    pos += 1
    while True:
        pos = _skip_spaces(line, pos)
        if pos < len(line) and line[pos] == "}":
            return labels, pos + 1
        match = _LABEL_NAME.match(line, pos)
        if match is None:
            raise _error(lineno, "invalid label name")
        key = match.group()
        pos = _skip_spaces(line, match.end())
        if pos >= len(line) or line[pos] != "=":
            raise _error(lineno, f"expected '=' after label name {key!r}")
        pos = _skip_spaces(line, pos + 1)
        if pos >= len(line) or line[pos] != '"':
            raise _error(lineno, f"expected '\"' to start value of label {key!r}")
        value, pos = _parse_label_value(line, pos + 1, lineno)
        if key in labels:
            raise _error(lineno, f"duplicate label name {key!r}")
        labels[key] = value
        pos = _skip_spaces(line, pos)
        if pos < len(line) and line[pos] == ",":
            pos += 1
        elif pos < len(line) and line[pos] == "}":
            return labels, pos + 1
        else:
            raise _error(lineno, "unexpected end of label set")


def _parse_value(token: str, lineno: int) -> float:
    if "_" in token:
        raise _error(lineno, f"expected float as value, got {token!r}")
    try:
        return float(token)
    except ValueError:
        raise _error(lineno, f"expected float as value, got {token!r}") from None


def _parse_sample(line: str, lineno: int) -> Tuple[str, Dict[str, str], float]:
    match = _METRIC_NAME.match(line)
    if match is None:
        raise _error(lineno, "invalid metric name")
    name = match.group()
    pos = _skip_spaces(line, match.end())
    labels: Dict[str, str] = {}
    if pos < len(line) and line[pos] == "{":
        labels, pos = _parse_labels(line, pos, lineno)
    tokens = line[pos:].split()
    if not tokens or len(tokens) > 2:
        raise _error(lineno, "expected a value and an optional timestamp")
    value = _parse_value(tokens[0], lineno)
    if len(tokens) == 2 and not _TIMESTAMP.fullmatch(tokens[1]):
        raise _error(lineno, f"expected integer as timestamp, got {tokens[1]!r}")
    return name, labels, value


def _family_for(name: str, families: Dict[str, _Family]) -> _Family:
    if name in families:
        return families[name]
    for type_name, suffixes in _SUFFIXES.items():
        for suffix in suffixes:
            base = name[: -len(suffix)]
            if name.endswith(suffix) and base in families and families[base].type == type_name:
                return families[base]
    family = _Family(name)
    families[name] = family
    return family


def parse_prometheus_metrics(text: str) -> List[Float64MetricRepresentation]:
    """Parse Prometheus text into float metrics.

    Only counter and gauge families are supported; any other type raises
    PrometheusParseError.
    """
    families: Dict[str, _Family] = {}
    for lineno, raw in enumerate(text.replace("\r", "").split("\n"), start=1):
        line = raw.strip()
        if not line:
            continue
        if line.startswith("#"):
            _parse_comment(line, families, lineno)
            continue
        name, labels, value = _parse_sample(line, lineno)
        _family_for(name, families).samples.append((labels, value))

    metrics = []
    for family in families.values():
        type_name = family.type or "UNTYPED"
        for labels, value in family.samples:
            if type_name not in ("COUNTER", "GAUGE"):
                raise PrometheusParseError(
                    f"unexpected MetricType {type_name} for metric {family.name}"
                )
            metrics.append(Float64MetricRepresentation(family.name, labels, value))
    return metrics


def get_float64_metric(metrics, name: str, labels, strict_label_matching: bool):
    """Find the first metric with ``name`` whose labels match ``labels``.

    With strict matching the labels must be identical; otherwise the metric's
    labels must include the given ones. Raises MetricNotFoundError.
    """
    labels = labels or {}
    for metric in metrics:
        if metric.name != name:
            continue
        if strict_label_matching and len(metric.labels) != len(labels):
            continue
        if all(metric.labels.get(key, "") == value for key, value in labels.items()):
            return metric
    raise MetricNotFoundError("no matching metric found")