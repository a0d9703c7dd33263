# nodeprobe

Small building blocks for watching the health of a machine.

- **OS facts**: `nodeprobe.osinfo.get_os_version()` returns a short version
  string such as `ubuntu 16.04.6 LTS (Xenial Xerus)` on Linux (read from
  `/etc/os-release`), `darwin 13.5` on macOS, or a `windows ...` string built
  from the registry on Windows. `os_version_from_release(path)` does the same
  for any os-release file and raises `ValueError` for an unsupported `ID`;
  `read_os_release(path)` returns the file as a dict.
  `get_uptime_duration()` returns the time since boot as a `timedelta` in whole
  seconds.
- **Log start times**: `nodeprobe.timeutil.get_start_time(now, uptime,
  lookback, delay)` works out where a log watcher should begin reading: boot
  time pushed later by `delay`, but never earlier than `now - lookback`.
  Durations are strings such as `"7s"` or `"1h30m"`, parsed by
  `parse_duration`; an empty string disables that setting, and a bad string
  raises `ValueError`.
- **Metrics**: `nodeprobe.metrics.metric.new_int64_metric` and
  `new_float64_metric` create metrics whose measurements are aggregated
  in-process with `Aggregation.LAST_VALUE` or `Aggregation.SUM`, split by tag
  values. `get_view_rows(view_name)` returns the aggregated rows.
  `METRIC_MAP` maps view names back to `MetricID` values.
  `nodeprobe.metrics.fakes.FakeInt64Metric` is an in-memory stand-in for
  tests, with `record` and `list_metrics`.
- **Prometheus text**: `nodeprobe.metrics.prometheus.parse_prometheus_metrics`
  turns a text exposition page of counters and gauges into
  `Float64MetricRepresentation` records, and `get_float64_metric` finds one by
  name and labels, either with identical labels or as a label subset.
- **Kernel facts**: `nodeprobe.system.cmdline_args.cmdline_args` parses a
  kernel command line file such as `/proc/cmdline`, quoted values included.
  `nodeprobe.system.module_stats.modules` parses `/proc/modules`, including
  the proprietary (P), out-of-tree (O) and unsigned (E) taint flags, and
  `contains_module` looks a module up by name.
- **Processes**: `nodeprobe.procexec.build_command(name, *args)` returns a
  `Command`. Its `start()` runs the program in its own session on POSIX, so
  `kill()` takes its children down with it. On Windows `kill()` uses
  `TASKKILL /T /F`, and `.cmd`, `.bat` and `.ps1` scripts run through
  `cmd.exe` or PowerShell (`powershell(*args)`). `kill()` and `wait()` on a
  command that was never started raise `ProcessNotStartedError`.
- **Lifecycles**: `nodeprobe.tomb.Tomb` lets one thread ask a worker to stop
  (`stop()`) and block until the worker calls `done()`. The worker watches the
  event returned by `stopping()`.
- **HTTP responses**: `nodeprobe.httputil.write_json(handler, obj)` and
  `write_error(handler, error)` write a JSON `200` or a plain-text `500`
  through an `http.server.BaseHTTPRequestHandler`.
- **Version**: `nodeprobe.version.version()` and `print_version()`.

## Installing

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## Examples

Parse a metrics page and look up a value:

```python
from nodeprobe.metrics.prometheus import parse_prometheus_metrics, get_float64_metric

text = """\
# TYPE problem_counter counter
problem_counter{reason="OOMKilling"} 1
"""
metrics = parse_prometheus_metrics(text)
metric = get_float64_metric(metrics, "problem_counter", {"reason": "OOMKilling"}, True)
print(metric.value)  # 1.0
```

Read the kernel command line:

```python
from nodeprobe.system.cmdline_args import cmdline_args

for arg in cmdline_args("/proc/cmdline"):
    print(arg)  # {"key":"console","value":"ttyS0"}
```

Record a counter:

```python
from nodeprobe.metrics.metric import Aggregation, MetricID, get_view_rows, new_int64_metric

counter = new_int64_metric(
    MetricID.PROBLEM_COUNTER, "problem_counter", "Problems seen", "1", Aggregation.SUM, ["reason"]
)
counter.record({"reason": "OOMKilling"}, 1)
counter.record({"reason": "OOMKilling"}, 1)
print(get_view_rows("problem_counter"))  # one row with value 2
```

## Bandwidth check

`nodeprobe-nethealth` downloads a blob over HTTP, checks that its length
equals `--length`, measures the bandwidth against `--minimum` (MiB/sec), and
compares the SHA-512 of the data with the hash in the file at `--hashurl`
(contents of the form `<label> <hash>`). It gives up after `--timeout`
seconds. It exits with status 1 on a timeout, a length mismatch, a slow link
or a hash mismatch, so it fits in shell scripts. The default URLs are
placeholders; pass `--url` and `--hashurl` for a real test blob:

```
nodeprobe-nethealth --url http://host.example.com/64MB.bin --hashurl http://host.example.com/sha512.txt
nodeprobe-nethealth --help
```

The same check is available as `nodeprobe.nethealth.run_check(url, hash_url,
length, timeout, minimum)`, which returns a `CheckResult` or raises
`NetHealthError`.

## What it does not do

nodeprobe is a set of helpers, not a running detector. It has no daemon that
watches logs or reports problems, and no HTTP endpoint that exports the
metrics it records: recorded views live only in the current process and are
read back with `get_view_rows`.