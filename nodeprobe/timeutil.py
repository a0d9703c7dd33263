"""Duration parsing and log start time computation."""

import re
from datetime import datetime, timedelta
from decimal import Decimal

_UNITS = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,
    "μs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}

_COMPONENT = re.compile(r"(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)")

_MAX_NANOS = 2**63 - 1


def parse_duration(text: str) -> timedelta:
    """Parse a duration such as "300ms", "-1.5h" or "2h45m".

    Fractions of a microsecond are truncated. Raises ValueError on bad input.
    """
    s = text
    negative = False
    if s and s[0] in "+-":
        negative = s[0] == "-"
        s = s[1:]
    if s == "0":
        return timedelta(0)
    if not s:
        raise ValueError(f"invalid duration {text!r}")

    total = Decimal(0)
    pos = 0
    while pos < len(s):
        match = _COMPONENT.match(s, pos)
        if match is None:
            raise ValueError(f"invalid duration {text!r}")
        total += Decimal(match.group(1)) * _UNITS[match.group(2)]
        pos = match.end()

    nanos = int(total)
    limit = _MAX_NANOS + 1 if negative else _MAX_NANOS
    if nanos > limit:
        raise ValueError(f"invalid duration {text!r}")
    micros = nanos // 1000
    return timedelta(microseconds=-micros if negative else micros)


def get_start_time(now: datetime, uptime: timedelta, lookback: str, delay: str) -> datetime:
    """Compute when log watching should start.

    The start is boot time, pushed later by ``delay`` and never earlier
    than ``now - lookback``. Empty strings disable delay or lookback.
    """
    start = now - uptime

    # A delay past the uptime places the start after now, which is intended.
    if delay:
        try:
            start += parse_duration(delay)
        except ValueError as exc:
            raise ValueError(f"failed to parse delay duration {delay!r}: {exc}") from exc

    lookback_start = now
    if lookback:
        try:
            lookback_start = now - parse_duration(lookback)
        except ValueError as exc:
            raise ValueError(f"failed to parse lookback duration {lookback!r}: {exc}") from exc

    return max(start, lookback_start)