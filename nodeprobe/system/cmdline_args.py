"""Kernel command line parameters, as found in /proc/cmdline."""

import json
from dataclasses import asdict, dataclass
from typing import Iterator, List

from nodeprobe.system.common import read_file_into_lines


@dataclass(frozen=True)
class CmdlineArg:
    """One kernel parameter; ``value`` is empty for bare flags."""

    key: str
    value: str = ""

    def __str__(self) -> str:
        return json.dumps(asdict(self), separators=(",", ":"))


def _split_fields(line: str) -> Iterator[str]:
    """Split on spaces, except for spaces inside double quotes."""
    current: List[str] = []
    within_quotes = False
    for ch in line:
        if ch == '"':
            within_quotes = not within_quotes
            current.append(ch)
        elif ch == " " and not within_quotes:
            if current:
                yield "".join(current)
                current = []
        else:
            current.append(ch)
    if current:
        yield "".join(current)


def cmdline_args(path) -> List[CmdlineArg]:
    """Parse the kernel command line stored in the file at ``path``.

    Raises OSError when the file cannot be read and ValueError when it is empty.
    """
    try:
        lines = read_file_into_lines(path)
    except OSError as exc:
        raise OSError(f"error reading the file {path}, {exc}") from exc
    if not lines:
        raise ValueError("no lines are returned")

    result = []
    for word in _split_fields(lines[0]):
        # Words that begin with a quote are not keys.
        if word.startswith('"'):
            continue
        tokens = word.split("=")
        if len(tokens) < 2:
            result.append(CmdlineArg(tokens[0]))
        else:
            result.append(CmdlineArg(tokens[0], tokens[1].strip("\"'")))
    return result