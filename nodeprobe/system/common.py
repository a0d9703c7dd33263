"""Shared helpers for reading system information files."""

from pathlib import Path
from typing import List


def read_file_into_lines(filename) -> List[str]:
    """Return the lines of a file without their line endings.

    Lines are split on newlines only; a carriage return that ends a line is
    dropped. An empty file gives an empty list. Raises OSError when the file
    cannot be read.
    """
    text = Path(filename).read_bytes().decode("utf-8", errors="replace")
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]