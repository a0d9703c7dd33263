"""Loaded kernel modules, as found in /proc/modules."""

import json
import re
from dataclasses import dataclass
from typing import Iterable, List

from nodeprobe.system.common import read_file_into_lines

_UINT = re.compile(r"[0-9]+")
_UINT64_LIMIT = 2**64


@dataclass(frozen=True)
class Module:
    """A kernel module, its instance count and its taint flags."""

    module_name: str
    instances: int = 0
    proprietary: bool = False
    out_of_tree: bool = False
    unsigned: bool = False

    def __str__(self) -> str:
        return json.dumps(
            {
                "moduleName": self.module_name,
                "instances": self.instances,
                "proprietary": self.proprietary,
                "outOfTree": self.out_of_tree,
                "unsigned": self.unsigned,
            },
            separators=(",", ":"),
        )


def _parse_instances(text: str) -> int:
    if _UINT.fullmatch(text):
        number = int(text)
        if number < _UINT64_LIMIT:
            return number
    return 0


def modules(path) -> List[Module]:
    """Parse the module list stored in the file at ``path``.

    A line reads ``name size instances deps state offset [taint]``; the taint
    field marks proprietary (P), out-of-tree (O) and unsigned (E) modules.
    """
    try:
        lines = read_file_into_lines(path)
    except OSError as exc:
        raise OSError(f"error reading the contents of {path}: {exc}") from exc

    result = []
    for line in lines:
        fields = line.split()
        if len(fields) < 3:
            raise ValueError(f"malformed module line: {line!r}")
        taint = fields[6] if len(fields) > 6 else ""
        result.append(
            Module(
                module_name=fields[0],
                instances=_parse_instances(fields[2]),
                proprietary="P" in taint,
                out_of_tree="O" in taint,
                unsigned="E" in taint,
            )
        )
    return result


def contains_module(key: str, values: Iterable[Module]) -> bool:
    """Tell whether a module named ``key`` is among ``values``."""
    return any(module.module_name == key for module in values)