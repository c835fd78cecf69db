from __future__ import annotations
from dataclasses import is_dataclass, fields
from enum import Enum
from typing import Any

# Source positions are noise in a dump.
SKIPPED_FIELDS = ("loc", "name_span")


def _scalar(val: Any) -> str:
    if isinstance(val, Enum):
        return str(val)
    return repr(val)


def _pp(node: Any, indent: int) -> str:
    ind = "  " * indent
    if isinstance(node, (list, tuple)):
        return "\n".join(_pp(n, indent) for n in node)
    if not is_dataclass(node):
        return ind + _scalar(node)
    name = node.__class__.__name__
    lines = [f"{ind}{name}"]
    for f in fields(node):
        if f.name in SKIPPED_FIELDS:
            continue
        val = getattr(node, f.name)
        if is_dataclass(val) or (isinstance(val, (list, tuple)) and val):
            lines.append(f"{ind}  {f.name}:")
            lines.append(_pp(val, indent + 2))
        else:
            lines.append(f"{ind}  {f.name}: {_scalar(val)}")
    return "\n".join(lines)


def dump_ast(node: Any) -> str:
    return _pp(node, 0)
