"""
Python identifiers for XDR names.

XDR identifiers are C identifiers, so most pass through unchanged. A name is
suffixed with '_' when it is a Python keyword or would collide with something
the generated module relies on:

- MEMBER_RESERVED: attributes every generated class defines. Fields and
  union arm attributes may not shadow them.
- ENUM_RESERVED: additionally the names enum.Enum keeps for itself.
- GLOBAL_RESERVED: module-level names the generated code reads (import
  aliases, method parameters, builtins used in size expressions).
"""
from __future__ import annotations
import keyword
from typing import List, Optional, Sequence

from fastxdr.semantics.typesys import ResolvedArm, ResolvedEnum

MEMBER_RESERVED = frozenset({
    "pack", "unpack", "encode", "decode", "wire_size",
    "WIRE_SIZE", "STRICT_PADDING", "CASES", "DEFAULT", "variant",
})

ENUM_RESERVED = MEMBER_RESERVED | {"mro", "name", "value"}

GLOBAL_RESERVED = frozenset({
    "annotations", "_xdr", "_dc", "_t",
    "w", "r", "v", "self", "cls", "_disc",
    "_node", "_nodes", "_next", "_other", "_parts", "_size", "_tails", "_values",
    "int", "float", "bool", "str", "len", "sum",
})

DEFAULT_VARIANT = "default"


def _safe(name: str, reserved: frozenset) -> str:
    if keyword.iskeyword(name) or name in reserved:
        return name + "_"
    return name


def global_name(name: str) -> str:
    return _safe(name, GLOBAL_RESERVED)


def member_name(name: str) -> str:
    return _safe(name, MEMBER_RESERVED)


def enum_member_name(name: str) -> str:
    return _safe(name, ENUM_RESERVED)


def variant_name(arm: ResolvedArm, enum: Optional[ResolvedEnum]) -> str:
    """Attribute name of a union arm on the union's base class.

    Named after the first label as written when it is a name, else after the
    enum variant with that value, else ``case_<n>`` (``case_neg_<n>`` for a
    negative label).
    """
    label, spelled = arm.labels[0], arm.label_names[0]
    if spelled is not None:
        return member_name(spelled)
    if enum is not None:
        variant = enum.variant_for(label)
        if variant is not None:
            return member_name(variant)
    if label < 0:
        return f"case_neg_{-label}"
    return f"case_{label}"


def variant_names(arms: Sequence[ResolvedArm], enum: Optional[ResolvedEnum], has_default: bool) -> List[str]:
    """Attribute names of a union's explicit arms, unique within the union.

    A name already taken, by an earlier arm or by the default arm, gets '_'
    appended until it is free: ``case 1`` and ``case case_1`` (a constant
    spelled like the generated name) become ``case_1`` and ``case_1_``.
    """
    taken = {DEFAULT_VARIANT} if has_default else set()
    names = []
    for arm in arms:
        name = variant_name(arm, enum)
        while name in taken:
            name += "_"
        taken.add(name)
        names.append(name)
    return names
