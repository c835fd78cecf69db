"""
Enums become XdrEnum (IntEnum) subclasses.

XDR puts enum variants in the global constant namespace, so each member is
also bound at module level: ``GOOD = Status.GOOD``.
"""
from __future__ import annotations
from typing import TYPE_CHECKING

from fastxdr.backend.naming import enum_member_name, global_name
from fastxdr.semantics.typesys import ResolvedEnum, ResolvedType

if TYPE_CHECKING:
    from fastxdr.backend.codegen_python import PythonCodegen


def emit_enum(cg: "PythonCodegen", t: ResolvedType) -> None:
    defn: ResolvedEnum = t.definition  # type: ignore[assignment]
    name = global_name(t.name)
    out = cg.out

    with out.block(f"class {name}(_xdr.XdrEnum):"):
        if not defn.variants:
            out.line("pass")
        for variant, value in defn.variants:
            out.line(f"{enum_member_name(variant)} = {value}")
    out.blank(2)
    cg.export(name)

    for variant, _ in defn.variants:
        alias = global_name(variant)
        out.line(f"{alias} = {name}.{enum_member_name(variant)}")
        cg.export(alias)
    if defn.variants:
        out.blank(2)
