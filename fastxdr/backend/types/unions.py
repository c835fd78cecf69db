"""
Unions become a base class plus one dataclass per arm.

    class choice(_xdr.XdrUnion):           # decodes: dispatch on the discriminant
        ...

    @choice.variant("ANSWER")
    @_dc.dataclass
    class _choice_ANSWER(choice):          # reachable as choice.ANSWER
        varname: data
        num: int = 42

Every arm carries the discriminant, stored as its canonical value (int, bool
or enum member). Arms with one label default it to that label; the default
arm carries whichever value it was decoded from. Decoding compares the
discriminant against each arm's labels in declaration order.
"""
from __future__ import annotations
from typing import TYPE_CHECKING, List, Optional, Tuple

from fastxdr.backend.expressions import fold_sizes
from fastxdr.backend.naming import DEFAULT_VARIANT, enum_member_name, global_name, member_name, variant_names
from fastxdr.semantics.typesys import BuiltinType, ResolvedDecl, ResolvedEnum, ResolvedType, ResolvedUnion

if TYPE_CHECKING:
    from fastxdr.backend.codegen_python import PythonCodegen


def label_literal(value: int, disc: ResolvedDecl, enum: Optional[ResolvedEnum]) -> str:
    """Source spelling of a discriminant value."""
    if enum is not None:
        variant = enum.variant_for(value)
        if variant is not None:
            return f"{global_name(enum.name)}.{enum_member_name(variant)}"
    if disc.base is BuiltinType.BOOL:
        return "True" if value else "False"
    return str(value)


class _Arm:
    def __init__(self, attr: str, labels: Tuple[int, ...], decl: ResolvedDecl, default: bool) -> None:
        self.attr = attr
        self.labels = labels
        self.decl = decl
        self.default = default


def emit_union(cg: "PythonCodegen", t: ResolvedType) -> None:
    defn: ResolvedUnion = t.definition  # type: ignore[assignment]
    name = global_name(t.name)
    ex = cg.expressions
    out = cg.out

    # The discriminant is read and written through its canonical type.
    canonical = cg.index.canonical(defn.discriminant)
    disc = ResolvedDecl(defn.discriminant.name, canonical.base)
    disc_field = member_name(defn.discriminant.name)
    disc_size = cg.index.size_of(disc).size  # type: ignore[union-attr]
    enum = cg.index.enum_of(defn.discriminant)

    names = variant_names(defn.arms, enum, defn.default is not None)
    arms: List[_Arm] = [
        _Arm(attr, arm.labels, arm.decl, False) for attr, arm in zip(names, defn.arms)
    ]
    if defn.default is not None:
        arms.append(_Arm(DEFAULT_VARIANT, (), defn.default, True))

    # ---------- base class: decode dispatch ----------

    with out.block(f"class {name}({cg.bases('_xdr.XdrUnion', t)}):"):
        cg.class_attributes(t)
        out.line("@classmethod")
        with out.block(f"def unpack(cls, r: _xdr.Reader) -> {name}:"):
            out.line(f"_disc = {ex.unpack_expression(disc)}")
            keyword = "if"
            for arm in arms:
                if arm.default:
                    continue
                test = " or ".join(f"_disc == {label_literal(v, disc, enum)}" for v in arm.labels)
                with out.block(f"{keyword} {test}:"):
                    out.line(f"return {_construct(cg, name, arm)}")
                keyword = "elif"
            default = next((a for a in arms if a.default), None)
            if default is not None:
                out.line(f"return {_construct(cg, name, default)}")
            else:
                out.line(f"raise _xdr.UnknownDiscriminantError({t.name!r}, _disc, r.offset - {disc_size})")
    out.blank(2)

    # ---------- one dataclass per arm ----------

    parent = f"{name}[_xdr.B]" if t.opaque else name
    explicit = sorted(defn.labels)
    for arm in arms:
        cls_name = f"_{name}_{arm.attr}"
        payload = None if arm.decl.is_void else member_name(arm.decl.name)

        out.line(f'@{name}.variant("{arm.attr}")')
        out.line("@_dc.dataclass")
        with out.block(f"class {cls_name}({parent}):"):
            if payload is not None:
                out.line(f"{payload}: {ex.annotation(arm.decl)}")
            if arm.default or len(arm.labels) != 1:
                out.line(f"{disc_field}: {ex.annotation(disc)}")
            else:
                out.line(f"{disc_field}: {ex.annotation(disc)} = {label_literal(arm.labels[0], disc, enum)}")
            out.blank()

            cases = explicit if arm.default else sorted(arm.labels)
            out.line(f"CASES = frozenset({{{', '.join(str(v) for v in cases)}}})" if cases
                     else "CASES = frozenset()")
            if arm.default:
                out.line("DEFAULT = True")
            out.blank()

            with out.block("def pack(self, w: _xdr.Writer) -> None:"):
                out.line(f"self._check_discriminant(self.{disc_field})")
                out.line(ex.pack_statement(disc, f"self.{disc_field}"))
                if payload is not None:
                    out.line(ex.pack_statement(arm.decl, f"self.{payload}"))

            if not t.is_fixed:
                out.blank()
                with out.block("def wire_size(self) -> int:"):
                    terms = [(disc_size, None)]
                    if payload is not None:
                        terms.append(ex.wire_size(arm.decl, f"self.{payload}"))
                    out.line(f"return {fold_sizes(terms)}")
        out.blank(2)

    out.line(f"del {', '.join(f'_{name}_{arm.attr}' for arm in arms)}")
    out.blank(2)
    cg.export(name)


def _construct(cg: "PythonCodegen", union: str, arm: _Arm) -> str:
    # through the union: on an arm class a field default may shadow the arm
    args = [] if arm.decl.is_void else [cg.expressions.unpack_expression(arm.decl)]
    args.append("_disc")
    return f"{union}.{arm.attr}({', '.join(args)})"
