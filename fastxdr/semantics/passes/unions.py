# fastxdr/semantics/passes/unions.py
"""Union discriminant validation."""
from __future__ import annotations
from typing import Dict, List, Optional

from fastxdr.internals.report import Reporter
from fastxdr.internals import errors as er
from fastxdr.internals.errors import ERR
from fastxdr.semantics.ast import Specification, UnionDef, ConstRef, Value
from fastxdr.semantics.passes.collect import SymbolTable
from fastxdr.semantics.passes.resolve import Canonicalizer
from fastxdr.semantics.typesys import (
    Arity, BuiltinType, Canonical, DISCRIMINANT_TYPES, INTEGER_RANGES, Kind,
    ResolvedDefinition, ResolvedEnum, ResolvedUnion,
)


class UnionValidator:
    """Checks every union against its discriminant's domain.

    - The discriminant is int, unsigned int, hyper, unsigned hyper, bool or
      an enum, possibly through typedefs, and never an array or optional.
    - Every case label is a value of that domain; an enum-valued label must
      name a value of the discriminant's own enum.
    - No label selects two arms.
    - No arm is named like the discriminant.

    Without a default arm, enum values left unhandled only produce a
    warning: decoding them is a runtime error.
    """

    def __init__(self, reporter: Reporter, table: SymbolTable,
                 definitions: Dict[str, ResolvedDefinition], canon: Canonicalizer) -> None:
        self.r = reporter
        self.table = table
        self.definitions = definitions
        self.canon = canon

    def validate(self, spec: Specification) -> None:
        for union in spec.unions:
            resolved = self.definitions.get(union.name)
            if isinstance(resolved, ResolvedUnion) and self.table.get(union.name).definition is union:
                self._validate_union(union, resolved)

    def _validate_union(self, union: UnionDef, resolved: ResolvedUnion) -> None:
        disc = resolved.discriminant
        domain = self.canon.of_decl(disc)
        enum = self._enum_of(domain)

        if domain.arity is not Arity.SCALAR or (enum is None and domain.base not in DISCRIMINANT_TYPES):
            er.emit(self.r, ERR.CE0501, union.discriminant.ty.loc or union.discriminant.loc,
                    union=union.name, found=str(disc))
            return

        seen: Dict[int, str] = {}
        for arm_ast, arm in zip(union.arms, resolved.arms):
            for label_ast, value in zip(arm_ast.labels, arm.labels):
                if not self._in_domain(label_ast, value, domain, enum):
                    er.emit(self.r, ERR.CE0502, label_ast.loc, label=str(label_ast), ty=str(disc.base))
                    continue
                if value in seen:
                    er.emit(self.r, ERR.CE0503, label_ast.loc, label=str(label_ast), union=union.name)
                    continue
                seen[value] = str(label_ast)

        arm_decls = [(a.decl, r.decl) for a, r in zip(union.arms, resolved.arms)]
        if union.default is not None:
            arm_decls.append((union.default, resolved.default))
        for decl_ast, decl in arm_decls:
            if decl.name is not None and decl.name == disc.name:
                er.emit(self.r, ERR.CE0504, decl_ast.name_span or decl_ast.loc,
                        field=decl.name, union=union.name)

        if enum is not None and union.default is None:
            missing = [name for name, value in enum.variants if value not in seen]
            if missing:
                er.emit(self.r, ERR.CW0501, union.name_span, union=union.name,
                        missing=", ".join(missing))

    def _enum_of(self, domain: Canonical) -> Optional[ResolvedEnum]:
        if domain.arity is Arity.SCALAR and self.canon.kind_of(domain) is Kind.ENUM:
            return self.definitions[domain.base]  # type: ignore[return-value]
        return None

    def _in_domain(self, label: Value, value: int, domain: Canonical,
                   enum: Optional[ResolvedEnum]) -> bool:
        if enum is not None:
            if isinstance(label, ConstRef):
                sym = self.table.get(label.name)
                if sym is not None and sym.kind is Kind.ENUM_VALUE and sym.owner != enum.name:
                    return False
            return value in enum.values
        lo, hi = INTEGER_RANGES[domain.base]  # type: ignore[index]
        return lo <= value <= hi


def finite_domain(domain: Canonical, enum: Optional[ResolvedEnum]) -> Optional[List[int]]:
    """All discriminant values when the domain is finite (enum or bool), else None."""
    if enum is not None:
        return sorted(enum.values)
    if domain.arity is Arity.SCALAR and domain.base is BuiltinType.BOOL:
        return [0, 1]
    return None
