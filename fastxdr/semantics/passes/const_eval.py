# fastxdr/semantics/passes/const_eval.py
"""Compile-time constant evaluation.

Constants, enum values, array lengths and case labels are either integer
literals or names of other constants/enum values. Names resolve transitively,
memoized per name, with an evaluation stack for cycle detection.

Emits:
    CE0201: Reference to an unknown name
    CE0202: Reference to a type where a value is expected
    CE0402: Circular constant dependency
    CE0701: Constant outside the signed 64-bit range
    CE0702: Enum value outside the signed 32-bit range
    CE0303: Two values of one enum share a number
"""
from __future__ import annotations
from typing import Dict, List, Optional

from fastxdr.internals.report import Reporter, Span
from fastxdr.internals import errors as er
from fastxdr.internals.errors import ERR
from fastxdr.semantics.ast import Value, Literal, ConstRef, ConstDef, EnumDef, EnumVariant
from fastxdr.semantics.passes.collect import SymbolTable
from fastxdr.semantics.typesys import Kind, CONST_RANGE, ENUM_RANGE, PREDEFINED_CONSTANTS

# Marks a name whose evaluation already failed and was reported.
_FAILED = object()


class ConstantEvaluator:
    """Resolves values to Python ints.

    ``evaluate`` returns None when the value cannot be resolved; the reason has
    already been reported through the reporter.
    """

    def __init__(self, reporter: Reporter, table: SymbolTable):
        self.reporter = reporter
        self.table = table
        self.values: Dict[str, object] = dict(PREDEFINED_CONSTANTS)
        self.evaluation_stack: List[str] = []  # For cycle detection

    def evaluate(self, value: Value) -> Optional[int]:
        if isinstance(value, Literal):
            return value.value
        if isinstance(value, ConstRef):
            return self._evaluate_ref(value)
        er.raise_internal_error("CE0001", message=f"unexpected value node {value!r}")

    def value_of(self, name: str) -> Optional[int]:
        """Value of a constant or enum value by name (already known to exist)."""
        cached = self.values.get(name)
        if cached is _FAILED:
            return None
        if cached is not None:
            return cached  # type: ignore[return-value]

        sym = self.table.get(name)
        defn = sym.definition
        if name in self.evaluation_stack:
            cycle = self.evaluation_stack[self.evaluation_stack.index(name):] + [name]
            er.emit(self.reporter, ERR.CE0402, sym.span, name=name, cycle=" -> ".join(cycle))
            for n in cycle:
                self.values[n] = _FAILED
            return None

        self.evaluation_stack.append(name)
        try:
            result = self.evaluate(defn.value)
        finally:
            self.evaluation_stack.pop()

        if self.values.get(name) is _FAILED:
            return None
        if result is not None:
            result = self._check_range(sym.kind, name, result, defn.value.loc or sym.span)
        self.values[name] = _FAILED if result is None else result
        return result

    def resolve_all(self) -> Dict[str, int]:
        """Evaluate every user constant and enum value.

        Returns the resolved values of user constants in declaration order.
        """
        constants: Dict[str, int] = {}
        for sym in self.table.of_kind(Kind.CONST, Kind.ENUM_VALUE):
            value = self.value_of(sym.name)
            if sym.kind is Kind.CONST and value is not None:
                constants[sym.name] = value
        for sym in self.table.of_kind(Kind.ENUM):
            self._check_enum_unique(sym.definition)
        return constants

    # ---------- helpers ----------

    def _evaluate_ref(self, ref: ConstRef) -> Optional[int]:
        sym = self.table.get(ref.name)
        if sym is None:
            er.emit(self.reporter, ERR.CE0201, ref.loc, name=ref.name)
            return None
        if not sym.kind.is_value:
            er.emit(self.reporter, ERR.CE0202, ref.loc, name=ref.name, kind=str(sym.kind))
            return None
        if sym.definition is None:
            return PREDEFINED_CONSTANTS[ref.name]
        return self.value_of(ref.name)

    def _check_range(self, kind: Kind, name: str, value: int, span: Optional[Span]) -> Optional[int]:
        lo, hi = ENUM_RANGE if kind is Kind.ENUM_VALUE else CONST_RANGE
        if lo <= value <= hi:
            return value
        code = ERR.CE0702 if kind is Kind.ENUM_VALUE else ERR.CE0701
        er.emit(self.reporter, code, span, name=name, value=value)
        return None

    def _check_enum_unique(self, enum: EnumDef) -> None:
        seen: Dict[int, EnumVariant] = {}
        for variant in enum.variants:
            sym = self.table.get(variant.name)
            if sym is None or sym.definition is not variant:
                continue  # duplicate name, already reported
            value = self.values.get(variant.name)
            if not isinstance(value, int):
                continue
            prev = seen.get(value)
            if prev is not None:
                er.emit(self.reporter, ERR.CE0303, variant.name_span, enum=enum.name,
                        value=value, prev=prev.name, name=variant.name)
                continue
            seen[value] = variant
