# fastxdr/semantics/passes/collect.py
"""Namespace collection (Phase 0).

XDR puts constants, enum values and type names in one flat namespace; the
generated module does the same. This pass registers every name before any
resolution starts, so a reference never depends on declaration order.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Union

from fastxdr.internals.report import Reporter, Span
from fastxdr.internals import errors as er
from fastxdr.internals.errors import ERR
from fastxdr.semantics.ast import (
    Specification, ConstDef, EnumDef, EnumVariant, StructDef, TypedefDef, UnionDef, Declaration,
)
from fastxdr.semantics.typesys import Kind, PREDEFINED_CONSTANTS


@dataclass
class Symbol:
    name: str
    kind: Kind
    definition: Optional[Union[ConstDef, EnumDef, EnumVariant, StructDef, TypedefDef, UnionDef]]
    span: Optional[Span] = None
    owner: Optional[str] = None      # enclosing enum of an enum value


@dataclass
class SymbolTable:
    """Every top-level name, in declaration order."""
    by_name: Dict[str, Symbol] = field(default_factory=dict)
    order: List[str] = field(default_factory=list)

    def get(self, name: str) -> Optional[Symbol]:
        return self.by_name.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self.by_name

    def of_kind(self, *kinds: Kind) -> List[Symbol]:
        return [self.by_name[n] for n in self.order if self.by_name[n].kind in kinds]

    @property
    def types(self) -> List[Symbol]:
        return [self.by_name[n] for n in self.order if self.by_name[n].kind.is_type]


class NamespaceCollector:
    """Collector for the shared namespace.

    Validates:
    - No name defined twice, across constants, enum values and types
    - No duplicate field names within a struct
    """

    def __init__(self, reporter: Reporter, table: SymbolTable) -> None:
        self.r = reporter
        self.table = table

    def collect(self, root: Specification) -> None:
        for name in PREDEFINED_CONSTANTS:
            self.table.by_name[name] = Symbol(name, Kind.CONST, None)

        for defn in root.definitions:
            if isinstance(defn, ConstDef):
                self._register(defn.name, Kind.CONST, defn, defn.name_span)
            elif isinstance(defn, EnumDef):
                self._register(defn.name, Kind.ENUM, defn, defn.name_span)
                for variant in defn.variants:
                    self._register(variant.name, Kind.ENUM_VALUE, variant, variant.name_span, owner=defn.name)
            elif isinstance(defn, StructDef):
                self._register(defn.name, Kind.STRUCT, defn, defn.name_span)
                self._check_fields(defn.name, defn.fields)
            elif isinstance(defn, TypedefDef):
                self._register(defn.name, Kind.TYPEDEF, defn, defn.name_span)
            elif isinstance(defn, UnionDef):
                self._register(defn.name, Kind.UNION, defn, defn.name_span)

    def _register(self, name: str, kind: Kind, defn, span: Optional[Span], owner: Optional[str] = None) -> None:
        prev = self.table.by_name.get(name)
        if prev is not None:
            where = str(prev.span) if prev.span else "a predefined constant"
            er.emit(self.r, ERR.CE0301, span, name=name, prev=where)
            return
        self.table.by_name[name] = Symbol(name, kind, defn, span, owner)
        self.table.order.append(name)

    def _check_fields(self, owner: str, fields: List[Declaration]) -> None:
        seen: Set[str] = set()
        for decl in fields:
            if decl.name is None:
                continue
            if decl.name in seen:
                er.emit(self.r, ERR.CE0302, decl.name_span or decl.loc, field=decl.name, owner=owner)
                continue
            seen.add(decl.name)
