# fastxdr/semantics/passes/resolve.py
"""Type resolution.

Looks up every type mention, evaluates every length and case label, and
produces the Resolved* definitions. Also hosts the typedef canonicalizer and
the checks that need canonical forms (nested arrays).
"""
from __future__ import annotations
import logging
from typing import Dict, List, Optional, Tuple

from fastxdr.internals.report import Reporter
from fastxdr.internals import errors as er
from fastxdr.internals.errors import ERR
from fastxdr.semantics.ast import (
    Specification, Declaration, InlineBody, EnumDef, StructDef, TypedefDef, UnionDef,
)
from fastxdr.semantics.passes.collect import SymbolTable
from fastxdr.semantics.passes.const_eval import ConstantEvaluator
from fastxdr.semantics.passes.cycles import DependencyGraph
from fastxdr.semantics.typesys import (
    Arity, BuiltinType, Canonical, Kind, LENGTH_RANGE,
    ResolvedDecl, ResolvedDefinition, ResolvedEnum, ResolvedStruct, ResolvedTypedef,
    ResolvedArm, ResolvedUnion, member_declarations,
)

logger = logging.getLogger(__name__)


class TypeResolver:
    def __init__(self, reporter: Reporter, table: SymbolTable, evaluator: ConstantEvaluator) -> None:
        self.r = reporter
        self.table = table
        self.evaluator = evaluator
        self.definitions: Dict[str, ResolvedDefinition] = {}
        # (source declaration, resolved declaration) for every array/vector, for later checks
        self.arrays: List[Tuple[Declaration, ResolvedDecl]] = []

    def resolve(self, spec: Specification) -> Dict[str, ResolvedDefinition]:
        for defn in spec.definitions:
            sym = self.table.get(defn.name)
            if sym is None or sym.definition is not defn:
                continue  # duplicate, reported by the collector
            resolved: Optional[ResolvedDefinition] = None
            if isinstance(defn, EnumDef):
                resolved = self._resolve_enum(defn)
            elif isinstance(defn, StructDef):
                resolved = self._resolve_struct(defn)
            elif isinstance(defn, TypedefDef):
                resolved = self._resolve_typedef(defn)
            elif isinstance(defn, UnionDef):
                resolved = self._resolve_union(defn)
            if resolved is not None:
                self.definitions[defn.name] = resolved
        logger.debug("resolved %d type definitions", len(self.definitions))
        return self.definitions

    # ---------- declarations ----------

    def resolve_decl(self, decl: Declaration, allow_void: bool = False) -> Optional[ResolvedDecl]:
        ty = decl.ty
        base = ty.base

        if isinstance(base, InlineBody):
            er.emit(self.r, ERR.CE0602, base.loc or decl.loc, kind=base.kind)
            return None
        if base is BuiltinType.QUADRUPLE:
            er.emit(self.r, ERR.CE0603, ty.loc or decl.loc)
            return None
        if base is BuiltinType.VOID and not allow_void:
            er.emit(self.r, ERR.CE0604, decl.loc)
            return None
        if isinstance(base, str):
            sym = self.table.get(base)
            if sym is None:
                er.emit(self.r, ERR.CE0201, ty.loc or decl.loc, name=base)
                return None
            if not sym.kind.is_type:
                er.emit(self.r, ERR.CE0203, ty.loc or decl.loc, name=base, kind=str(sym.kind))
                return None

        length: Optional[int] = None
        if ty.size is not None:
            length = self.evaluator.evaluate(ty.size)
            if length is None:
                return None
            lo, hi = LENGTH_RANGE
            if not lo <= length <= hi:
                er.emit(self.r, ERR.CE0703, ty.size.loc, name=decl.name, value=length)
                return None

        resolved = ResolvedDecl(decl.name, base, ty.arity, length)
        if ty.arity in (Arity.FIXED, Arity.VARIABLE) and isinstance(base, str):
            self.arrays.append((decl, resolved))
        return resolved

    def _resolve_enum(self, defn: EnumDef) -> Optional[ResolvedEnum]:
        variants = []
        for variant in defn.variants:
            sym = self.table.get(variant.name)
            if sym is None or sym.definition is not variant:
                continue
            value = self.evaluator.value_of(variant.name)
            if value is not None:
                variants.append((variant.name, value))
        return ResolvedEnum(defn.name, tuple(variants))

    def _resolve_struct(self, defn: StructDef) -> Optional[ResolvedStruct]:
        fields = [self.resolve_decl(f) for f in defn.fields]
        if any(f is None for f in fields):
            return None
        return ResolvedStruct(defn.name, tuple(fields))

    def _resolve_typedef(self, defn: TypedefDef) -> Optional[ResolvedTypedef]:
        decl = self.resolve_decl(defn.decl)
        if decl is None:
            return None
        return ResolvedTypedef(defn.name, decl)

    def _resolve_union(self, defn: UnionDef) -> Optional[ResolvedUnion]:
        discriminant = self.resolve_decl(defn.discriminant)
        arms: List[ResolvedArm] = []
        ok = discriminant is not None
        for arm in defn.arms:
            decl = self.resolve_decl(arm.decl, allow_void=True)
            labels = [self.evaluator.evaluate(v) for v in arm.labels]
            if decl is None or any(v is None for v in labels):
                ok = False
                continue
            names = tuple(getattr(v, "name", None) for v in arm.labels)
            arms.append(ResolvedArm(tuple(labels), names, decl))
        default = None
        if defn.default is not None:
            default = self.resolve_decl(defn.default, allow_void=True)
            ok = ok and default is not None
        if not ok:
            return None
        return ResolvedUnion(defn.name, discriminant, tuple(arms), default)

    # ---------- graph ----------

    def build_graph(self) -> DependencyGraph:
        """Dependency graph over the resolved definitions, in declaration order."""
        graph = DependencyGraph()
        for name, defn in self.definitions.items():
            graph.add_node(name)
            for decl in member_declarations(defn):
                if decl.type_name is not None:
                    graph.add_dependency(name, decl.type_name, optional=decl.arity is Arity.OPTIONAL)
        logger.debug("%r", graph)
        return graph

    def check_cycles(self, graph: DependencyGraph) -> bool:
        """Report a type that holds itself by value. Returns True when acyclic."""
        cycle = graph.find_cycle()
        if not cycle:
            return True
        sym = self.table.get(cycle[0])
        er.emit(self.r, ERR.CE0401, sym.span if sym else None,
                name=cycle[0], cycle=" -> ".join(cycle + [cycle[0]]))
        return False

    def check_arrays(self, canon: "Canonicalizer") -> None:
        """Reject arrays whose element type is itself an array."""
        for decl, resolved in self.arrays:
            elem = canon.of_type(resolved.type_name)
            if elem.is_array:
                er.emit(self.r, ERR.CE0601, decl.ty.loc or decl.loc, elem=resolved.type_name)


class Canonicalizer:
    """Follows scalar typedef links to the underlying representation.

    Results are cached per type name. Only valid once the value-edge graph is
    known to be acyclic: scalar typedef links are value edges.
    """

    def __init__(self, definitions: Dict[str, ResolvedDefinition]) -> None:
        self.definitions = definitions
        self._cache: Dict[str, Canonical] = {}

    def of_type(self, name: str) -> Canonical:
        cached = self._cache.get(name)
        if cached is not None:
            return cached
        defn = self.definitions[name]
        if isinstance(defn, ResolvedTypedef):
            result = self.of_decl(defn.decl)
        else:
            result = Canonical(name)
        self._cache[name] = result
        return result

    def of_decl(self, decl: ResolvedDecl) -> Canonical:
        if decl.arity is Arity.SCALAR and decl.type_name is not None:
            return self.of_type(decl.type_name)
        return Canonical(decl.base, decl.arity, decl.length)

    def kind_of(self, canonical: Canonical) -> Optional[Kind]:
        if isinstance(canonical.base, str):
            defn = self.definitions[canonical.base]
            return {
                ResolvedEnum: Kind.ENUM,
                ResolvedStruct: Kind.STRUCT,
                ResolvedUnion: Kind.UNION,
                ResolvedTypedef: Kind.TYPEDEF,
            }[type(defn)]
        return None
