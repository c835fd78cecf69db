# fastxdr/semantics/passes/layout.py
"""Wire layout and opacity analysis.

Sizes are computed in one pass over the value-edge graph in topological
order (dependencies first), which the cycle check guarantees exists.

Opacity ("holds raw opaque bytes somewhere") is the reverse reachability of
the directly opaque types over all edges, optional ones included: a type
that may hold opaque bytes behind a pointer still has to be generic over the
byte storage.
"""
from __future__ import annotations
import logging
from typing import Dict, Optional, Set

from fastxdr.internals import errors as er
from fastxdr.semantics.passes.cycles import DependencyGraph
from fastxdr.semantics.passes.resolve import Canonicalizer
from fastxdr.semantics.passes.unions import finite_domain
from fastxdr.semantics.type_index import TypeIndex, decl_size
from fastxdr.semantics.typesys import (
    Canonical, Fixed, Kind, ResolvedDefinition, ResolvedEnum, ResolvedStruct, ResolvedTypedef,
    ResolvedType, ResolvedUnion, Size, VARIABLE, member_declarations,
)

logger = logging.getLogger(__name__)

ENUM_SIZE = 4


class LayoutAnalyzer:
    def __init__(self, definitions: Dict[str, ResolvedDefinition], graph: DependencyGraph,
                 canon: Canonicalizer) -> None:
        self.definitions = definitions
        self.graph = graph
        self.canon = canon
        self.sizes: Dict[str, Size] = {}

    def analyze(self, constants: Dict[str, int]) -> TypeIndex:
        order = self.graph.topological_order()
        if order is None:
            er.raise_internal_error("CE0001", message="layout requested for a cyclic type graph")

        for name in order:
            self.sizes[name] = self._size_of_definition(self.definitions[name])

        opaque = self.opaque_types()
        logger.debug("layout: %d fixed, %d opaque-bearing",
                     sum(isinstance(s, Fixed) for s in self.sizes.values()), len(opaque))

        types = []
        for name, defn in self.definitions.items():
            types.append(ResolvedType(
                name=name,
                kind=self.canon.kind_of(Canonical(name)),
                definition=defn,
                canonical=self.canon.of_type(name),
                size=self.sizes[name],
                opaque=name in opaque,
                dependencies=frozenset(self.graph.get_dependencies(name)),
            ))
        return TypeIndex.build(constants, types)

    def opaque_types(self) -> Set[str]:
        direct = {
            name for name, defn in self.definitions.items()
            if any(d.is_opaque for d in member_declarations(defn))
        }
        return self.graph.reversed().get_transitive_closure(direct)

    # ---------- sizes ----------

    def _decl_size(self, decl) -> Size:
        return decl_size(decl, self.sizes.__getitem__)

    def _size_of_definition(self, defn: ResolvedDefinition) -> Size:
        if isinstance(defn, ResolvedEnum):
            return Fixed(ENUM_SIZE)
        if isinstance(defn, ResolvedTypedef):
            return self._decl_size(defn.decl)
        if isinstance(defn, ResolvedStruct):
            total = 0
            for f in defn.fields:
                size = self._decl_size(f)
                if not isinstance(size, Fixed):
                    return VARIABLE
                total += size.size
            return Fixed(total)
        if isinstance(defn, ResolvedUnion):
            return self._union_size(defn)
        er.raise_internal_error("CE0001", message=f"unknown definition {defn!r}")

    def _union_size(self, union: ResolvedUnion) -> Size:
        disc = self._decl_size(union.discriminant)
        arm_sizes = {self._decl_size(d) for d in union.declarations}
        if not isinstance(disc, Fixed) or len(arm_sizes) != 1:
            return VARIABLE
        (arm,) = arm_sizes
        if not isinstance(arm, Fixed) or not self._exhaustive(union):
            return VARIABLE
        return Fixed(disc.size + arm.size)

    def _exhaustive(self, union: ResolvedUnion) -> bool:
        """True when every decodable discriminant selects an arm."""
        if union.default is not None:
            return True
        domain = self.canon.of_decl(union.discriminant)
        enum: Optional[ResolvedEnum] = None
        if self.canon.kind_of(domain) is Kind.ENUM:
            enum = self.definitions[domain.base]  # type: ignore[assignment]
        values = finite_domain(domain, enum)
        return values is not None and set(values) <= union.labels
