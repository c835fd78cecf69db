"""Read-only snapshot of an analyzed specification.

Produced by the layout pass and handed to the emitter. Every container is
immutable: tuples, frozen dataclasses and MappingProxyType views.
"""
from __future__ import annotations
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Dict, Iterator, List, Mapping, Optional

from fastxdr.semantics.typesys import (
    Arity, BuiltinType, Canonical, Fixed, Kind, ResolvedDecl, ResolvedType, SCALAR_SIZES,
    Size, VARIABLE, padded,
)


def decl_size(decl: ResolvedDecl, type_size: Callable[[str], Size]) -> Size:
    """Wire size class of one declaration.

    ``type_size`` gives the size of a user type by name.
    """
    if decl.arity is Arity.OPTIONAL:
        return VARIABLE
    if decl.is_bytes:
        if decl.is_opaque and decl.arity is Arity.FIXED:
            return Fixed(padded(decl.length or 0))
        return VARIABLE
    if decl.arity is Arity.VARIABLE:
        return VARIABLE

    if isinstance(decl.base, BuiltinType):
        elem: Size = Fixed(SCALAR_SIZES[decl.base])
    else:
        elem = type_size(decl.base)
    if decl.arity is Arity.SCALAR:
        return elem
    if isinstance(elem, Fixed):
        return Fixed(elem.size * (decl.length or 0))
    return VARIABLE


@dataclass(frozen=True)
class TypeIndex:
    constants: Mapping[str, int]            # user constants, declaration order
    types: Mapping[str, ResolvedType]       # user types, declaration order

    @classmethod
    def build(cls, constants: Dict[str, int], types: List[ResolvedType]) -> "TypeIndex":
        return cls(
            constants=MappingProxyType(dict(constants)),
            types=MappingProxyType({t.name: t for t in types}),
        )

    def __getitem__(self, name: str) -> ResolvedType:
        return self.types[name]

    def __contains__(self, name: str) -> bool:
        return name in self.types

    def __iter__(self) -> Iterator[ResolvedType]:
        return iter(self.types.values())

    def of_kind(self, kind: Kind) -> List[ResolvedType]:
        return [t for t in self.types.values() if t.kind is kind]

    # ---------- per-declaration queries ----------

    def canonical(self, decl: ResolvedDecl) -> Canonical:
        if decl.arity is Arity.SCALAR and decl.type_name is not None:
            return self.types[decl.type_name].canonical
        return Canonical(decl.base, decl.arity, decl.length)

    def size_of(self, decl: ResolvedDecl) -> Size:
        return decl_size(decl, lambda name: self.types[name].size)

    def is_opaque(self, decl: ResolvedDecl) -> bool:
        if decl.is_opaque:
            return True
        name = decl.type_name
        return name is not None and self.types[name].opaque

    def kind_of(self, name: str) -> Optional[Kind]:
        t = self.types.get(name)
        return t.kind if t else None

    def enum_of(self, decl: ResolvedDecl):
        """The ResolvedEnum a scalar declaration canonically denotes, if any."""
        canonical = self.canonical(decl)
        if canonical.arity is Arity.SCALAR and isinstance(canonical.base, str):
            t = self.types[canonical.base]
            if t.kind is Kind.ENUM:
                return t.definition
        return None
