from __future__ import annotations
from enum import Enum
from typing import Optional, Tuple, Union, FrozenSet
from dataclasses import dataclass

class BuiltinType(Enum):
    INT = "int"
    UINT = "unsigned int"
    HYPER = "hyper"
    UHYPER = "unsigned hyper"
    FLOAT = "float"
    DOUBLE = "double"
    QUADRUPLE = "quadruple"
    BOOL = "bool"
    OPAQUE = "opaque"
    STRING = "string"
    VOID = "void"

    def __str__(self) -> str:
        return self.value

# C spellings accepted wherever a type name may appear.
C_TYPE_ALIASES = {
    "int32_t": BuiltinType.INT,
    "uint32_t": BuiltinType.UINT,
    "int64_t": BuiltinType.HYPER,
    "uint64_t": BuiltinType.UHYPER,
}

INTEGER_RANGES = {
    BuiltinType.INT: (-(1 << 31), (1 << 31) - 1),
    BuiltinType.UINT: (0, (1 << 32) - 1),
    BuiltinType.HYPER: (-(1 << 63), (1 << 63) - 1),
    BuiltinType.UHYPER: (0, (1 << 64) - 1),
    BuiltinType.BOOL: (0, 1),
}

DISCRIMINANT_TYPES = frozenset(INTEGER_RANGES)

SCALAR_SIZES = {
    BuiltinType.INT: 4,
    BuiltinType.UINT: 4,
    BuiltinType.BOOL: 4,
    BuiltinType.FLOAT: 4,
    BuiltinType.HYPER: 8,
    BuiltinType.UHYPER: 8,
    BuiltinType.DOUBLE: 8,
    BuiltinType.VOID: 0,
}

CONST_RANGE = INTEGER_RANGES[BuiltinType.HYPER]
ENUM_RANGE = INTEGER_RANGES[BuiltinType.INT]
LENGTH_RANGE = INTEGER_RANGES[BuiltinType.UINT]

PREDEFINED_CONSTANTS = {"TRUE": 1, "FALSE": 0}


def padded(n: int) -> int:
    """Round ``n`` up to the XDR unit of 4 bytes."""
    return (n + 3) & ~3


class Arity(Enum):
    SCALAR = "scalar"
    FIXED = "fixed"          # T x[n]
    VARIABLE = "variable"    # T x<n> / T x<>
    OPTIONAL = "optional"    # T *x

    def __str__(self) -> str:
        return self.value


class Kind(Enum):
    CONST = "constant"
    ENUM_VALUE = "enum value"
    ENUM = "enum"
    STRUCT = "struct"
    UNION = "union"
    TYPEDEF = "typedef"

    def __str__(self) -> str:
        return self.value

    @property
    def is_type(self) -> bool:
        return self in (Kind.ENUM, Kind.STRUCT, Kind.UNION, Kind.TYPEDEF)

    @property
    def is_value(self) -> bool:
        return self in (Kind.CONST, Kind.ENUM_VALUE)


# ---------- size classes ----------

@dataclass(frozen=True)
class Fixed:
    size: int

    def __str__(self) -> str:
        return f"fixed({self.size})"

@dataclass(frozen=True)
class Variable:
    def __str__(self) -> str:
        return "variable"

VARIABLE = Variable()
Size = Union[Fixed, Variable]


# ---------- resolved declarations ----------

TypeBase = Union[BuiltinType, str]  # builtin, or the name of a user type

@dataclass(frozen=True)
class ResolvedDecl:
    """A declaration with every name looked up and every length evaluated.

    ``base`` keeps the type exactly as named in the source: a typedef stays a
    typedef here. ``length`` is the element count for FIXED and the upper
    bound (None for unbounded) for VARIABLE.
    """
    name: Optional[str]
    base: TypeBase
    arity: Arity = Arity.SCALAR
    length: Optional[int] = None

    @property
    def is_void(self) -> bool:
        return self.base is BuiltinType.VOID

    @property
    def is_opaque(self) -> bool:
        return self.base is BuiltinType.OPAQUE

    @property
    def is_string(self) -> bool:
        return self.base is BuiltinType.STRING

    @property
    def is_bytes(self) -> bool:
        """opaque and string are byte sequences, not arrays of elements."""
        return self.base in (BuiltinType.OPAQUE, BuiltinType.STRING)

    @property
    def type_name(self) -> Optional[str]:
        return self.base if isinstance(self.base, str) else None

    def __str__(self) -> str:
        base = str(self.base)
        bound = "" if self.length is None else str(self.length)
        if self.arity is Arity.FIXED:
            return f"{base}[{bound}]"
        if self.arity is Arity.VARIABLE:
            return f"{base}<{bound}>"
        if self.arity is Arity.OPTIONAL:
            return f"{base}*"
        return base


@dataclass(frozen=True)
class Canonical:
    """Representation of a declaration once scalar typedef links are followed.

    Only scalar links are followed: ``typedef int A[4]; typedef A B;`` gives
    ``int[4]`` for B, while ``A xs<>`` stays an array whose element is A.
    """
    base: TypeBase
    arity: Arity = Arity.SCALAR
    length: Optional[int] = None

    @property
    def is_bytes(self) -> bool:
        return self.base in (BuiltinType.OPAQUE, BuiltinType.STRING)

    @property
    def is_array(self) -> bool:
        return self.arity in (Arity.FIXED, Arity.VARIABLE) and not self.is_bytes

    def __str__(self) -> str:
        return str(ResolvedDecl(None, self.base, self.arity, self.length))


@dataclass(frozen=True)
class ResolvedEnum:
    name: str
    variants: Tuple[Tuple[str, int], ...]

    @property
    def values(self) -> FrozenSet[int]:
        return frozenset(v for _, v in self.variants)

    def variant_for(self, value: int) -> Optional[str]:
        return next((n for n, v in self.variants if v == value), None)

@dataclass(frozen=True)
class ResolvedStruct:
    name: str
    fields: Tuple[ResolvedDecl, ...]

@dataclass(frozen=True)
class ResolvedTypedef:
    name: str
    decl: ResolvedDecl

@dataclass(frozen=True)
class ResolvedArm:
    labels: Tuple[int, ...]
    label_names: Tuple[Optional[str], ...]  # spelling of each label when written as a name
    decl: ResolvedDecl

@dataclass(frozen=True)
class ResolvedUnion:
    name: str
    discriminant: ResolvedDecl
    arms: Tuple[ResolvedArm, ...]
    default: Optional[ResolvedDecl] = None

    @property
    def labels(self) -> FrozenSet[int]:
        return frozenset(v for arm in self.arms for v in arm.labels)

    @property
    def declarations(self) -> Tuple[ResolvedDecl, ...]:
        decls = tuple(arm.decl for arm in self.arms)
        return decls + ((self.default,) if self.default is not None else ())

ResolvedDefinition = Union[ResolvedEnum, ResolvedStruct, ResolvedTypedef, ResolvedUnion]


def member_declarations(defn: ResolvedDefinition) -> Tuple[ResolvedDecl, ...]:
    """Every declaration a definition holds, in wire order."""
    if isinstance(defn, ResolvedStruct):
        return defn.fields
    if isinstance(defn, ResolvedTypedef):
        return (defn.decl,)
    if isinstance(defn, ResolvedUnion):
        return (defn.discriminant,) + defn.declarations
    return ()


@dataclass(frozen=True)
class ResolvedType:
    """Derived facts about one user type, as handed to the emitter."""
    name: str
    kind: Kind
    definition: ResolvedDefinition
    canonical: Canonical
    size: Size
    opaque: bool
    dependencies: FrozenSet[str]

    @property
    def is_fixed(self) -> bool:
        return isinstance(self.size, Fixed)
