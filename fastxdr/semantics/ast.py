# fastxdr/semantics/ast.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Union
from fastxdr.internals.report import Span
from fastxdr.semantics.typesys import BuiltinType, Arity

# === Core node base ===

@dataclass
class Node:
    loc: Optional[Span]

# === Values ===

@dataclass
class Literal(Node):
    value: int
    text: str = ""                   # spelling in the source (for diagnostics)

    def __str__(self) -> str:
        return self.text or str(self.value)

@dataclass
class ConstRef(Node):
    name: str

    def __str__(self) -> str:
        return self.name

Value = Union[Literal, ConstRef]

# === Types ===

@dataclass
class InlineBody(Node):
    """An anonymous enum/struct/union written in place of a type name."""
    kind: str                        # "enum", "struct" or "union"

@dataclass
class TypeRef(Node):
    base: Union[BuiltinType, str, InlineBody]   # builtin, referenced name, or inline body
    arity: Arity = Arity.SCALAR
    size: Optional[Value] = None     # fixed length, or upper bound of a variable array

@dataclass
class Declaration(Node):
    name: Optional[str]              # None only for void
    ty: TypeRef
    name_span: Optional[Span] = None

    @property
    def is_void(self) -> bool:
        return self.ty.base is BuiltinType.VOID

# === Definitions ===

@dataclass
class ConstDef(Node):
    name: str
    value: Value
    name_span: Optional[Span] = None

@dataclass
class EnumVariant(Node):
    name: str
    value: Value
    name_span: Optional[Span] = None

@dataclass
class EnumDef(Node):
    name: str
    variants: List[EnumVariant]
    name_span: Optional[Span] = None

@dataclass
class StructDef(Node):
    name: str
    fields: List[Declaration]
    name_span: Optional[Span] = None

@dataclass
class TypedefDef(Node):
    name: str
    decl: Declaration                # decl.name == name
    name_span: Optional[Span] = None

@dataclass
class UnionArm(Node):
    labels: List[Value]              # fallthrough labels share one declaration
    decl: Declaration

@dataclass
class UnionDef(Node):
    name: str
    discriminant: Declaration
    arms: List[UnionArm]
    default: Optional[Declaration] = None
    name_span: Optional[Span] = None

Definition = Union[ConstDef, EnumDef, StructDef, TypedefDef, UnionDef]

# === Program structure ===

@dataclass
class Specification(Node):
    definitions: List[Definition] = field(default_factory=list)

    @property
    def constants(self) -> List[ConstDef]:
        return [d for d in self.definitions if isinstance(d, ConstDef)]

    @property
    def enums(self) -> List[EnumDef]:
        return [d for d in self.definitions if isinstance(d, EnumDef)]

    @property
    def structs(self) -> List[StructDef]:
        return [d for d in self.definitions if isinstance(d, StructDef)]

    @property
    def typedefs(self) -> List[TypedefDef]:
        return [d for d in self.definitions if isinstance(d, TypedefDef)]

    @property
    def unions(self) -> List[UnionDef]:
        return [d for d in self.definitions if isinstance(d, UnionDef)]
