"""
Per-declaration Python expressions.

Every declaration (struct field, typedef target, union arm or discriminant)
is emitted through the same four questions:

- annotation(decl): the field annotation.
- pack_statement(decl, value): the statement writing ``value`` to ``w``.
- unpack_expression(decl): an expression reading one value from ``r``.
- wire_size(decl, value): (constant, expression) contributions to the
  encoded size, folded by the caller.

Builtin scalars and enums go through the Writer/Reader methods; every other
user type packs itself.
"""
from __future__ import annotations
from typing import TYPE_CHECKING, Optional, Tuple

from fastxdr.backend.naming import global_name
from fastxdr.internals.errors import raise_internal_error
from fastxdr.semantics.type_index import TypeIndex
from fastxdr.semantics.typesys import Arity, BuiltinType, Fixed, Kind, ResolvedDecl, padded

if TYPE_CHECKING:
    from fastxdr.backend.codegen_python import PythonCodegen

# builtin -> (annotation, Writer/Reader method suffix)
SCALARS = {
    BuiltinType.INT: ("int", "int"),
    BuiltinType.UINT: ("int", "uint"),
    BuiltinType.HYPER: ("int", "hyper"),
    BuiltinType.UHYPER: ("int", "uhyper"),
    BuiltinType.FLOAT: ("float", "float"),
    BuiltinType.DOUBLE: ("float", "double"),
    BuiltinType.BOOL: ("bool", "bool"),
}

SizeTerm = Tuple[int, Optional[str]]


def bound_literal(decl: ResolvedDecl) -> str:
    return "None" if decl.length is None else str(decl.length)


class ExpressionEmitter:
    def __init__(self, codegen: "PythonCodegen") -> None:
        self.cg = codegen

    @property
    def index(self) -> TypeIndex:
        return self.cg.index

    # ---------- element level (the base type, arity ignored) ----------

    def _is_enum(self, decl: ResolvedDecl) -> bool:
        return decl.type_name is not None and self.index.kind_of(decl.type_name) is Kind.ENUM

    def element_annotation(self, decl: ResolvedDecl) -> str:
        if isinstance(decl.base, BuiltinType):
            if decl.base in SCALARS:
                return SCALARS[decl.base][0]
            if decl.is_opaque:
                return "_xdr.B"
            if decl.is_string:
                return "str"
            raise_internal_error("CE0001", message=f"no annotation for {decl}")
        name = global_name(decl.base)
        if self.index[decl.base].opaque:
            return f"{name}[_xdr.B]"
        return name

    def element_packer(self, decl: ResolvedDecl) -> str:
        """A callable taking one value and writing it."""
        if isinstance(decl.base, BuiltinType):
            return f"w.pack_{SCALARS[decl.base][1]}"
        name = global_name(decl.base)
        if self._is_enum(decl):
            return f"lambda v: w.pack_enum({name}, v)"
        return "lambda v: v.pack(w)"

    def element_unpacker(self, decl: ResolvedDecl) -> str:
        """A callable taking no argument and reading one value."""
        if isinstance(decl.base, BuiltinType):
            return f"r.unpack_{SCALARS[decl.base][1]}"
        name = global_name(decl.base)
        if self._is_enum(decl):
            return f"lambda: r.unpack_enum({name})"
        return f"lambda: {name}.unpack(r)"

    def _element_pack(self, decl: ResolvedDecl, value: str) -> str:
        if isinstance(decl.base, BuiltinType):
            return f"w.pack_{SCALARS[decl.base][1]}({value})"
        name = global_name(decl.base)
        if self._is_enum(decl):
            return f"w.pack_enum({name}, {value})"
        return f"{value}.pack(w)"

    def _element_unpack(self, decl: ResolvedDecl) -> str:
        if isinstance(decl.base, BuiltinType):
            return f"r.unpack_{SCALARS[decl.base][1]}()"
        name = global_name(decl.base)
        if self._is_enum(decl):
            return f"r.unpack_enum({name})"
        return f"{name}.unpack(r)"

    def _element_size(self, decl: ResolvedDecl) -> Optional[int]:
        size = self.index.size_of(ResolvedDecl(None, decl.base))
        return size.size if isinstance(size, Fixed) else None

    # ---------- declaration level ----------

    def annotation(self, decl: ResolvedDecl) -> str:
        if decl.is_bytes:
            return self.element_annotation(decl)
        elem = self.element_annotation(decl)
        if decl.arity is Arity.OPTIONAL:
            return f"_t.Optional[{elem}]"
        if decl.arity in (Arity.FIXED, Arity.VARIABLE):
            return f"_t.List[{elem}]"
        return elem

    def pack_statement(self, decl: ResolvedDecl, value: str) -> str:
        if decl.is_opaque:
            if decl.arity is Arity.FIXED:
                return f"w.pack_fopaque({decl.length}, {value})"
            return f"w.pack_opaque({bound_literal(decl)}, {value})"
        if decl.is_string:
            return f"w.pack_string({bound_literal(decl)}, {value})"
        if decl.arity is Arity.OPTIONAL:
            return f"w.pack_optional({value}, {self.element_packer(decl)})"
        if decl.arity is Arity.FIXED:
            return f"w.pack_farray({decl.length}, {value}, {self.element_packer(decl)})"
        if decl.arity is Arity.VARIABLE:
            return f"w.pack_array({bound_literal(decl)}, {value}, {self.element_packer(decl)})"
        return self._element_pack(decl, value)

    def unpack_expression(self, decl: ResolvedDecl) -> str:
        if decl.is_opaque:
            if decl.arity is Arity.FIXED:
                return f"r.unpack_fopaque({decl.length})"
            return f"r.unpack_opaque({bound_literal(decl)})"
        if decl.is_string:
            return f"r.unpack_string({bound_literal(decl)})"
        if decl.arity is Arity.OPTIONAL:
            return f"r.unpack_optional({self.element_unpacker(decl)})"
        if decl.arity is Arity.FIXED:
            return f"r.unpack_farray({decl.length}, {self.element_unpacker(decl)})"
        if decl.arity is Arity.VARIABLE:
            return f"r.unpack_array({bound_literal(decl)}, {self.element_unpacker(decl)})"
        return self._element_unpack(decl)

    def wire_size(self, decl: ResolvedDecl, value: str) -> SizeTerm:
        """Size contribution of ``decl`` holding ``value``.

        Returns the constant part and, for data-dependent sizes, an expression
        to add to it.
        """
        size = self.index.size_of(decl)
        if isinstance(size, Fixed):
            return size.size, None
        if decl.is_opaque:
            return 0, f"_xdr.opaque_size({value})"
        if decl.is_string:
            return 0, f"_xdr.string_size({value})"

        elem = self._element_size(decl)
        if decl.arity is Arity.OPTIONAL:
            inner = str(elem) if elem is not None else f"{value}.wire_size()"
            return 4, f"(0 if {value} is None else {inner})"
        if decl.arity in (Arity.FIXED, Arity.VARIABLE):
            prefix = 4 if decl.arity is Arity.VARIABLE else 0
            if elem is not None:
                return prefix, f"{elem} * len({value})"
            return prefix, f"sum(x.wire_size() for x in {value})"
        return 0, f"{value}.wire_size()"


def fold_sizes(terms) -> str:
    """Join (constant, expression) terms into one sum expression."""
    constant = sum(c for c, _ in terms)
    exprs = [e for _, e in terms if e is not None]
    if not exprs:
        return str(constant)
    if constant:
        exprs.insert(0, str(constant))
    return " + ".join(exprs)
