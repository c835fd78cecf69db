"""Declaration and type-specifier parsing."""
from __future__ import annotations
from typing import Optional, TYPE_CHECKING
from lark import Tree, Token

from fastxdr.semantics.ast import Declaration, TypeRef, InlineBody, Value
from fastxdr.semantics.typesys import Arity, BuiltinType, C_TYPE_ALIASES
from fastxdr.semantics.ast_builder.exceptions import BuilderError
from fastxdr.semantics.ast_builder.utils.tree_navigation import first_name, first_tree_child
from fastxdr.internals.report import span_of

if TYPE_CHECKING:
    from fastxdr.semantics.ast_builder.builder import ASTBuilder


_BUILTIN_RULES = {
    "int_t": BuiltinType.INT,
    "unsigned_int_t": BuiltinType.UINT,
    "hyper_t": BuiltinType.HYPER,
    "unsigned_hyper_t": BuiltinType.UHYPER,
    "float_t": BuiltinType.FLOAT,
    "double_t": BuiltinType.DOUBLE,
    "quadruple_t": BuiltinType.QUADRUPLE,
    "bool_t": BuiltinType.BOOL,
}

_INLINE_RULES = {
    "inline_enum_t": "enum",
    "inline_struct_t": "struct",
    "inline_union_t": "union",
}

DECLARATION_RULES = frozenset({
    "scalar_decl", "fixed_array_decl", "var_array_decl",
    "fixed_opaque_decl", "var_opaque_decl", "string_decl",
    "optional_decl", "void_decl",
})


class TypeParser:
    """Lowers declarations and type specifiers into TypeRef/Declaration nodes."""

    def __init__(self, ast_builder: 'ASTBuilder'):
        self.ast_builder = ast_builder

    def parse_type_specifier(self, t: Tree):
        """Return the base of a TypeRef: a BuiltinType, a name, or an InlineBody."""
        tag = t.data
        if tag in _BUILTIN_RULES:
            return _BUILTIN_RULES[tag]
        if tag in _INLINE_RULES:
            return InlineBody(loc=span_of(t), kind=_INLINE_RULES[tag])
        if tag in ("name_t", "tagged_ref_t"):
            name_tok = first_name(t.children)
            if name_tok is None:
                raise BuilderError(f"{tag}: missing NAME", span_of(t))
            name = str(name_tok)
            return C_TYPE_ALIASES.get(name, name)
        raise BuilderError(f"unknown type specifier '{tag}'", span_of(t))

    def parse_declaration(self, t: Tree) -> Declaration:
        """Parse one of the declaration alternatives (scalar_decl, var_array_decl, ...)."""
        tag = t.data
        if tag not in DECLARATION_RULES:
            raise BuilderError(f"expected a declaration, found '{tag}'", span_of(t))

        if tag == "void_decl":
            return Declaration(loc=span_of(t), name=None,
                               ty=TypeRef(loc=span_of(t), base=BuiltinType.VOID))

        name_tok = first_name(t.children)
        if name_tok is None:
            raise BuilderError(f"{tag}: missing NAME", span_of(t))

        size = self._size_of(t)

        if tag == "fixed_opaque_decl":
            ty = TypeRef(loc=span_of(t), base=BuiltinType.OPAQUE, arity=Arity.FIXED, size=size)
        elif tag == "var_opaque_decl":
            ty = TypeRef(loc=span_of(t), base=BuiltinType.OPAQUE, arity=Arity.VARIABLE, size=size)
        elif tag == "string_decl":
            ty = TypeRef(loc=span_of(t), base=BuiltinType.STRING, arity=Arity.VARIABLE, size=size)
        else:
            spec = first_tree_child(t)
            base = self.parse_type_specifier(spec)
            arity = {
                "scalar_decl": Arity.SCALAR,
                "fixed_array_decl": Arity.FIXED,
                "var_array_decl": Arity.VARIABLE,
                "optional_decl": Arity.OPTIONAL,
            }[tag]
            ty = TypeRef(loc=span_of(spec), base=base, arity=arity, size=size)

        return Declaration(loc=span_of(t), name=str(name_tok), ty=ty, name_span=span_of(name_tok))

    def _size_of(self, t: Tree) -> Optional[Value]:
        # The length/bound is the only value child of a declaration; the
        # type specifier subtree never holds one directly.
        for ch in t.children:
            if isinstance(ch, Tree) and ch.data in ("literal", "reference"):
                return self.ast_builder.parse_value(ch)
        return None
