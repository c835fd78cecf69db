"""Typedef parsing."""
from __future__ import annotations
from typing import TYPE_CHECKING
from lark import Tree
from fastxdr.semantics.ast import TypedefDef
from fastxdr.semantics.ast_builder.exceptions import VoidDeclarationError
from fastxdr.semantics.ast_builder.utils.tree_navigation import first_tree_child
from fastxdr.internals.report import span_of

if TYPE_CHECKING:
    from fastxdr.semantics.ast_builder.builder import ASTBuilder


def parse_typedef(t: Tree, ast_builder: 'ASTBuilder') -> TypedefDef:
    """Parse typedef_def: "typedef" declaration ";"

    The declared name becomes the name of the new type.
    """
    assert t.data == "typedef_def"
    decl = ast_builder.parse_declaration(first_tree_child(t))
    if decl.name is None:
        raise VoidDeclarationError(span_of(t))
    return TypedefDef(
        name=decl.name,
        decl=decl,
        loc=span_of(t),
        name_span=decl.name_span,
    )
