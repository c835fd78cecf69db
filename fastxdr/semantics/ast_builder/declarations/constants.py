"""Constant definition parsing."""
from __future__ import annotations
from typing import TYPE_CHECKING
from lark import Tree
from fastxdr.semantics.ast import ConstDef
from fastxdr.semantics.ast_builder.utils.tree_navigation import require_name, first_tree_child
from fastxdr.internals.report import span_of

if TYPE_CHECKING:
    from fastxdr.semantics.ast_builder.builder import ASTBuilder


def parse_constdef(t: Tree, ast_builder: 'ASTBuilder') -> ConstDef:
    """Parse const_def: "const" NAME "=" value ";" """
    assert t.data == "const_def"
    name_tok = require_name(t)
    value = ast_builder.parse_value(first_tree_child(t))
    return ConstDef(
        name=str(name_tok),
        value=value,
        loc=span_of(t),
        name_span=span_of(name_tok),
    )
