"""Struct definition parsing."""
from __future__ import annotations
from typing import TYPE_CHECKING, List
from lark import Tree
from fastxdr.semantics.ast import StructDef, Declaration
from fastxdr.semantics.ast_builder.exceptions import BuilderError
from fastxdr.semantics.ast_builder.utils.tree_navigation import require_name, first_tree
from fastxdr.internals.report import span_of

if TYPE_CHECKING:
    from fastxdr.semantics.ast_builder.builder import ASTBuilder


def parse_structdef(t: Tree, ast_builder: 'ASTBuilder') -> StructDef:
    """Parse struct_def: "struct" NAME struct_body ";" """
    assert t.data == "struct_def"

    name_tok = require_name(t)
    body = first_tree(t.children, "struct_body")
    if body is None:
        raise BuilderError("struct_def: missing struct_body", span_of(t))

    return StructDef(
        name=str(name_tok),
        fields=parse_struct_body(body, ast_builder),
        loc=span_of(t),
        name_span=span_of(name_tok),
    )


def parse_struct_body(t: Tree, ast_builder: 'ASTBuilder') -> List[Declaration]:
    """Parse struct_body: "{" (declaration ";")+ "}" """
    return [ast_builder.parse_declaration(ch) for ch in t.children if isinstance(ch, Tree)]
