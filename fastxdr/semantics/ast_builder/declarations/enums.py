"""Enum definition and variant parsing."""
from __future__ import annotations
from typing import TYPE_CHECKING, List
from lark import Tree
from fastxdr.semantics.ast import EnumDef, EnumVariant
from fastxdr.semantics.ast_builder.exceptions import BuilderError
from fastxdr.semantics.ast_builder.utils.tree_navigation import require_name, first_tree, first_tree_child, trees
from fastxdr.internals.report import span_of

if TYPE_CHECKING:
    from fastxdr.semantics.ast_builder.builder import ASTBuilder


def parse_enumdef(t: Tree, ast_builder: 'ASTBuilder') -> EnumDef:
    """Parse enum_def: "enum" NAME enum_body ";" """
    assert t.data == "enum_def"

    name_tok = require_name(t)
    body = first_tree(t.children, "enum_body")
    if body is None:
        raise BuilderError("enum_def: missing enum_body", span_of(t))

    return EnumDef(
        name=str(name_tok),
        variants=parse_enum_body(body, ast_builder),
        loc=span_of(t),
        name_span=span_of(name_tok),
    )


def parse_enum_body(t: Tree, ast_builder: 'ASTBuilder') -> List[EnumVariant]:
    """Parse enum_body: "{" enum_variant ("," enum_variant)* "}" """
    variants: List[EnumVariant] = []
    for child in trees(t.children, "enum_variant"):
        name_tok = require_name(child)
        variants.append(EnumVariant(
            name=str(name_tok),
            value=ast_builder.parse_value(first_tree_child(child)),
            name_span=span_of(name_tok),
            loc=span_of(child),
        ))
    return variants
