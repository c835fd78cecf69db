"""Union definition parsing."""
from __future__ import annotations
from typing import TYPE_CHECKING, List, Optional
from lark import Tree
from fastxdr.semantics.ast import UnionDef, UnionArm, Declaration, Value
from fastxdr.semantics.ast_builder.exceptions import BuilderError
from fastxdr.semantics.ast_builder.types.parser import DECLARATION_RULES
from fastxdr.semantics.ast_builder.utils.tree_navigation import require_name, first_tree, first_tree_child, trees
from fastxdr.internals.report import span_of

if TYPE_CHECKING:
    from fastxdr.semantics.ast_builder.builder import ASTBuilder


def parse_uniondef(t: Tree, ast_builder: 'ASTBuilder') -> UnionDef:
    """Parse union_def: "union" NAME union_body ";" """
    assert t.data == "union_def"

    name_tok = require_name(t)
    body = first_tree(t.children, "union_body")
    if body is None:
        raise BuilderError("union_def: missing union_body", span_of(t))

    discriminant, arms, default = parse_union_body(body, ast_builder)
    return UnionDef(
        name=str(name_tok),
        discriminant=discriminant,
        arms=arms,
        default=default,
        loc=span_of(t),
        name_span=span_of(name_tok),
    )


def _declaration_child(t: Tree) -> Tree:
    for ch in t.children:
        if isinstance(ch, Tree) and ch.data in DECLARATION_RULES:
            return ch
    raise BuilderError(f"{t.data}: missing declaration", span_of(t))


def parse_union_body(t: Tree, ast_builder: 'ASTBuilder'):
    """Parse union_body: "switch" "(" declaration ")" "{" case_spec+ [default_spec] "}"

    Consecutive case labels without a declaration between them share the
    next declaration, so every case_spec becomes a single arm.
    """
    discriminant = ast_builder.parse_declaration(_declaration_child(t))

    arms: List[UnionArm] = []
    for case in trees(t.children, "case_spec"):
        labels: List[Value] = [
            ast_builder.parse_value(first_tree_child(label))
            for label in trees(case.children, "case_label")
        ]
        arms.append(UnionArm(
            labels=labels,
            decl=ast_builder.parse_declaration(_declaration_child(case)),
            loc=span_of(case),
        ))

    default: Optional[Declaration] = None
    default_node = first_tree(t.children, "default_spec")
    if default_node is not None:
        default = ast_builder.parse_declaration(_declaration_child(default_node))

    return discriminant, arms, default
