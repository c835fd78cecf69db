"""Tree navigation utilities for traversing Lark parse trees."""
from __future__ import annotations
from typing import List, Optional, Callable
from lark import Tree, Token

from fastxdr.internals.report import span_of
from fastxdr.semantics.ast_builder.exceptions import BuilderError


def first(children: List[object], pred: Callable) -> Optional[object]:
    """Find first child matching predicate."""
    for ch in children:
        if pred(ch):
            return ch
    return None


def first_name(children: List[object]) -> Optional[Token]:
    """Get first NAME token from children."""
    return first(children, lambda c: isinstance(c, Token) and c.type == "NAME")  # type: ignore[return-value]


def first_tree(children: List[object], data: str) -> Optional[Tree]:
    """Get first Tree child with specific data tag."""
    return first(children, lambda c: isinstance(c, Tree) and c.data == data)  # type: ignore[return-value]


def trees(children: List[object], data: str) -> List[Tree]:
    """All Tree children with a specific data tag, in order."""
    return [c for c in children if isinstance(c, Tree) and c.data == data]


def first_tree_child(t: Tree) -> Tree:
    """Get first Tree child or raise if missing."""
    ch = next((c for c in t.children if isinstance(c, Tree)), None)
    if ch is None:
        raise BuilderError(f"missing operand under '{t.data}'", span_of(t))
    return ch


def require_name(t: Tree) -> Token:
    """Get the NAME token of a definition or raise if missing."""
    tok = first_name(t.children)
    if tok is None:
        raise BuilderError(f"{t.data}: missing NAME", span_of(t))
    return tok
