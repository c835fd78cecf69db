"""Lark parser setup and AST construction."""
from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Iterable

from lark import Lark, Tree

from fastxdr.semantics.ast import Specification
from fastxdr.semantics.ast_builder import ASTBuilder

GRAMMAR_PATH = Path(__file__).parent.parent / "grammar.lark"

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_parser() -> Lark:
    """Build the LALR parser once per process; the instance is never mutated."""
    kwargs = dict(
        start="specification",
        parser="lalr",
        propagate_positions=True,
        maybe_placeholders=False,
        lexer="basic",
    )
    logger.debug("loading grammar from %s", GRAMMAR_PATH)
    return Lark.open(str(GRAMMAR_PATH), **kwargs)


def describe_terminals(names: Iterable[str]) -> str:
    """Turn lark terminal names into the spellings a user would type."""
    parser = get_parser()
    by_name = {t.name: t for t in parser.terminals}
    shown = set()
    for name in names:
        term = by_name.get(name)
        if term is None or name.startswith("__"):
            continue
        if term.pattern.type == "str":
            shown.add(f"'{term.pattern.value}'")
        elif name == "NAME":
            shown.add("identifier")
        elif name == "NUMBER":
            shown.add("number")
        else:
            shown.add(name.lower())
    if not shown:
        return "end of input"
    return ", ".join(sorted(shown))


def parse(src: str) -> Tree:
    """Parse source text into a lark tree. Raises lark.UnexpectedInput."""
    return get_parser().parse(src)


def parse_to_ast(src: str, dump_parse: bool = False):
    """Parse source code into an AST.

    Returns:
        Tuple of (ast, parse_tree).
    """
    tree = parse(src)
    if dump_parse:
        print(tree.pretty())

    ast_builder = ASTBuilder()
    spec: Specification = ast_builder.build(tree)
    return spec, tree
