"""Main ASTBuilder orchestrator for the XDR compiler.

This module contains the core ASTBuilder class that lowers Lark parse trees
into the dataclass definitions of ``fastxdr.semantics.ast``. The builder
delegates to specialized parsers:

- Declarations and type specifiers: fastxdr.semantics.ast_builder.types
- Top-level definitions: fastxdr.semantics.ast_builder.declarations
- Utilities: fastxdr.semantics.ast_builder.utils

Nothing is resolved here: every type mention becomes a TypeRef carrying the
name or builtin exactly as written.
"""
from __future__ import annotations
from typing import Dict, Optional

from lark import Tree, Token

from fastxdr.semantics.ast import Specification, Literal, ConstRef, Value, Definition
from fastxdr.semantics.ast_builder.exceptions import BuilderError, OctalLiteralError, DuplicateNameError
from fastxdr.internals.report import Span, span_of


# ------------------------
# Literals
# ------------------------

def parse_int_literal(text: str, span: Optional[Span] = None) -> int:
    """Parse a decimal, 0x-hex or leading-zero octal literal."""
    negative = text.startswith("-")
    digits = text[1:] if negative else text
    if digits[:2] in ("0x", "0X"):
        value = int(digits[2:], 16)
    elif len(digits) > 1 and digits.startswith("0"):
        if any(c in "89" for c in digits):
            raise OctalLiteralError(text, span)
        value = int(digits, 8)
    else:
        value = int(digits, 10)
    return -value if negative else value


# ------------------------
# AST Builder
# ------------------------

class ASTBuilder:
    def __init__(self):
        """Initialize ASTBuilder with lazy-loaded parsers."""
        self._type_parser = None

    @property
    def type_parser(self):
        """Lazy-load TypeParser on first use."""
        if self._type_parser is None:
            from fastxdr.semantics.ast_builder.types.parser import TypeParser
            self._type_parser = TypeParser(self)
        return self._type_parser

    def build(self, tree: Tree) -> Specification:
        """Build Specification AST from parse tree.

        Definitions keep their source order. A repeated top-level name is
        rejected right away.
        """
        from fastxdr.semantics.ast_builder.declarations import constants, enums, structs, typedefs, unions

        assert isinstance(tree, Tree) and tree.data == "specification"

        handlers = {
            "const_def": constants.parse_constdef,
            "enum_def": enums.parse_enumdef,
            "struct_def": structs.parse_structdef,
            "typedef_def": typedefs.parse_typedef,
            "union_def": unions.parse_uniondef,
        }

        definitions = []
        seen: Dict[str, Optional[Span]] = {}
        for node in tree.children:
            if not isinstance(node, Tree):
                continue
            handler = handlers.get(node.data)
            if handler is None:
                raise BuilderError(f"unexpected top-level node '{node.data}'", span_of(node))
            defn: Definition = handler(node, self)
            if defn.name in seen:
                raise DuplicateNameError(defn.name, defn.name_span, seen[defn.name])
            seen[defn.name] = defn.name_span
            definitions.append(defn)

        return Specification(loc=span_of(tree), definitions=definitions)

    # Shared helpers used by the declaration parsers

    def parse_value(self, t: Tree) -> Value:
        """Parse `value`: literal NUMBER or reference NAME."""
        tok = t.children[0] if t.children else None
        if not isinstance(tok, Token):
            raise BuilderError(f"{t.data}: missing token", span_of(t))
        if t.data == "literal":
            return Literal(loc=span_of(tok), value=parse_int_literal(str(tok), span_of(tok)), text=str(tok))
        if t.data == "reference":
            return ConstRef(loc=span_of(tok), name=str(tok))
        raise BuilderError(f"expected a value, found '{t.data}'", span_of(t))

    def parse_declaration(self, t: Tree):
        return self.type_parser.parse_declaration(t)
