"""Custom exceptions for AST building errors."""
from __future__ import annotations
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from fastxdr.internals.report import Span


class BuilderError(Exception):
    """The parse tree cannot be lowered. Plain instances mean a grammar bug."""
    def __init__(self, message: str, span: Optional['Span'] = None):
        super().__init__(message)
        self.span = span


class OctalLiteralError(BuilderError):
    """A literal with a leading zero contains the digits 8 or 9."""
    def __init__(self, literal: str, span: Optional['Span'] = None):
        super().__init__(f"invalid octal literal '{literal}'", span)
        self.literal = literal


class DuplicateNameError(BuilderError):
    """Two top-level definitions share a name."""
    def __init__(self, name: str, span: Optional['Span'] = None, prev_span: Optional['Span'] = None):
        super().__init__(f"'{name}' is already defined", span)
        self.name = name
        self.prev_span = prev_span


class VoidDeclarationError(BuilderError):
    """``void`` used where a named declaration is required."""
    def __init__(self, span: Optional['Span'] = None):
        super().__init__("void is only allowed as a union arm", span)
