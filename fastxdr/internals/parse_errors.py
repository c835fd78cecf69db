"""Turn parse exceptions into located diagnostics."""
from __future__ import annotations

from lark import UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, UnexpectedToken

from fastxdr.internals.report import Reporter, Span
from fastxdr.semantics.ast_builder import (
    BuilderError,
    OctalLiteralError,
    DuplicateNameError,
    VoidDeclarationError,
)


def _span_at(exc: UnexpectedInput, width: int = 1) -> Span:
    line = getattr(exc, "line", None)
    col = getattr(exc, "column", None)
    # lark uses '?' or -1 when the position is unknown
    if not isinstance(line, int) or line < 1:
        line = 1
    if not isinstance(col, int) or col < 1:
        col = 1
    return Span(line, col, line, col + width)


def handle_parse_exception(exc: Exception, reporter: Reporter) -> bool:
    """Handle a parse exception by emitting diagnostics through the reporter.

    Returns:
        True if the exception was handled, False otherwise.
    """
    from fastxdr.internals import errors as er
    from fastxdr.internals.parser import describe_terminals

    if isinstance(exc, OctalLiteralError):
        er.emit(reporter, er.ERR.CE0104, exc.span, literal=exc.literal)
        return True

    if isinstance(exc, DuplicateNameError):
        prev = str(exc.prev_span) if exc.prev_span else "an earlier definition"
        er.emit(reporter, er.ERR.CE0301, exc.span, name=exc.name, prev=prev)
        return True

    if isinstance(exc, VoidDeclarationError):
        er.emit(reporter, er.ERR.CE0604, exc.span)
        return True

    if isinstance(exc, BuilderError):
        er.emit(reporter, er.ERR.CE0001, exc.span, message=str(exc))
        return True

    if isinstance(exc, UnexpectedEOF):
        er.emit(reporter, er.ERR.CE0103, None, expected=describe_terminals(exc.expected))
        return True

    if isinstance(exc, UnexpectedToken):
        if exc.token.type == "$END":
            er.emit(reporter, er.ERR.CE0103, _span_at(exc),
                    expected=describe_terminals(exc.expected))
            return True
        tok = exc.token
        width = max(1, len(str(tok)))
        er.emit(reporter, er.ERR.CE0101, _span_at(exc, width),
                token=f"'{tok}'", expected=describe_terminals(exc.expected))
        return True

    if isinstance(exc, UnexpectedCharacters):
        er.emit(reporter, er.ERR.CE0102, _span_at(exc), char=exc.char)
        return True

    return False
