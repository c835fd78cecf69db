# fastxdr/internals/errors.py
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Type

from fastxdr.internals.report import Span, Reporter, Diagnostic


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class Category(str, Enum):
    SYNTAX       = "syntax"
    UNDEFINED    = "undefined"
    DUPLICATE    = "duplicate"
    CYCLE        = "cycle"
    CONST_CYCLE  = "constant-cycle"
    DISCRIMINANT = "discriminant"
    UNSUPPORTED  = "unsupported"
    VALUE        = "value"
    INTERNAL     = "internal"


@dataclass(frozen=True)
class ErrorMessage:
    code: str
    severity: Severity
    text: str
    category: Category = Category.INTERNAL
    doc: str = ""


REGISTRY: Dict[str, ErrorMessage] = {}

class _ErrorCatalog:
    def __init__(self, backing: Dict[str, ErrorMessage]) -> None:
        self._registry = backing

    def __getattr__(self, name: str) -> ErrorMessage:
        try:
            return self._registry[name]
        except KeyError as e:
            raise AttributeError(name) from e

    def __getitem__(self, code: str) -> ErrorMessage:
        return self._registry[code]


ERR = _ErrorCatalog(REGISTRY)

def emit(r: Reporter, em: ErrorMessage, span: Optional[Span], **kwargs) -> None:
    text = _fmt(em.code, **kwargs)
    if em.severity == Severity.ERROR:
        r.error(em.code, text, span)
    else:
        r.warn(em.code, text, span)

def raise_internal_error(code: str, **kwargs) -> None:
    """Raise a CompileError for internal compiler errors.

    Internal errors indicate compiler bugs, not problems in the user's
    specification.

    Raises:
        CompileError: Always raises with formatted error message
    """
    _get(code)
    text = _fmt(code, **kwargs)
    raise CompileError(f"{code}: {text}")


#
# --- Exceptions
#

class CompileError(Exception):
    """A specification could not be compiled.

    Carries every diagnostic collected up to the failing stage. ``str()``
    renders them with file:line:col locations, uncolored.
    """

    def __init__(self, message: str, diagnostics: Optional[List[Diagnostic]] = None,
                 reporter: Optional[Reporter] = None) -> None:
        super().__init__(message)
        self.diagnostics: List[Diagnostic] = list(diagnostics or [])
        self.reporter = reporter

    @property
    def code(self) -> Optional[str]:
        first = next((d for d in self.diagnostics if d.is_error), None)
        return first.code if first else None

    @property
    def span(self) -> Optional[Span]:
        first = next((d for d in self.diagnostics if d.is_error), None)
        return first.span if first else None


class XdrSyntaxError(CompileError):
    """Malformed source text."""


class UndefinedSymbolError(CompileError):
    """Reference to an unknown constant or type."""


class DuplicateDefinitionError(CompileError):
    """A name, field or enum value was defined twice."""


class CyclicTypeError(CompileError):
    """A type contains itself by value."""


class CyclicConstantError(CyclicTypeError):
    """A constant is defined in terms of itself."""


class InvalidDiscriminantError(CompileError):
    """Bad union discriminant type, duplicate or out-of-domain case label."""


class UnsupportedConstructError(CompileError):
    """Valid XDR that this compiler deliberately rejects."""


class InvalidValueError(CompileError):
    """A constant, enum value or array length is out of range."""


CATEGORY_EXCEPTIONS: Dict[Category, Type[CompileError]] = {
    Category.SYNTAX: XdrSyntaxError,
    Category.UNDEFINED: UndefinedSymbolError,
    Category.DUPLICATE: DuplicateDefinitionError,
    Category.CYCLE: CyclicTypeError,
    Category.CONST_CYCLE: CyclicConstantError,
    Category.DISCRIMINANT: InvalidDiscriminantError,
    Category.UNSUPPORTED: UnsupportedConstructError,
    Category.VALUE: InvalidValueError,
    Category.INTERNAL: CompileError,
}


def raise_for(reporter: Reporter) -> None:
    """Raise the exception matching the first error collected by ``reporter``.

    Does nothing when the reporter holds only warnings.
    """
    errors = reporter.errors
    if not errors:
        return
    first = errors[0]
    msg = REGISTRY.get(first.code)
    exc_type = CATEGORY_EXCEPTIONS[msg.category] if msg else CompileError
    text = reporter.format(use_color=False, use_unicode=False, items=errors)
    raise exc_type(text, reporter.items, reporter)


#
# --- Helpers
#

def _add(msg: ErrorMessage) -> None:
    if msg.code in REGISTRY:
        raise ValueError(f"duplicate error code {REGISTRY[msg.code]} in {msg}")
    REGISTRY[msg.code] = msg

def _get(code: str) -> ErrorMessage:
    try:
        return REGISTRY[code]
    except KeyError:
        raise KeyError(f"unknown error code: {code}")

def _fmt(code: str, **kwargs) -> str:
    msg = _get(code)
    try:
        return msg.text.format(**kwargs)
    except KeyError as key_error:
        missing = key_error.args[0]
        raise KeyError(f"missing text key '{missing}' for {code} "
                       f"(needed by: {msg.text!r})") from None

#
# --- Registry population
#

# Internal errors (compiler bugs) - CE00xx range
_add(ErrorMessage("CE0001", Severity.ERROR,
    "internal compiler error: {message}",
    Category.INTERNAL, "An invariant of the compiler itself was violated (bug)."))

# Syntax errors - CE01xx range
_add(ErrorMessage("CE0101", Severity.ERROR,
    "unexpected {token}; expected {expected}",
    Category.SYNTAX, "The parser found a token that cannot continue the current definition."))

_add(ErrorMessage("CE0102", Severity.ERROR,
    "unexpected character '{char}'",
    Category.SYNTAX, "The character does not start any XDR token."))

_add(ErrorMessage("CE0103", Severity.ERROR,
    "unexpected end of input; expected {expected}",
    Category.SYNTAX, "The specification ends in the middle of a definition."))

_add(ErrorMessage("CE0104", Severity.ERROR,
    "invalid octal literal '{literal}'",
    Category.SYNTAX, "Numbers with a leading zero are octal and may only use digits 0-7."))

# Name resolution - CE02xx range
_add(ErrorMessage("CE0201", Severity.ERROR,
    "undefined symbol '{name}'",
    Category.UNDEFINED, "The name is neither a constant, an enum value nor a type."))

_add(ErrorMessage("CE0202", Severity.ERROR,
    "'{name}' is a {kind}, expected a constant or enum value",
    Category.UNDEFINED, "Lengths, enum values and case labels must be integer constants."))

_add(ErrorMessage("CE0203", Severity.ERROR,
    "'{name}' is a {kind}, expected a type",
    Category.UNDEFINED, "Declarations must name a struct, union, enum or typedef."))

# Duplicates - CE03xx range
_add(ErrorMessage("CE0301", Severity.ERROR,
    "'{name}' is already defined at {prev}",
    Category.DUPLICATE, "Constants, enum values and types share a single namespace."))

_add(ErrorMessage("CE0302", Severity.ERROR,
    "duplicate field '{field}' in '{owner}'",
    Category.DUPLICATE, "Field names must be unique within a struct."))

_add(ErrorMessage("CE0303", Severity.ERROR,
    "enum '{enum}' assigns value {value} to both '{prev}' and '{name}'",
    Category.DUPLICATE, "Enum values must be unique within their enum."))

# Cycles - CE04xx range
_add(ErrorMessage("CE0401", Severity.ERROR,
    "type '{name}' has infinite size: {cycle}",
    Category.CYCLE, "A type may only refer to itself through an optional (*) declaration."))

_add(ErrorMessage("CE0402", Severity.ERROR,
    "constant '{name}' depends on itself: {cycle}",
    Category.CONST_CYCLE, "Constant definitions must not form a reference cycle."))

# Union discriminants - CE05xx range
_add(ErrorMessage("CE0501", Severity.ERROR,
    "discriminant of union '{union}' must be int, unsigned int, hyper, unsigned hyper, bool or an enum, found '{found}'",
    Category.DISCRIMINANT, "RFC 4506 section 4.15."))

_add(ErrorMessage("CE0502", Severity.ERROR,
    "case label {label} is not a valid value of '{ty}'",
    Category.DISCRIMINANT, "Case labels must belong to the discriminant's domain."))

_add(ErrorMessage("CE0503", Severity.ERROR,
    "duplicate case label {label} in union '{union}'",
    Category.DISCRIMINANT, "Each discriminant value may select at most one arm."))

_add(ErrorMessage("CE0504", Severity.ERROR,
    "arm '{field}' of union '{union}' has the same name as its discriminant",
    Category.DISCRIMINANT, "The discriminant and the arm become fields of the same variant."))

_add(ErrorMessage("CW0501", Severity.WARNING,
    "union '{union}' has no default arm and does not handle {missing}; decoding those values fails",
    Category.DISCRIMINANT, "Unhandled enum values are rejected at decode time."))

# Unsupported constructs - CE06xx range
_add(ErrorMessage("CE0601", Severity.ERROR,
    "arrays of arrays are not supported: '{elem}' is already an array",
    Category.UNSUPPORTED, "Nested arrays have no agreed wire representation in this compiler."))

_add(ErrorMessage("CE0602", Severity.ERROR,
    "inline {kind} definitions are not supported; define the {kind} at top level",
    Category.UNSUPPORTED, "Anonymous enum, struct and union bodies cannot be named in the output."))

_add(ErrorMessage("CE0603", Severity.ERROR,
    "quadruple precision floating point is not supported",
    Category.UNSUPPORTED, "Python has no native 128-bit float."))

_add(ErrorMessage("CE0604", Severity.ERROR,
    "void is only allowed as a union arm",
    Category.UNSUPPORTED, "Struct fields, typedefs and discriminants must carry data."))

# Values - CE07xx range
_add(ErrorMessage("CE0701", Severity.ERROR,
    "value {value} of '{name}' does not fit in a signed 64-bit integer",
    Category.VALUE, "Constants are signed 64-bit integers."))

_add(ErrorMessage("CE0702", Severity.ERROR,
    "value {value} of enum value '{name}' does not fit in a signed 32-bit integer",
    Category.VALUE, "Enums are encoded as 32-bit signed integers."))

_add(ErrorMessage("CE0703", Severity.ERROR,
    "length {value} of '{name}' must be between 0 and 4294967295",
    Category.VALUE, "Array lengths and bounds are encoded as 32-bit unsigned integers."))
