"""Errors raised by generated encode/decode routines."""
from __future__ import annotations
from typing import Optional


class DecodeError(Exception):
    """The input is not a valid encoding of the requested type."""

    def __init__(self, message: str, offset: Optional[int] = None) -> None:
        super().__init__(message if offset is None else f"{message} (at byte {offset})")
        self.offset = offset


class InsufficientBytesError(DecodeError):
    def __init__(self, needed: int, available: int, offset: Optional[int] = None) -> None:
        super().__init__(f"need {needed} bytes, {available} available", offset)
        self.needed = needed
        self.available = available


class UnknownDiscriminantError(DecodeError):
    def __init__(self, union: str, value: int, offset: Optional[int] = None) -> None:
        super().__init__(f"union '{union}' has no arm for discriminant {value}", offset)
        self.union = union
        self.value = value


class UnknownEnumValueError(DecodeError):
    def __init__(self, enum: str, value: int, offset: Optional[int] = None) -> None:
        super().__init__(f"{value} is not a value of enum '{enum}'", offset)
        self.enum = enum
        self.value = value


class InvalidLengthError(DecodeError):
    def __init__(self, length: int, bound: int, offset: Optional[int] = None) -> None:
        super().__init__(f"length {length} exceeds the declared bound {bound}", offset)
        self.length = length
        self.bound = bound


class InvalidBooleanError(DecodeError):
    def __init__(self, value: int, offset: Optional[int] = None) -> None:
        super().__init__(f"boolean must be 0 or 1, got {value}", offset)
        self.value = value


class InvalidOptionalFlagError(DecodeError):
    def __init__(self, value: int, offset: Optional[int] = None) -> None:
        super().__init__(f"optional presence flag must be 0 or 1, got {value}", offset)
        self.value = value


class NonUtf8StringError(DecodeError):
    def __init__(self, reason: str, offset: Optional[int] = None) -> None:
        super().__init__(f"string is not valid UTF-8: {reason}", offset)


class InvalidPaddingError(DecodeError):
    def __init__(self, offset: Optional[int] = None) -> None:
        super().__init__("non-zero padding bytes", offset)


class EncodeError(ValueError):
    """A value cannot be represented in XDR."""
