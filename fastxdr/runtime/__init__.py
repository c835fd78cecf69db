"""Support code imported by generated modules."""
from fastxdr.runtime.codec import Reader, Writer, padded, padding, string_size, opaque_size
from fastxdr.runtime.errors import (
    DecodeError, EncodeError, InsufficientBytesError, InvalidBooleanError, InvalidLengthError,
    InvalidOptionalFlagError, InvalidPaddingError, NonUtf8StringError, UnknownDiscriminantError,
    UnknownEnumValueError,
)
from fastxdr.runtime.types import B, XdrEnum, XdrStruct, XdrType, XdrTypedef, XdrUnion

__all__ = [
    "Reader", "Writer", "padded", "padding", "string_size", "opaque_size",
    "DecodeError", "EncodeError", "InsufficientBytesError", "InvalidBooleanError",
    "InvalidLengthError", "InvalidOptionalFlagError", "InvalidPaddingError",
    "NonUtf8StringError", "UnknownDiscriminantError", "UnknownEnumValueError",
    "B", "XdrEnum", "XdrStruct", "XdrType", "XdrTypedef", "XdrUnion",
]
