"""XDR wire primitives: a zero-copy Reader and a buffering Writer.

Method names follow the classic Packer/Unpacker pairs (pack_uint,
unpack_farray, ...). Opaque payloads come back as memoryview slices of the
caller's buffer; nothing is copied.
"""
from __future__ import annotations
import struct
from typing import Callable, List, Optional, Sequence, Type, TypeVar

from fastxdr.runtime.errors import (
    EncodeError, InsufficientBytesError, InvalidBooleanError, InvalidLengthError,
    InvalidOptionalFlagError, InvalidPaddingError, NonUtf8StringError, UnknownEnumValueError,
)

T = TypeVar("T")

_INT = struct.Struct(">i")
_UINT = struct.Struct(">I")
_HYPER = struct.Struct(">q")
_UHYPER = struct.Struct(">Q")
_FLOAT = struct.Struct(">f")
_DOUBLE = struct.Struct(">d")

_RANGES = {
    "int": (-(1 << 31), (1 << 31) - 1),
    "unsigned int": (0, (1 << 32) - 1),
    "hyper": (-(1 << 63), (1 << 63) - 1),
    "unsigned hyper": (0, (1 << 64) - 1),
}

_ZEROS = bytes(4)


def padded(n: int) -> int:
    """Round ``n`` up to the XDR unit of 4 bytes."""
    return (n + 3) & ~3


def padding(n: int) -> int:
    return padded(n) - n


def string_size(s: str) -> int:
    """Wire size of a string: length prefix plus padded UTF-8 payload."""
    return 4 + padded(len(s.encode("utf-8")))


def opaque_size(data) -> int:
    """Wire size of a variable-length opaque: length prefix plus padded payload."""
    return 4 + padded(memoryview(data).nbytes)


class Reader:
    """Consumes XDR data from an immutable buffer.

    ``strict`` makes padding bytes that are not zero a decode error.
    """

    def __init__(self, data, strict: bool = False) -> None:
        view = memoryview(data)
        if view.ndim != 1 or view.format != "B":
            view = view.cast("B")
        self._view = view
        self._pos = 0
        self.strict = strict

    @property
    def offset(self) -> int:
        return self._pos

    def remaining(self) -> int:
        return len(self._view) - self._pos

    def rest(self) -> memoryview:
        """The unconsumed tail of the input."""
        return self._view[self._pos:]

    def _take(self, n: int) -> memoryview:
        if n > self.remaining():
            raise InsufficientBytesError(n, self.remaining(), self._pos)
        chunk = self._view[self._pos:self._pos + n]
        self._pos += n
        return chunk

    def _unpack(self, fmt: struct.Struct):
        start = self._pos
        self._take(fmt.size)
        return fmt.unpack_from(self._view, start)[0]

    def _skip_padding(self, n: int) -> None:
        pad = padding(n)
        if not pad:
            return
        start = self._pos
        chunk = self._take(pad)
        if self.strict and any(chunk):
            raise InvalidPaddingError(start)

    # ---------- scalars ----------

    def unpack_int(self) -> int:
        return self._unpack(_INT)

    def unpack_uint(self) -> int:
        return self._unpack(_UINT)

    def unpack_hyper(self) -> int:
        return self._unpack(_HYPER)

    def unpack_uhyper(self) -> int:
        return self._unpack(_UHYPER)

    def unpack_float(self) -> float:
        return self._unpack(_FLOAT)

    def unpack_double(self) -> float:
        return self._unpack(_DOUBLE)

    def unpack_bool(self) -> bool:
        start = self._pos
        value = self.unpack_int()
        if value not in (0, 1):
            raise InvalidBooleanError(value, start)
        return value == 1

    def unpack_enum(self, enum_type: Type[T]) -> T:
        start = self._pos
        value = self.unpack_int()
        try:
            return enum_type(value)  # type: ignore[call-arg]
        except ValueError:
            raise UnknownEnumValueError(enum_type.__name__, value, start) from None

    def unpack_length(self, bound: Optional[int]) -> int:
        start = self._pos
        n = self.unpack_uint()
        if bound is not None and n > bound:
            raise InvalidLengthError(n, bound, start)
        return n

    # ---------- byte sequences ----------

    def unpack_fopaque(self, n: int) -> memoryview:
        data = self._take(n)
        self._skip_padding(n)
        return data

    def unpack_opaque(self, bound: Optional[int] = None) -> memoryview:
        return self.unpack_fopaque(self.unpack_length(bound))

    def unpack_string(self, bound: Optional[int] = None) -> str:
        start = self._pos
        data = self.unpack_opaque(bound)
        try:
            return str(data, "utf-8")
        except UnicodeDecodeError as e:
            raise NonUtf8StringError(e.reason, start) from None

    # ---------- composites ----------

    def unpack_optional_flag(self) -> bool:
        """Read the presence word of an optional value."""
        start = self._pos
        flag = self.unpack_uint()
        if flag > 1:
            raise InvalidOptionalFlagError(flag, start)
        return flag == 1

    def unpack_optional(self, unpack_item: Callable[[], T]) -> Optional[T]:
        if not self.unpack_optional_flag():
            return None
        return unpack_item()

    def unpack_farray(self, n: int, unpack_item: Callable[[], T]) -> List[T]:
        return [unpack_item() for _ in range(n)]

    def unpack_array(self, bound: Optional[int], unpack_item: Callable[[], T]) -> List[T]:
        return self.unpack_farray(self.unpack_length(bound), unpack_item)


class Writer:
    """Accumulates XDR data. Every method validates before writing."""

    def __init__(self) -> None:
        self._buf = bytearray()

    def getvalue(self) -> bytes:
        return bytes(self._buf)

    def __len__(self) -> int:
        return len(self._buf)

    def _pack_ranged(self, fmt: struct.Struct, kind: str, value) -> None:
        if isinstance(value, bool) or not isinstance(value, int):
            raise EncodeError(f"{kind} expects an int, got {type(value).__name__}")
        lo, hi = _RANGES[kind]
        if not lo <= value <= hi:
            raise EncodeError(f"{value} is out of range for {kind}")
        self._buf += fmt.pack(value)

    # ---------- scalars ----------

    def pack_int(self, value: int) -> None:
        self._pack_ranged(_INT, "int", value)

    def pack_uint(self, value: int) -> None:
        self._pack_ranged(_UINT, "unsigned int", value)

    def pack_hyper(self, value: int) -> None:
        self._pack_ranged(_HYPER, "hyper", value)

    def pack_uhyper(self, value: int) -> None:
        self._pack_ranged(_UHYPER, "unsigned hyper", value)

    def pack_float(self, value: float) -> None:
        try:
            self._buf += _FLOAT.pack(value)
        except (struct.error, OverflowError) as e:
            raise EncodeError(f"cannot encode {value!r} as float: {e}") from None

    def pack_double(self, value: float) -> None:
        try:
            self._buf += _DOUBLE.pack(value)
        except (struct.error, OverflowError) as e:
            raise EncodeError(f"cannot encode {value!r} as double: {e}") from None

    def pack_bool(self, value: bool) -> None:
        if value not in (0, 1):
            raise EncodeError(f"bool expects True or False, got {value!r}")
        self._buf += _INT.pack(1 if value else 0)

    def pack_enum(self, enum_type, value) -> None:
        try:
            member = enum_type(value)
        except ValueError:
            raise EncodeError(f"{value!r} is not a value of enum '{enum_type.__name__}'") from None
        self._buf += _INT.pack(int(member))

    def pack_length(self, n: int, bound: Optional[int]) -> None:
        if bound is not None and n > bound:
            raise EncodeError(f"length {n} exceeds the declared bound {bound}")
        self.pack_uint(n)

    # ---------- byte sequences ----------

    def pack_fopaque(self, n: int, data) -> None:
        view = memoryview(data)
        if view.nbytes != n:
            raise EncodeError(f"fixed-length opaque expects {n} bytes, got {view.nbytes}")
        self._buf += view.cast("B") if view.format != "B" else view
        self._buf += _ZEROS[:padding(n)]

    def pack_opaque(self, bound: Optional[int], data) -> None:
        n = memoryview(data).nbytes
        self.pack_length(n, bound)
        self.pack_fopaque(n, data)

    def pack_string(self, bound: Optional[int], value: str) -> None:
        if not isinstance(value, str):
            raise EncodeError(f"string expects str, got {type(value).__name__}")
        self.pack_opaque(bound, value.encode("utf-8"))

    # ---------- composites ----------

    def pack_optional_flag(self, present: bool) -> None:
        self._buf += _UINT.pack(1 if present else 0)

    def pack_optional(self, value: Optional[T], pack_item: Callable[[T], None]) -> None:
        self.pack_optional_flag(value is not None)
        if value is not None:
            pack_item(value)

    def pack_farray(self, n: int, items: Sequence[T], pack_item: Callable[[T], None]) -> None:
        if len(items) != n:
            raise EncodeError(f"fixed-length array expects {n} elements, got {len(items)}")
        for item in items:
            pack_item(item)

    def pack_array(self, bound: Optional[int], items: Sequence[T], pack_item: Callable[[T], None]) -> None:
        self.pack_length(len(items), bound)
        for item in items:
            pack_item(item)
