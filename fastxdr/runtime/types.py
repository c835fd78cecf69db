"""Base classes of generated XDR types."""
from __future__ import annotations
import dataclasses
import enum
from typing import ClassVar, FrozenSet, Optional, Tuple, TypeVar

from fastxdr.runtime.codec import Reader, Writer
from fastxdr.runtime.errors import EncodeError, UnknownDiscriminantError

# Byte storage of opaque fields in opaque-bearing types. Decoding yields
# memoryview slices of the input; callers may build values from bytes or
# bytearray just as well.
B = TypeVar("B", bytes, bytearray, memoryview)


class XdrType:
    """Shared encode/decode entry points.

    Subclasses implement ``pack(writer)`` and the classmethod
    ``unpack(reader)``. Fixed-size types set ``WIRE_SIZE``; the others
    override ``wire_size()``.
    """

    __slots__ = ()

    WIRE_SIZE: ClassVar[Optional[int]] = None
    STRICT_PADDING: ClassVar[bool] = False

    def pack(self, w: Writer) -> None:
        raise NotImplementedError

    @classmethod
    def unpack(cls, r: Reader):
        raise NotImplementedError

    def wire_size(self) -> int:
        if self.WIRE_SIZE is None:
            raise NotImplementedError(f"{type(self).__name__} does not define its wire size")
        return self.WIRE_SIZE

    def encode(self) -> bytes:
        w = Writer()
        self.pack(w)
        return w.getvalue()

    @classmethod
    def decode(cls, data, *, strict: Optional[bool] = None) -> Tuple["XdrType", memoryview]:
        """Decode one value from the front of ``data``.

        Returns the value and the unconsumed remainder of ``data``. Raises a
        DecodeError subclass when ``data`` does not hold a valid encoding.
        """
        r = Reader(data, strict=cls.STRICT_PADDING if strict is None else strict)
        value = cls.unpack(r)
        return value, r.rest()


class XdrStruct(XdrType):
    __slots__ = ()


class XdrTypedef(XdrType):
    """A nominal wrapper: instances hold the aliased value in ``value``."""
    __slots__ = ()


class XdrUnion(XdrType):
    """Base of a discriminated union.

    Each arm is a subclass. ``CASES`` lists the discriminant values an arm
    accepts; the default arm sets ``DEFAULT`` and accepts every value not
    claimed by another arm (listed in ``CASES``).
    """

    __slots__ = ()

    CASES: ClassVar[FrozenSet[int]] = frozenset()
    DEFAULT: ClassVar[bool] = False

    @classmethod
    def variant(cls, name: str):
        """Class decorator publishing an arm as ``Union.<name>``."""
        def attach(arm):
            arm.__name__ = name
            arm.__qualname__ = f"{cls.__qualname__}.{name}"
            setattr(cls, name, arm)
            return arm
        return attach

    @classmethod
    def decode(cls, data, *, strict: Optional[bool] = None) -> Tuple["XdrType", memoryview]:
        """Decode one value; on an arm class, data selecting another arm is rejected."""
        value, rest = super().decode(data, strict=strict)
        if not isinstance(value, cls):
            # the discriminant is the last field of every arm
            disc = getattr(value, dataclasses.fields(value)[-1].name)
            raise UnknownDiscriminantError(cls.__qualname__, disc, 0)
        return value, rest

    def _check_discriminant(self, value) -> None:
        if self.DEFAULT:
            if value in self.CASES:
                raise EncodeError(f"discriminant {value!r} belongs to an explicit arm, not {type(self).__qualname__}")
        elif value not in self.CASES:
            raise EncodeError(f"discriminant {value!r} does not select {type(self).__qualname__}")


class XdrEnum(enum.IntEnum):
    """Base of generated enums. Members encode as signed 32-bit integers."""

    def pack(self, w: Writer) -> None:
        w.pack_enum(type(self), self)

    @classmethod
    def unpack(cls, r: Reader):
        return r.unpack_enum(cls)

    def wire_size(self) -> int:
        return 4

    def encode(self) -> bytes:
        w = Writer()
        self.pack(w)
        return w.getvalue()

    @classmethod
    def decode(cls, data, *, strict: Optional[bool] = None):
        r = Reader(data, strict=bool(strict))
        value = cls.unpack(r)
        return value, r.rest()
