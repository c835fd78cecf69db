from __future__ import annotations

import enum
import unittest

from fastxdr.runtime import (
    EncodeError, InsufficientBytesError, InvalidBooleanError, InvalidLengthError,
    InvalidOptionalFlagError, InvalidPaddingError, NonUtf8StringError, Reader,
    UnknownEnumValueError, Writer, opaque_size, padded, string_size,
)


class Color(enum.IntEnum):
    RED = 0
    GREEN = 1


def _written(fn) -> bytes:
    w = Writer()
    fn(w)
    return w.getvalue()


class WriterTests(unittest.TestCase):
    def test_integers_are_big_endian(self) -> None:
        self.assertEqual(_written(lambda w: w.pack_int(-5)), bytes.fromhex("fffffffb"))
        self.assertEqual(_written(lambda w: w.pack_uint(42)), bytes.fromhex("0000002a"))
        self.assertEqual(_written(lambda w: w.pack_hyper(-1)), b"\xff" * 8)
        self.assertEqual(_written(lambda w: w.pack_uhyper(100)), bytes.fromhex("0000000000000064"))

    def test_integer_range_is_checked(self) -> None:
        w = Writer()
        with self.assertRaises(EncodeError):
            w.pack_int(1 << 31)
        with self.assertRaises(EncodeError):
            w.pack_uint(-1)
        with self.assertRaises(EncodeError):
            w.pack_uhyper(1 << 64)
        self.assertEqual(len(w), 0)

    def test_bool_is_not_an_integer_field_value(self) -> None:
        with self.assertRaises(EncodeError):
            Writer().pack_int(True)

    def test_bool(self) -> None:
        self.assertEqual(_written(lambda w: w.pack_bool(True)), bytes.fromhex("00000001"))
        with self.assertRaises(EncodeError):
            Writer().pack_bool(2)

    def test_encode_error_is_a_value_error(self) -> None:
        self.assertTrue(issubclass(EncodeError, ValueError))

    def test_opaque_is_padded(self) -> None:
        self.assertEqual(_written(lambda w: w.pack_opaque(None, b"abcde")),
                         bytes.fromhex("00000005") + b"abcde\x00\x00\x00")
        self.assertEqual(_written(lambda w: w.pack_fopaque(3, b"xyz")), b"xyz\x00")

    def test_fixed_opaque_length_is_checked(self) -> None:
        with self.assertRaises(EncodeError):
            Writer().pack_fopaque(4, b"abc")

    def test_bound_is_checked(self) -> None:
        with self.assertRaises(EncodeError):
            Writer().pack_opaque(2, b"abc")
        with self.assertRaises(EncodeError):
            Writer().pack_array(1, [1, 2], Writer().pack_int)

    def test_string_is_utf8(self) -> None:
        self.assertEqual(_written(lambda w: w.pack_string(None, "é")),
                         bytes.fromhex("00000002") + "é".encode() + b"\x00\x00")

    def test_enum_value_must_exist(self) -> None:
        self.assertEqual(_written(lambda w: w.pack_enum(Color, 1)), bytes.fromhex("00000001"))
        with self.assertRaises(EncodeError):
            Writer().pack_enum(Color, 7)

    def test_optional(self) -> None:
        self.assertEqual(_written(lambda w: w.pack_optional(None, w.pack_int)), bytes(4))
        self.assertEqual(_written(lambda w: w.pack_optional(3, w.pack_int)),
                         bytes.fromhex("0000000100000003"))
        self.assertEqual(_written(lambda w: w.pack_optional_flag(True)), bytes.fromhex("00000001"))

    def test_fixed_array_length_is_checked(self) -> None:
        w = Writer()
        with self.assertRaises(EncodeError):
            w.pack_farray(3, [1, 2], w.pack_int)


class ReaderTests(unittest.TestCase):
    def test_integers(self) -> None:
        r = Reader(bytes.fromhex("fffffffb0000002a"))
        self.assertEqual(r.unpack_int(), -5)
        self.assertEqual(r.unpack_uint(), 42)
        self.assertEqual(r.remaining(), 0)

    def test_insufficient_bytes(self) -> None:
        with self.assertRaises(InsufficientBytesError) as cm:
            Reader(b"\x00\x00\x00").unpack_int()
        self.assertEqual(cm.exception.needed, 4)
        self.assertEqual(cm.exception.available, 3)

    def test_opaque_is_a_view_of_the_input(self) -> None:
        data = bytearray(bytes.fromhex("00000003") + b"abc\x00")
        value = Reader(data).unpack_opaque()
        self.assertIsInstance(value, memoryview)
        self.assertEqual(value, b"abc")
        data[4] = ord("z")
        self.assertEqual(bytes(value), b"zbc")

    def test_padding_is_only_checked_when_strict(self) -> None:
        data = bytes.fromhex("00000001") + b"a\x01\x00\x00"
        self.assertEqual(Reader(data).unpack_opaque(), b"a")
        with self.assertRaises(InvalidPaddingError):
            Reader(data, strict=True).unpack_opaque()

    def test_length_bound(self) -> None:
        with self.assertRaises(InvalidLengthError):
            Reader(bytes.fromhex("00000005") + bytes(8)).unpack_opaque(4)

    def test_bool_and_optional_flags(self) -> None:
        with self.assertRaises(InvalidBooleanError):
            Reader(bytes.fromhex("00000002")).unpack_bool()
        with self.assertRaises(InvalidOptionalFlagError):
            Reader(bytes.fromhex("00000002")).unpack_optional(lambda: None)
        self.assertTrue(Reader(bytes.fromhex("00000001")).unpack_optional_flag())
        self.assertFalse(Reader(bytes(4)).unpack_optional_flag())

    def test_unknown_enum_value(self) -> None:
        with self.assertRaises(UnknownEnumValueError) as cm:
            Reader(bytes.fromhex("00000009")).unpack_enum(Color)
        self.assertEqual(cm.exception.value, 9)
        self.assertEqual(cm.exception.offset, 0)

    def test_non_utf8_string(self) -> None:
        with self.assertRaises(NonUtf8StringError):
            Reader(bytes.fromhex("00000001") + b"\xff\x00\x00\x00").unpack_string()

    def test_arrays(self) -> None:
        r = Reader(bytes.fromhex("00000002" "00000007" "00000008"))
        self.assertEqual(r.unpack_array(None, r.unpack_int), [7, 8])

    def test_rest_is_the_unconsumed_tail(self) -> None:
        r = Reader(bytes.fromhex("00000001ff"))
        r.unpack_int()
        self.assertEqual(r.rest(), b"\xff")


class SizeHelperTests(unittest.TestCase):
    def test_sizes(self) -> None:
        self.assertEqual(padded(5), 8)
        self.assertEqual(padded(8), 8)
        self.assertEqual(string_size("abcde"), 12)
        self.assertEqual(opaque_size(b""), 4)


if __name__ == "__main__":
    unittest.main()
