from __future__ import annotations

import unittest

from fastxdr import analyze
from fastxdr.semantics.typesys import Fixed, Kind, VARIABLE


class SizeTests(unittest.TestCase):
    def test_scalars_and_fixed_arrays(self) -> None:
        index = analyze(
            "enum e { A = 1 };\n"
            "struct s { int a; hyper b; bool c; double d; e kind; int xs[3]; opaque pad[5]; };\n"
        )
        self.assertEqual(index["e"].size, Fixed(4))
        self.assertEqual(index["s"].size, Fixed(4 + 8 + 4 + 8 + 4 + 12 + 8))
        self.assertTrue(index["s"].is_fixed)

    def test_variable_members(self) -> None:
        index = analyze(
            "typedef int many<>; typedef string name<8>; struct n { int v; n *next; };"
            " typedef opaque blob<4>;"
        )
        for name in ("many", "name", "n", "blob"):
            self.assertIs(index[name].size, VARIABLE, name)

    def test_fixed_array_of_fixed_structs(self) -> None:
        index = analyze("struct p { int x; int y; }; typedef p quad[4];")
        self.assertEqual(index["quad"].size, Fixed(32))

    def test_union_with_equal_arms_is_fixed(self) -> None:
        index = analyze(
            "union u switch (bool b) { case TRUE: int x; case FALSE: unsigned y; };\n"
            "union d switch (int k) { case 1: int x; default: int y; };\n"
        )
        self.assertEqual(index["u"].size, Fixed(8))
        self.assertEqual(index["d"].size, Fixed(8))

    def test_union_that_can_fail_to_decode_is_variable(self) -> None:
        index = analyze(
            "union open switch (int k) { case 1: int x; case 2: int y; };\n"
            "enum e { A = 1, B = 2 };\n"
            "union partial switch (e d) { case A: int x; };\n"
        )
        self.assertIs(index["open"].size, VARIABLE)
        self.assertIs(index["partial"].size, VARIABLE)

    def test_union_with_unequal_arms_is_variable(self) -> None:
        index = analyze("union u switch (bool b) { case TRUE: hyper x; case FALSE: void; };")
        self.assertIs(index["u"].size, VARIABLE)


class OpacityTests(unittest.TestCase):
    def test_opacity_propagates_to_holders(self) -> None:
        index = analyze(
            "typedef opaque raw<>;\n"
            "struct inner { raw data; };\n"
            "struct outer { inner *maybe; int n; };\n"
            "union top switch (int k) { case 0: outer o; default: void; };\n"
            "struct plain { string s<>; int xs<>; };\n"
        )
        opaque = {t.name for t in index if t.opaque}
        self.assertEqual(opaque, {"raw", "inner", "outer", "top"})

    def test_kinds_and_order(self) -> None:
        index = analyze("typedef s alias; struct s { int x; }; enum e { A = 1 };")
        self.assertEqual([t.name for t in index], ["alias", "s", "e"])
        self.assertEqual(index.kind_of("alias"), Kind.TYPEDEF)
        self.assertEqual([t.name for t in index.of_kind(Kind.ENUM)], ["e"])


class TypeIndexTests(unittest.TestCase):
    def test_index_is_read_only(self) -> None:
        index = analyze("const N = 2; struct s { int xs[N]; };")
        with self.assertRaises(TypeError):
            index.constants["N"] = 3  # type: ignore[index]
        with self.assertRaises(TypeError):
            index.types["t"] = index["s"]  # type: ignore[index]
        with self.assertRaises(AttributeError):
            index.constants = {}  # type: ignore[misc]
        with self.assertRaises(AttributeError):
            index["s"].opaque = True  # type: ignore[misc]

    def test_constants_exclude_predefined_names(self) -> None:
        index = analyze("const N = TRUE;")
        self.assertEqual(dict(index.constants), {"N": 1})


if __name__ == "__main__":
    unittest.main()
