from __future__ import annotations

import unittest

from fastxdr import (
    CompileError, CyclicConstantError, CyclicTypeError, DuplicateDefinitionError,
    InvalidDiscriminantError, InvalidValueError, UndefinedSymbolError,
    UnsupportedConstructError, XdrSyntaxError, analyze,
)
from fastxdr.internals.parser import parse_to_ast
from fastxdr.internals.report import Reporter
from fastxdr.semantics.passes.cycles import DependencyGraph
from fastxdr.semantics.semantic_analyzer import SemanticAnalyzer
from fastxdr.semantics.typesys import Arity, BuiltinType, Canonical, Kind


def check(source: str):
    """Run the analyzer directly; returns (index, reporter)."""
    spec, _tree = parse_to_ast(source)
    reporter = Reporter(source)
    index = SemanticAnalyzer(reporter).check(spec)
    return index, reporter


class ConstantTests(unittest.TestCase):
    def test_references_resolve_transitively(self) -> None:
        index = analyze("const C = B; const B = A; const A = 0x20;")
        self.assertEqual(dict(index.constants), {"C": 32, "B": 32, "A": 32})

    def test_constant_cycle(self) -> None:
        with self.assertRaises(CyclicConstantError) as cm:
            analyze("const A = B;\nconst B = A;\n")
        self.assertEqual(cm.exception.code, "CE0402")
        self.assertIsInstance(cm.exception, CyclicTypeError)

    def test_undefined_constant(self) -> None:
        with self.assertRaises(UndefinedSymbolError):
            analyze("const A = NOPE;")

    def test_type_used_as_value(self) -> None:
        with self.assertRaises(UndefinedSymbolError) as cm:
            analyze("struct s { int x; }; const A = s;")
        self.assertEqual(cm.exception.code, "CE0202")

    def test_constant_range(self) -> None:
        analyze("const A = -9223372036854775808;")
        with self.assertRaises(InvalidValueError) as cm:
            analyze("const A = 9223372036854775808;")
        self.assertEqual(cm.exception.code, "CE0701")

    def test_enum_value_range(self) -> None:
        with self.assertRaises(InvalidValueError) as cm:
            analyze("enum e { BIG = 0x80000000 };")
        self.assertEqual(cm.exception.code, "CE0702")

    def test_true_and_false_are_predefined(self) -> None:
        index = analyze("const YES = TRUE; const NO = FALSE;")
        self.assertEqual(dict(index.constants), {"YES": 1, "NO": 0})


class NamespaceTests(unittest.TestCase):
    def test_enum_value_clashes_with_constant(self) -> None:
        with self.assertRaises(DuplicateDefinitionError) as cm:
            analyze("const RED = 1;\nenum color { RED = 2 };\n")
        self.assertEqual(cm.exception.code, "CE0301")
        self.assertEqual(cm.exception.span.line, 2)

    def test_predefined_constant_cannot_be_redefined(self) -> None:
        with self.assertRaises(DuplicateDefinitionError):
            analyze("const TRUE = 2;")

    def test_duplicate_struct_field(self) -> None:
        with self.assertRaises(DuplicateDefinitionError) as cm:
            analyze("struct s { int a; hyper a; };")
        self.assertEqual(cm.exception.code, "CE0302")

    def test_duplicate_enum_value(self) -> None:
        with self.assertRaises(DuplicateDefinitionError) as cm:
            analyze("enum e { A = 1, B = 1 };")
        self.assertEqual(cm.exception.code, "CE0303")

    def test_all_errors_of_a_stage_are_reported(self) -> None:
        with self.assertRaises(CompileError) as cm:
            analyze("struct s { a x; b y; };")
        self.assertEqual([d.code for d in cm.exception.diagnostics], ["CE0201", "CE0201"])


class TypeResolutionTests(unittest.TestCase):
    def test_forward_references(self) -> None:
        index = analyze("struct a { b inner; }; struct b { int x; };")
        self.assertEqual(index["a"].dependencies, frozenset({"b"}))

    def test_undefined_type(self) -> None:
        with self.assertRaises(UndefinedSymbolError) as cm:
            analyze("struct s {\n  missing m;\n};\n")
        self.assertEqual(cm.exception.code, "CE0201")
        self.assertEqual(cm.exception.span.line, 2)

    def test_constant_used_as_type(self) -> None:
        with self.assertRaises(UndefinedSymbolError) as cm:
            analyze("const N = 1; struct s { N x; };")
        self.assertEqual(cm.exception.code, "CE0203")

    def test_typedef_chain_is_canonicalized(self) -> None:
        index = analyze("typedef unsigned int u32; typedef u32 id; typedef id ids<4>;")
        self.assertEqual(index["id"].canonical, Canonical(BuiltinType.UINT))
        self.assertEqual(index["id"].kind, Kind.TYPEDEF)
        self.assertEqual(index["ids"].canonical, Canonical("id", Arity.VARIABLE, 4))

    def test_lengths_resolve_through_constants(self) -> None:
        index = analyze("const N = 3; typedef int triple[N];")
        self.assertEqual(index["triple"].canonical, Canonical(BuiltinType.INT, Arity.FIXED, 3))

    def test_length_range(self) -> None:
        with self.assertRaises(InvalidValueError) as cm:
            analyze("typedef int xs<-1>;")
        self.assertEqual(cm.exception.code, "CE0703")


class CycleTests(unittest.TestCase):
    def test_direct_self_containment(self) -> None:
        with self.assertRaises(CyclicTypeError) as cm:
            analyze("struct node { int v; node next; };")
        self.assertNotIsInstance(cm.exception, CyclicConstantError)
        self.assertIn("node -> node", str(cm.exception))

    def test_indirect_cycle_through_typedef_and_union(self) -> None:
        with self.assertRaises(CyclicTypeError):
            analyze(
                "typedef b alias;\n"
                "struct a { alias x; };\n"
                "union b switch (int k) { case 0: a y; default: void; };\n"
            )

    def test_optional_breaks_the_cycle(self) -> None:
        index = analyze("struct node { int v; node *next; };")
        self.assertIn("node", index)

    def test_variable_array_does_not_break_the_cycle(self) -> None:
        with self.assertRaises(CyclicTypeError):
            analyze("struct tree { tree children<>; };")


class DependencyGraphTests(unittest.TestCase):
    def test_topological_order_puts_dependencies_first(self) -> None:
        g = DependencyGraph()
        g.add_dependency("a", "b")
        g.add_dependency("b", "c")
        self.assertEqual(g.topological_order(), ["c", "b", "a"])

    def test_optional_edges_are_not_value_edges(self) -> None:
        g = DependencyGraph()
        g.add_dependency("a", "a", optional=True)
        self.assertEqual(g.find_cycle(), [])
        self.assertEqual(g.get_dependencies("a", include_optional=False), set())
        self.assertEqual(g.get_dependencies("a"), {"a"})

    def test_transitive_closure(self) -> None:
        g = DependencyGraph()
        g.add_dependency("a", "b")
        g.add_dependency("b", "c", optional=True)
        self.assertEqual(g.get_transitive_closure({"a"}), {"a", "b", "c"})


class UnionValidationTests(unittest.TestCase):
    def test_discriminant_type(self) -> None:
        with self.assertRaises(InvalidDiscriminantError) as cm:
            analyze("union u switch (string s<>) { case 1: void; };")
        self.assertEqual(cm.exception.code, "CE0501")

    def test_discriminant_through_typedef(self) -> None:
        analyze("typedef unsigned hyper big; union u switch (big k) { case 1: void; };")

    def test_array_discriminant(self) -> None:
        with self.assertRaises(InvalidDiscriminantError):
            analyze("typedef int many[2]; union u switch (many k) { case 1: void; };")

    def test_label_outside_enum(self) -> None:
        with self.assertRaises(InvalidDiscriminantError) as cm:
            analyze("enum color { RED = 0, GREEN = 1 };\n"
                    "union u switch (color c) { case 7: int x; };\n")
        self.assertEqual(cm.exception.code, "CE0502")

    def test_label_from_another_enum(self) -> None:
        with self.assertRaises(InvalidDiscriminantError):
            analyze("enum color { RED = 0 }; enum size { BIG = 0 };"
                    " union u switch (color c) { case BIG: void; default: void; };")

    def test_label_outside_integer_range(self) -> None:
        with self.assertRaises(InvalidDiscriminantError):
            analyze("union u switch (unsigned int k) { case -1: void; };")

    def test_duplicate_label(self) -> None:
        with self.assertRaises(InvalidDiscriminantError) as cm:
            analyze("union u switch (int k) { case 1: int a; case 1: int b; };")
        self.assertEqual(cm.exception.code, "CE0503")

    def test_arm_named_like_discriminant(self) -> None:
        with self.assertRaises(InvalidDiscriminantError) as cm:
            analyze("union u switch (int k) { case 1: int k; };")
        self.assertEqual(cm.exception.code, "CE0504")

    def test_uncovered_enum_values_only_warn(self) -> None:
        index, reporter = check("enum e { A = 1, B = 2 }; union u switch (e d) { case A: void; };")
        self.assertIsNotNone(index)
        self.assertFalse(reporter.has_errors)
        self.assertEqual([w.code for w in reporter.warnings], ["CW0501"])
        self.assertIn("B", reporter.warnings[0].message)


class UnsupportedTests(unittest.TestCase):
    def test_nested_arrays(self) -> None:
        with self.assertRaises(UnsupportedConstructError) as cm:
            analyze("typedef int row<4>; struct m { row rows[2]; };")
        self.assertEqual(cm.exception.code, "CE0601")

    def test_array_of_byte_typedefs_is_fine(self) -> None:
        analyze("typedef string name<32>; typedef opaque id[16]; struct s { name names<>; id ids[2]; };")

    def test_inline_body(self) -> None:
        with self.assertRaises(UnsupportedConstructError) as cm:
            analyze("struct s { enum { A = 1 } e; };")
        self.assertEqual(cm.exception.code, "CE0602")

    def test_quadruple(self) -> None:
        with self.assertRaises(UnsupportedConstructError) as cm:
            analyze("struct s { quadruple q; };")
        self.assertEqual(cm.exception.code, "CE0603")

    def test_void_field(self) -> None:
        with self.assertRaises(UnsupportedConstructError) as cm:
            analyze("struct s { void; };")
        self.assertEqual(cm.exception.code, "CE0604")

    def test_void_typedef_is_a_syntax_error(self) -> None:
        with self.assertRaises(XdrSyntaxError):
            analyze("typedef void nothing;")


if __name__ == "__main__":
    unittest.main()
