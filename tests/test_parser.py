from __future__ import annotations

import unittest

from fastxdr import XdrSyntaxError, analyze
from fastxdr.internals.parser import describe_terminals, get_parser, parse


class ParserTests(unittest.TestCase):
    def test_parser_is_cached(self) -> None:
        self.assertIs(get_parser(), get_parser())

    def test_empty_specification(self) -> None:
        tree = parse("")
        self.assertEqual(tree.data, "specification")
        self.assertEqual(tree.children, [])

    def test_comments_and_passthrough_lines_are_ignored(self) -> None:
        tree = parse(
            "%#include <rpc/rpc.h>\n"
            "/* block\n comment */\n"
            "// line comment\n"
            "const A = 1;\n"
        )
        self.assertEqual(len(tree.children), 1)
        self.assertEqual(tree.children[0].data, "const_def")

    def test_every_definition_kind(self) -> None:
        tree = parse(
            "const N = 0x10;\n"
            "enum e { X = 1 };\n"
            "struct s { int a; };\n"
            "typedef s many<N>;\n"
            "union u switch (e d) { case X: void; default: int v; };\n"
        )
        kinds = [c.data for c in tree.children]
        self.assertEqual(kinds, ["const_def", "enum_def", "struct_def", "typedef_def", "union_def"])

    def test_describe_terminals(self) -> None:
        self.assertEqual(describe_terminals(["SEMICOLON"]), "';'")
        self.assertEqual(describe_terminals(["NAME", "NUMBER"]), "identifier, number")
        self.assertEqual(describe_terminals([]), "end of input")


class SyntaxErrorTests(unittest.TestCase):
    def assertSyntaxError(self, source: str, code: str, line: int) -> XdrSyntaxError:
        with self.assertRaises(XdrSyntaxError) as cm:
            analyze(source)
        self.assertEqual(cm.exception.code, code)
        if line:
            self.assertEqual(cm.exception.span.line, line)
        return cm.exception

    def test_missing_semicolon(self) -> None:
        err = self.assertSyntaxError("struct s {\n  int a\n};\n", "CE0101", 3)
        self.assertIn("expected", str(err))

    def test_unexpected_character(self) -> None:
        self.assertSyntaxError("const A = 1;\nconst B = @;\n", "CE0102", 2)

    def test_unexpected_end_of_input(self) -> None:
        self.assertSyntaxError("struct s { int a;", "CE0103", 0)

    def test_malformed_octal(self) -> None:
        self.assertSyntaxError("const A = 09;\n", "CE0104", 1)

    def test_program_definitions_are_rejected(self) -> None:
        self.assertSyntaxError(
            "program P { version V { void NULL(void) = 0; } = 1; } = 100;\n", "CE0101", 1)

    def test_message_has_location(self) -> None:
        with self.assertRaises(XdrSyntaxError) as cm:
            analyze("const A = ;\n", filename="bad.x")
        self.assertIn("bad.x:1:11", str(cm.exception))


if __name__ == "__main__":
    unittest.main()
