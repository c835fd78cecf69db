from __future__ import annotations

import io
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

from fastxdr import __version__
from fastxdr.compiler.cli import main
from fastxdr.compiler.config import ConfigError, GeneratorConfig, load_config, load_config_from_string

from helpers import FIXTURES


def run(*argv: str):
    """Run the CLI in-process; returns (exit code, stdout, stderr)."""
    out, err = io.StringIO(), io.StringIO()
    with redirect_stdout(out), redirect_stderr(err):
        code = main(list(argv))
    return code, out.getvalue(), err.getvalue()


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def write(self, name: str, text: str) -> Path:
        path = self.tmp / name
        path.write_text(text, encoding="utf-8")
        return path

    def test_version(self) -> None:
        code, out, _ = run("--version")
        self.assertEqual(code, 0)
        self.assertEqual(out.strip(), f"fastxdr {__version__}")

    def test_missing_source(self) -> None:
        code, _, err = run()
        self.assertEqual(code, 2)
        self.assertIn("source file required", err)

    def test_unreadable_source(self) -> None:
        code, _, err = run(str(self.tmp / "nope.x"))
        self.assertEqual(code, 2)
        self.assertIn("cannot read", err)

    def test_module_goes_to_stdout(self) -> None:
        code, out, _ = run(str(FIXTURES / "test_scenario.x"))
        self.assertEqual(code, 0)
        self.assertIn("class choice(_xdr.XdrUnion):", out)
        self.assertIn("# Generated by fastxdr from test_scenario.x", out)

    def test_output_file(self) -> None:
        target = self.tmp / "scenario_xdr.py"
        code, out, _ = run(str(FIXTURES / "test_scenario.x"), "-o", str(target))
        self.assertEqual(code, 0)
        self.assertEqual(out, "")
        self.assertIn("ANSWER = 42", target.read_text(encoding="utf-8"))

    def test_compile_error_is_reported_with_location(self) -> None:
        src = self.write("bad.x", "struct s {\n  missing m;\n};\n")
        code, out, err = run(str(src), "-o", str(self.tmp / "bad.py"))
        self.assertEqual(code, 2)
        self.assertEqual(out, "")
        self.assertIn("bad.x:2:3", err)
        self.assertIn("[CE0201]", err)
        self.assertFalse((self.tmp / "bad.py").exists())

    def test_warnings_do_not_fail(self) -> None:
        src = self.write("warn.x", "enum e { A = 1, B = 2 };\nunion u switch (e d) { case A: void; };\n")
        code, out, err = run(str(src))
        self.assertEqual(code, 0)
        self.assertIn("class u(_xdr.XdrUnion):", out)
        self.assertIn("[CW0501]", err)

    def test_command_line_options(self) -> None:
        code, out, _ = run(str(FIXTURES / "test_scenario.x"), "--strict-padding",
                           "--runtime-module", "myxdr", "--no-all")
        self.assertEqual(code, 0)
        self.assertIn("import myxdr as _xdr", out)
        self.assertIn("STRICT_PADDING = True", out)
        self.assertNotIn("__all__", out)

    def test_config_file(self) -> None:
        cfg = self.write("pyproject.toml", '[tool.fastxdr]\nruntime_module = "proto.rt"\nexport_all = false\n')
        code, out, _ = run(str(FIXTURES / "test_scenario.x"), "--config", str(cfg))
        self.assertEqual(code, 0)
        self.assertIn("import proto.rt as _xdr", out)
        self.assertNotIn("__all__", out)

    def test_command_line_overrides_config(self) -> None:
        cfg = self.write("fastxdr.toml", 'runtime_module = "proto.rt"\n')
        code, out, _ = run(str(FIXTURES / "test_scenario.x"), "--config", str(cfg),
                           "--runtime-module", "other.rt")
        self.assertEqual(code, 0)
        self.assertIn("import other.rt as _xdr", out)

    def test_bad_config(self) -> None:
        cfg = self.write("fastxdr.toml", "strict_padding = 1\n")
        code, _, err = run(str(FIXTURES / "test_scenario.x"), "--config", str(cfg))
        self.assertEqual(code, 2)
        self.assertIn("strict_padding", err)

    def test_dump_ast(self) -> None:
        src = self.write("one.x", "const A = 1;\n")
        code, out, _ = run(str(src), "--dump-ast")
        self.assertEqual(code, 0)
        self.assertIn("ConstDef", out)


class ConfigTests(unittest.TestCase):
    def test_defaults(self) -> None:
        config = load_config_from_string("")
        self.assertEqual(config, GeneratorConfig())
        self.assertEqual(config.runtime_module, "fastxdr.runtime")

    def test_unknown_option(self) -> None:
        with self.assertRaises(ConfigError):
            load_config_from_string("colour = true\n")

    def test_invalid_module_path(self) -> None:
        with self.assertRaises(ConfigError):
            load_config_from_string('runtime_module = "not a module"\n')

    def test_with_options_skips_unset_values(self) -> None:
        config = GeneratorConfig().with_options(strict_padding=None, export_all=False)
        self.assertFalse(config.export_all)
        self.assertFalse(config.strict_padding)

    def test_missing_and_malformed_files(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(ConfigError):
                load_config(Path(tmp) / "absent.toml")
            broken = Path(tmp) / "broken.toml"
            broken.write_text("runtime_module = \n", encoding="utf-8")
            with self.assertRaises(ConfigError):
                load_config(broken)

    def test_pyproject_without_table(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "pyproject.toml"
            path.write_text('[project]\nname = "x"\n', encoding="utf-8")
            self.assertEqual(load_config(path), GeneratorConfig())


if __name__ == "__main__":
    unittest.main()
