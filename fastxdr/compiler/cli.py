"""CLI entry point and argument parsing."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path


def _configure_logging(verbosity: int) -> None:
    if verbosity <= 0:
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    root = logging.getLogger("fastxdr")
    root.addHandler(handler)
    root.setLevel(logging.DEBUG)
    if verbosity > 1:
        from lark import logger as lark_logger
        lark_logger.addHandler(handler)
        lark_logger.setLevel(logging.DEBUG)


def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="fastxdr", description="Compile an XDR specification into a Python module")

    ap.add_argument("source", nargs="?", help="Path to the XDR specification (.x)")
    ap.add_argument("--version", action="store_true", help="Show version and exit")
    ap.add_argument("-o", "--out", metavar="PATH",
                    help="Write the generated module to PATH (default: stdout)")
    ap.add_argument("--config", metavar="PATH",
                    help="TOML configuration: a pyproject.toml with [tool.fastxdr], or a standalone file")
    ap.add_argument("--strict-padding", action="store_true", default=None,
                    help="Generated decoders reject non-zero padding bytes")
    ap.add_argument("--runtime-module", metavar="NAME",
                    help="Module the generated code imports its runtime from (default: fastxdr.runtime)")
    ap.add_argument("--no-all", dest="export_all", action="store_false", default=None,
                    help="Do not emit __all__")
    ap.add_argument("--dump-parse", action="store_true", help="Print raw Lark tree")
    ap.add_argument("--dump-ast", action="store_true", help="Print AST")
    ap.add_argument("-v", "--verbose", action="count", default=0,
                    help="Log compiler stages to stderr (twice: include the parser's own log)")
    return ap


def main(argv: list[str] | None = None) -> int:
    """Main compiler entry point.

    Returns:
        Exit code (0=success, 2=errors).
    """
    ap = build_arg_parser()
    args = ap.parse_args(argv)

    if args.version:
        from fastxdr import __version__
        print(f"fastxdr {__version__}")
        return 0

    if not args.source:
        print("error: source file required", file=sys.stderr)
        return 2

    _configure_logging(args.verbose)

    from fastxdr.compiler.config import ConfigError, GeneratorConfig, load_config
    from fastxdr.compiler.pipeline import compile_source
    from fastxdr.internals.errors import CompileError
    from fastxdr.internals.report import Reporter

    try:
        config = load_config(Path(args.config)) if args.config else GeneratorConfig()
        config = config.with_options(
            strict_padding=args.strict_padding,
            runtime_module=args.runtime_module,
            export_all=args.export_all,
        )
    except ConfigError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    src_path = Path(args.source)
    try:
        src = src_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        print(f"error: cannot read {src_path}: {e}", file=sys.stderr)
        return 2

    reporter = Reporter(source=src, filename=str(src_path))
    try:
        text = compile_source(src, config, filename=str(src_path), reporter=reporter,
                              dump_parse=args.dump_parse, dump_ast=args.dump_ast)
    except CompileError as e:
        if e.reporter is not None:
            e.reporter.print()
        else:
            print(f"error: {e}", file=sys.stderr)
        return 2

    # Warnings only
    reporter.print()

    if args.out:
        try:
            Path(args.out).write_text(text, encoding="utf-8")
        except OSError as e:
            print(f"error: cannot write {args.out}: {e}", file=sys.stderr)
            return 2
    else:
        sys.stdout.write(text)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
