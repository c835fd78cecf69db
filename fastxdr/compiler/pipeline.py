"""Compilation orchestration: parse, analyze, emit."""
from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional, Tuple

from lark import UnexpectedInput

from fastxdr.backend.codegen_python import PythonCodegen
from fastxdr.compiler.config import GeneratorConfig
from fastxdr.internals import errors as er
from fastxdr.internals.parse_errors import handle_parse_exception
from fastxdr.internals.parser import parse_to_ast
from fastxdr.internals.report import Reporter
from fastxdr.semantics.ast import Specification
from fastxdr.semantics.ast_builder import BuilderError
from fastxdr.semantics.semantic_analyzer import SemanticAnalyzer
from fastxdr.semantics.type_index import TypeIndex

logger = logging.getLogger(__name__)


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000.0


def parse_source(source: str, reporter: Reporter, dump_parse: bool = False) -> Optional[Specification]:
    """Stages 1 and 2. Returns None when a syntax error was reported."""
    try:
        spec, _tree = parse_to_ast(source, dump_parse=dump_parse)
    except (UnexpectedInput, BuilderError) as exc:
        if not handle_parse_exception(exc, reporter):
            raise
        return None
    return spec


def run_frontend(source: str, reporter: Reporter, dump_parse: bool = False,
                 dump_ast: bool = False) -> Tuple[Specification, TypeIndex]:
    """Parse and analyze ``source``.

    Raises the CompileError subclass matching the first error reported by the
    failing stage; later stages never run on a failed one's output.
    """
    start = time.perf_counter()
    spec = parse_source(source, reporter, dump_parse=dump_parse)
    er.raise_for(reporter)
    if spec is None:
        er.raise_internal_error("CE0001", message="parser produced no specification")
    logger.debug("parsed %d definitions in %.1f ms", len(spec.definitions), _elapsed_ms(start))

    if dump_ast:
        from fastxdr.frontend.ast_printer import dump_ast as _dump
        print(_dump(spec))

    start = time.perf_counter()
    index = SemanticAnalyzer(reporter).check(spec)
    er.raise_for(reporter)
    if index is None:
        er.raise_internal_error("CE0001", message="analysis failed without a diagnostic")
    logger.debug("analyzed %d types, %d constants in %.1f ms",
                 len(index.types), len(index.constants), _elapsed_ms(start))
    for warning in reporter.warnings:
        logger.info("%s [%s]: %s", reporter.filename, warning.code, warning.message)
    return spec, index


def compile_source(source: str, config: Optional[GeneratorConfig] = None,
                   filename: str = "<input>", reporter: Optional[Reporter] = None,
                   dump_parse: bool = False, dump_ast: bool = False) -> str:
    reporter = reporter if reporter is not None else Reporter(source, filename)
    _spec, index = run_frontend(source, reporter, dump_parse=dump_parse, dump_ast=dump_ast)

    start = time.perf_counter()
    source_name = Path(filename).name if filename and not filename.startswith("<") else None
    text = PythonCodegen(index, config, source_name=source_name).generate()
    logger.debug("emitted %d bytes in %.1f ms", len(text), _elapsed_ms(start))
    return text


def analyze(source: str, filename: str = "<input>") -> TypeIndex:
    """Parse and analyze ``source``; returns the read-only TypeIndex."""
    _spec, index = run_frontend(source, Reporter(source, filename))
    return index


def generate(source: str, config: Optional[GeneratorConfig] = None, filename: str = "<input>") -> str:
    """Compile ``source`` into the text of a Python module."""
    return compile_source(source, config, filename)


class Generator:
    """Builder-style front door.

        Generator().with_strict_padding().generate(text)
    """

    def __init__(self, config: Optional[GeneratorConfig] = None) -> None:
        self.config = config or GeneratorConfig()

    def with_strict_padding(self, enabled: bool = True) -> "Generator":
        self.config = self.config.with_options(strict_padding=enabled)
        return self

    def with_runtime_module(self, module: str) -> "Generator":
        self.config = self.config.with_options(runtime_module=module)
        return self

    def with_export_all(self, enabled: bool = True) -> "Generator":
        self.config = self.config.with_options(export_all=enabled)
        return self

    def generate(self, source: str, filename: str = "<input>") -> str:
        return compile_source(source, self.config, filename)

    def generate_file(self, path: Path) -> str:
        path = Path(path)
        return self.generate(path.read_text(encoding="utf-8"), filename=str(path))
