"""
Python backend orchestrator.

Turns an analyzed TypeIndex into the source of one Python module. The module
imports nothing but the standard library and the runtime package named by
the configuration.

API:
    from fastxdr.backend.codegen_python import PythonCodegen
    source = PythonCodegen(index, config).generate()

Layout of the emitted module: header comment, imports, constants, enums
(with their module-level variant aliases), then structs, typedefs and unions
in declaration order, then ``__all__``. Annotations are postponed
(``from __future__ import annotations``), so classes may mention types
declared further down.
"""
from __future__ import annotations
import logging
from typing import List, Optional

from fastxdr.backend.expressions import ExpressionEmitter
from fastxdr.backend.source_writer import SourceWriter
from fastxdr.backend.types.constants import emit_constants
from fastxdr.backend.types.enums import emit_enum
from fastxdr.backend.types.structs import emit_struct
from fastxdr.backend.types.typedefs import emit_typedef
from fastxdr.backend.types.unions import emit_union
from fastxdr.compiler.config import GeneratorConfig
from fastxdr.internals.errors import raise_internal_error
from fastxdr.semantics.type_index import TypeIndex
from fastxdr.semantics.typesys import Kind, ResolvedType

logger = logging.getLogger(__name__)

EMITTERS = {
    Kind.STRUCT: emit_struct,
    Kind.TYPEDEF: emit_typedef,
    Kind.UNION: emit_union,
}


class PythonCodegen:
    def __init__(self, index: TypeIndex, config: Optional[GeneratorConfig] = None,
                 source_name: Optional[str] = None) -> None:
        self.index = index
        self.config = config or GeneratorConfig()
        self.source_name = source_name
        self.out = SourceWriter()
        self.expressions = ExpressionEmitter(self)
        self.exports: List[str] = []

    def generate(self) -> str:
        self._emit_header()
        emit_constants(self)
        for t in self.index.of_kind(Kind.ENUM):
            emit_enum(self, t)
        for t in self.index:
            if t.kind is Kind.ENUM:
                continue
            emitter = EMITTERS.get(t.kind)
            if emitter is None:
                raise_internal_error("CE0001", message=f"no emitter for {t.kind} '{t.name}'")
            emitter(self, t)
        if self.config.export_all:
            self._emit_all()
        logger.debug("emitted %d lines, %d public names", len(self.out.lines), len(self.exports))
        return self.out.getvalue()

    # ---------- shared by the type emitters ----------

    def export(self, name: str) -> None:
        self.exports.append(name)

    def bases(self, runtime_base: str, t: ResolvedType) -> str:
        """Base class list; opaque-bearing types are generic over the byte storage."""
        if t.opaque:
            return f"{runtime_base}, _t.Generic[_xdr.B]"
        return runtime_base

    def class_attributes(self, t: ResolvedType) -> None:
        wrote = False
        if t.is_fixed:
            self.out.line(f"WIRE_SIZE = {t.size.size}")  # type: ignore[union-attr]
            wrote = True
        if self.config.strict_padding:
            self.out.line("STRICT_PADDING = True")
            wrote = True
        if wrote:
            self.out.blank()

    # ---------- module frame ----------

    def _emit_header(self) -> None:
        out = self.out
        for text in self.config.header_comment.splitlines():
            out.line(f"# {text}".rstrip())
        if self.source_name:
            out.line(f"# Generated by fastxdr from {self.source_name}")
        out.line("from __future__ import annotations")
        out.blank()
        out.line("import dataclasses as _dc")
        out.line("import typing as _t")
        out.blank()
        out.line(f"import {self.config.runtime_module} as _xdr")
        out.blank(2)

    def _emit_all(self) -> None:
        with self.out.block("__all__ = ["):
            for name in self.exports:
                self.out.line(f"{name!r},")
        self.out.line("]")
