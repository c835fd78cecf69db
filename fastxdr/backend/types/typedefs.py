"""
Typedefs become frozen single-field dataclasses.

A typedef is a distinct nominal type, never a transparent alias: two
typedefs of ``int`` are two classes whose instances never compare equal.
"""
from __future__ import annotations
from typing import TYPE_CHECKING

from fastxdr.backend.expressions import fold_sizes
from fastxdr.backend.naming import global_name
from fastxdr.semantics.typesys import ResolvedType, ResolvedTypedef

if TYPE_CHECKING:
    from fastxdr.backend.codegen_python import PythonCodegen


def emit_typedef(cg: "PythonCodegen", t: ResolvedType) -> None:
    defn: ResolvedTypedef = t.definition  # type: ignore[assignment]
    name = global_name(t.name)
    ex = cg.expressions
    out = cg.out
    decl = defn.decl

    out.line("@_dc.dataclass(frozen=True)")
    with out.block(f"class {name}({cg.bases('_xdr.XdrTypedef', t)}):"):
        out.line(f"value: {ex.annotation(decl)}")
        out.blank()
        cg.class_attributes(t)

        with out.block("def pack(self, w: _xdr.Writer) -> None:"):
            out.line(ex.pack_statement(decl, "self.value"))
        out.blank()

        out.line("@classmethod")
        with out.block(f"def unpack(cls, r: _xdr.Reader) -> {name}:"):
            out.line(f"return cls({ex.unpack_expression(decl)})")

        if not t.is_fixed:
            out.blank()
            with out.block("def wire_size(self) -> int:"):
                out.line(f"return {fold_sizes([ex.wire_size(decl, 'self.value')])}")
    out.blank(2)
    cg.export(name)
