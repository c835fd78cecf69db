"""Module-level integer constants."""
from __future__ import annotations
from typing import TYPE_CHECKING

from fastxdr.backend.naming import global_name

if TYPE_CHECKING:
    from fastxdr.backend.codegen_python import PythonCodegen


def emit_constants(cg: "PythonCodegen") -> None:
    if not cg.index.constants:
        return
    for name, value in cg.index.constants.items():
        py = global_name(name)
        cg.out.line(f"{py} = {value}")
        cg.export(py)
    cg.out.blank(2)
