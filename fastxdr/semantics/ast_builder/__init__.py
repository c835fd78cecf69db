"""
AST Builder module for the XDR compiler.

Exports:
    ASTBuilder: Main class for building typed AST from Lark parse trees
    Exceptions: Custom exceptions for AST building errors
"""
# Main ASTBuilder class
from fastxdr.semantics.ast_builder.builder import ASTBuilder

# Exception classes
from fastxdr.semantics.ast_builder.exceptions import (
    BuilderError,
    OctalLiteralError,
    DuplicateNameError,
    VoidDeclarationError,
)

__all__ = [
    'ASTBuilder',
    'BuilderError',
    'OctalLiteralError',
    'DuplicateNameError',
    'VoidDeclarationError',
]
