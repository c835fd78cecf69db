"""fastxdr - XDR interface compiler with a Python backend."""
from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("fastxdr")
    __dev__ = False
except PackageNotFoundError:
    # Development mode - read from pyproject.toml
    import tomllib
    from pathlib import Path
    try:
        pyproject = Path(__file__).parent.parent / "pyproject.toml"
        with open(pyproject, "rb") as f:
            __version__ = tomllib.load(f).get("project", {}).get("version", "unknown")
    except (OSError, tomllib.TOMLDecodeError):
        __version__ = "unknown"
    __dev__ = True

from fastxdr.compiler.config import GeneratorConfig
from fastxdr.compiler.pipeline import Generator, analyze, generate
from fastxdr.internals.errors import (
    CompileError,
    XdrSyntaxError,
    UndefinedSymbolError,
    DuplicateDefinitionError,
    CyclicTypeError,
    CyclicConstantError,
    InvalidDiscriminantError,
    UnsupportedConstructError,
    InvalidValueError,
)

__all__ = [
    "__version__",
    "GeneratorConfig",
    "Generator",
    "analyze",
    "generate",
    "CompileError",
    "XdrSyntaxError",
    "UndefinedSymbolError",
    "DuplicateDefinitionError",
    "CyclicTypeError",
    "CyclicConstantError",
    "InvalidDiscriminantError",
    "UnsupportedConstructError",
    "InvalidValueError",
]
