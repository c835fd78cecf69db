"""Shared helpers for the unit tests."""
from __future__ import annotations

import itertools
import sys
import types
from pathlib import Path
from typing import Optional

from fastxdr import GeneratorConfig, generate

FIXTURES = Path(__file__).resolve().parent / "fixtures"

SCENARIO = (FIXTURES / "test_scenario.x").read_text(encoding="utf-8")

_counter = itertools.count()


def load_generated(source: str, config: Optional[GeneratorConfig] = None) -> types.ModuleType:
    """Compile ``source`` and import the result as a fresh module."""
    text = generate(source, config)
    name = f"fastxdr_generated_{next(_counter)}"
    module = types.ModuleType(name)
    # dataclasses looks the defining module up in sys.modules
    sys.modules[name] = module
    exec(compile(text, f"<{name}>", "exec"), module.__dict__)
    return module


def fixture(name: str) -> str:
    return (FIXTURES / name).read_text(encoding="utf-8")
