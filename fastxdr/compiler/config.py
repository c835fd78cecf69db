"""Generator configuration ([tool.fastxdr] in pyproject.toml, or a standalone TOML file)."""
from __future__ import annotations

import re
import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path

# Dotted Python module path
MODULE_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class GeneratorConfig:
    runtime_module: str = "fastxdr.runtime"
    strict_padding: bool = False
    export_all: bool = True
    header_comment: str = "Do NOT modify"

    def validate(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            expected = type(getattr(GeneratorConfig, f.name))
            if type(value) is not expected:
                raise ConfigError(
                    f"Option '{f.name}' must be {expected.__name__}, got {type(value).__name__}"
                )
        if not MODULE_PATTERN.match(self.runtime_module):
            raise ConfigError(f"Invalid runtime_module '{self.runtime_module}'. Must be a dotted module path.")

    def with_options(self, **overrides) -> "GeneratorConfig":
        """Copy with every non-None override applied."""
        changed = replace(self, **{k: v for k, v in overrides.items() if v is not None})
        changed.validate()
        return changed


def load_config(path: Path) -> GeneratorConfig:
    """Load a configuration file.

    A file named pyproject.toml is read from its [tool.fastxdr] table (absent
    table: defaults); any other file is read from its top level.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"No configuration file at {path}")
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"{path}: {e}") from None
    if path.name == "pyproject.toml":
        data = data.get("tool", {}).get("fastxdr", {})
    return config_from_dict(data, source=str(path))


def load_config_from_string(text: str) -> GeneratorConfig:
    return config_from_dict(tomllib.loads(text))


def config_from_dict(data: dict, source: str = "configuration") -> GeneratorConfig:
    known = {f.name for f in fields(GeneratorConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"{source}: unknown option(s): {', '.join(unknown)}")
    config = GeneratorConfig(**data)
    config.validate()
    return config
