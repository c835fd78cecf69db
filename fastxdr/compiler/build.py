"""Build-script helper: regenerate a module only when its specification changed.

The state of the last run is kept in a JSON stamp next to the output::

    {"fastxdr": "0.4.0", "mtime_ns": ..., "size": ..., "sha256": "...", "config": {...}}

mtime and size are compared first; the content hash decides when they
differ, so touching a file without editing it does not trigger a rebuild.
"""
from __future__ import annotations

import dataclasses
import hashlib
import json
import logging
from pathlib import Path
from typing import Optional

from fastxdr.compiler.config import GeneratorConfig
from fastxdr.compiler.pipeline import Generator

logger = logging.getLogger(__name__)

STAMP_SUFFIX = ".fastxdr-stamp"


def stamp_path_for(out_path: Path) -> Path:
    return out_path.with_name(out_path.name + STAMP_SUFFIX)


def _sha256(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def _read_stamp(path: Path) -> Optional[dict]:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return None


def regenerate_if_changed(spec_path: Path, out_path: Path, config: Optional[GeneratorConfig] = None,
                          stamp_path: Optional[Path] = None) -> bool:
    """Compile ``spec_path`` into ``out_path`` unless nothing changed since the last run.

    Returns True when the module was (re)generated. Compile errors propagate
    as CompileError and leave the previous output and stamp untouched.
    """
    from fastxdr import __version__

    spec_path = Path(spec_path)
    out_path = Path(out_path)
    stamp_path = Path(stamp_path) if stamp_path else stamp_path_for(out_path)
    config = config or GeneratorConfig()

    st = spec_path.stat()
    current = {
        "fastxdr": __version__,
        "mtime_ns": st.st_mtime_ns,
        "size": st.st_size,
        "config": dataclasses.asdict(config),
    }

    previous = _read_stamp(stamp_path)
    same_inputs = (previous is not None and out_path.exists()
                   and all(previous.get(k) == current[k] for k in ("fastxdr", "config")))
    if same_inputs and all(previous.get(k) == current[k] for k in ("mtime_ns", "size")):
        logger.debug("%s is up to date", out_path)
        return False

    data = spec_path.read_bytes()
    current["sha256"] = _sha256(data)
    if same_inputs and previous.get("sha256") == current["sha256"]:
        # touched, not edited
        stamp_path.write_text(json.dumps(current, indent=2), encoding="utf-8")
        logger.debug("%s is up to date (content unchanged)", out_path)
        return False

    text = Generator(config).generate(data.decode("utf-8"), filename=str(spec_path))
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(text, encoding="utf-8")
    stamp_path.write_text(json.dumps(current, indent=2), encoding="utf-8")
    logger.debug("regenerated %s from %s", out_path, spec_path)
    return True
