"""Line-oriented source buffer with indentation tracking."""
from __future__ import annotations
from contextlib import contextmanager
from typing import Iterator, List

INDENT = "    "


class SourceWriter:
    def __init__(self) -> None:
        self.lines: List[str] = []
        self.level = 0

    def line(self, text: str = "") -> None:
        self.lines.append(INDENT * self.level + text if text else "")

    def blank(self, count: int = 1) -> None:
        for _ in range(count):
            self.line()

    @contextmanager
    def indent(self) -> Iterator[None]:
        self.level += 1
        try:
            yield
        finally:
            self.level -= 1

    @contextmanager
    def block(self, header: str) -> Iterator[None]:
        """Write ``header`` (a line ending in ':') and indent what follows."""
        self.line(header)
        with self.indent():
            yield

    def getvalue(self) -> str:
        # Drop trailing blank lines, end with exactly one newline.
        lines = list(self.lines)
        while lines and not lines[-1]:
            lines.pop()
        return "\n".join(lines) + "\n"
