"""Source location information for AST nodes and tokens."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SourcePosition:
    """A point in the source text. ``line``/``column`` are 1-based, ``offset`` 0-based."""

    line: int
    column: int
    offset: int = 0

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class SourceSpan:
    """Half-open range of source text covered by a node."""

    start: SourcePosition
    end: SourcePosition

    @property
    def line(self) -> int:
        return self.start.line

    @property
    def column(self) -> int:
        return self.start.column

    def merge(self, other: "SourceSpan") -> "SourceSpan":
        return SourceSpan(start=self.start, end=other.end)

    def __str__(self) -> str:
        if self.end.line != self.start.line:
            return f"{self.start.line}-{self.end.line}"
        return str(self.start)


__all__ = ["SourcePosition", "SourceSpan"]
