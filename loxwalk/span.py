"""Positions and ranges within a piece of source text."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, order=True)
class CodePosition:
    """A point in the source.

    ``byte_pos`` is the offset into the source string. Line and column
    numbers start at 1. Positions order by offset first.
    """

    byte_pos: int
    line_no: int
    column_no: int

    @classmethod
    def from_byte_pos(cls, source: str, byte_pos: int) -> CodePosition:
        """Compute the line and column of an offset into ``source``."""
        if not 0 <= byte_pos <= len(source):
            raise ValueError(f"offset {byte_pos} is outside the source")
        prefix = source[:byte_pos]
        line_no = prefix.count("\n") + 1
        column_no = byte_pos - (prefix.rfind("\n") + 1) + 1
        return cls(byte_pos, line_no, column_no)

    def __str__(self) -> str:
        return f"{self.line_no}:{self.column_no}"


@dataclass(frozen=True)
class Span:
    """A range of source text from ``lo`` (inclusive) to ``hi`` (exclusive)."""

    lo: CodePosition
    hi: CodePosition

    def __post_init__(self) -> None:
        if self.lo > self.hi:
            lo, hi = self.hi, self.lo
            object.__setattr__(self, "lo", lo)
            object.__setattr__(self, "hi", hi)

    @classmethod
    def dummy(cls) -> Span:
        """A placeholder span for synthesised nodes."""
        zero = CodePosition(0, 0, 0)
        return cls(zero, zero)

    def to(self, other: Span) -> Span:
        """The smallest span covering both ``self`` and ``other``."""
        return Span(min(self.lo, other.lo), max(self.hi, other.hi))

    def extract_string(self, source: str) -> str:
        """Return the text this span covers."""
        if self.hi.byte_pos > len(source):
            raise ValueError("span extends beyond the source")
        return source[self.lo.byte_pos:self.hi.byte_pos]