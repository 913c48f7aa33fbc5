"""Line bookkeeping over the raw text of one source file."""

from __future__ import annotations

import bisect
import re
from typing import List, Tuple

_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


class SourceText:
    """
    Raw text of one file plus its line-start offsets.

    Lines are zero based.  ``\\r\\n``, ``\\r`` and ``\\n`` each end a line.
    """

    __slots__ = ("_text", "_line_starts")

    def __init__(self, text: str) -> None:
        self._text = text
        starts = [0]
        for m in _LINE_BREAK_RE.finditer(text):
            starts.append(m.end())
        self._line_starts: Tuple[int, ...] = tuple(starts)

    @property
    def text(self) -> str:
        return self._text

    @property
    def line_starts(self) -> Tuple[int, ...]:
        return self._line_starts

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    def line_of(self, offset: int) -> int:
        """Line containing *offset*."""
        return bisect.bisect_right(self._line_starts, offset) - 1

    def line_start(self, line: int) -> int:
        if line >= len(self._line_starts):
            return len(self._text)
        return self._line_starts[line]

    def line_extent(self, line: int) -> Tuple[int, int]:
        """
        ``(start, end)`` of a line's content, terminator excluded.

        A line past the end of the text is an empty span at end-of-text.
        """
        if line >= len(self._line_starts):
            return len(self._text), len(self._text)
        start = self._line_starts[line]
        m = _LINE_BREAK_RE.search(self._text, start)
        end = m.start() if m else len(self._text)
        return start, end

    def lines(self) -> List[str]:
        return [self._text[s:e] for s, e in map(self.line_extent, range(self.line_count))]

    def __len__(self) -> int:
        return len(self._text)

    def __repr__(self) -> str:
        return f"<SourceText {len(self._text)} chars, {self.line_count} lines>"
