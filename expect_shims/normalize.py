"""
Order-insensitive canonical form for rendered union/intersection types.

A checker may print ``A | B`` in one version and ``B | A`` in another.
This is a textual canonicalization: separators are only honoured outside
brackets, and a member wrapped in one matching pair of parentheses is
normalized inside.  Generic arguments are not parsed.

>>> normalize_type_text("string | number")
'number | string'
>>> normalize_type_text("C | (B & A)")
'(A & B) | C'
>>> normalize_type_text("((x: number) => string) & (() => void)")
'(() => void) & ((x: number) => string)'
"""

from __future__ import annotations

from typing import List

UNION_SEPARATOR = " | "
INTERSECTION_SEPARATOR = " & "

_OPENERS = "([{"
_CLOSERS = ")]}"


def normalize_type_text(text: str) -> str:
    parts = [_normalize_intersection(p) for p in _split_top_level(text, UNION_SEPARATOR)]
    return UNION_SEPARATOR.join(sorted(parts))


def _normalize_intersection(text: str) -> str:
    members = []
    for member in _split_top_level(text, INTERSECTION_SEPARATOR):
        if _is_wrapped(member):
            member = f"({normalize_type_text(member[1:-1])})"
        members.append(member)
    return INTERSECTION_SEPARATOR.join(sorted(members))


def _split_top_level(text: str, separator: str) -> List[str]:
    """Split *text* on *separator* where no bracket is open."""
    parts = []
    depth = 0
    start = i = 0
    while i < len(text):
        ch = text[i]
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            # unbalanced (e.g. truncated) text never goes below zero
            depth = max(depth - 1, 0)
        elif depth == 0 and text.startswith(separator, i):
            parts.append(text[start:i])
            i += len(separator)
            start = i
            continue
        i += 1
    parts.append(text[start:])
    return parts


def _is_wrapped(text: str) -> bool:
    """True if the ``(`` at index 0 is closed by the last character."""
    if not (text.startswith("(") and text.endswith(")")):
        return False
    depth = 0
    for i, ch in enumerate(text):
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth -= 1
            if depth == 0:
                return i == len(text) - 1
    return False


__all__ = ["normalize_type_text", "UNION_SEPARATOR", "INTERSECTION_SEPARATOR"]
