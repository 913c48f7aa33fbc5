"""Cross-reference checker diagnostics with ``$ExpectError`` lines."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import AbstractSet, Iterable, List, Set

from .checker_api import CheckerDiagnostic
from .source import SourceText


@dataclass
class Reconciliation:
    """
    Attributes
    ----------
    unexpected    : Diagnostics not covered by an ``$ExpectError``
    missing_lines : ``$ExpectError`` lines on which nothing was reported
    """
    unexpected: List[CheckerDiagnostic] = field(default_factory=list)
    missing_lines: List[int] = field(default_factory=list)


def reconcile_diagnostics(
    diagnostics: Iterable[CheckerDiagnostic],
    error_lines: AbstractSet[int],
    source: SourceText,
    file_name: str,
    duplicate_error_lines: AbstractSet[int] = frozenset(),
) -> Reconciliation:
    """
    A diagnostic is expected iff it starts on an error line of *file_name*.

    Diagnostics owned by another file, or without a position, can never
    satisfy an ``$ExpectError`` and are always reported.  Duplicate error
    lines are already failures of their own and are never reported as
    missing.
    """
    result = Reconciliation()
    seen: Set[int] = set()

    for diag in diagnostics:
        if diag.file_name != file_name or diag.start is None:
            result.unexpected.append(diag)
            continue
        line = source.line_of(diag.start)
        seen.add(line)
        if line not in error_lines:
            result.unexpected.append(diag)

    result.missing_lines = sorted(
        line for line in error_lines
        if line not in seen and line not in duplicate_error_lines
    )
    return result


__all__ = ["Reconciliation", "reconcile_diagnostics"]
