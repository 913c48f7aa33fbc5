"""
expect_shims/failures.py
════════════════════════

The failure model: the only thing a verification run hands back to its
caller.  A :class:`Failure` is a span in the file under test plus a
message; an empty list means the file passed.

Message texts live here so the rule, the tests and any front end agree on
the exact wording.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from .source import SourceText


class FailureKind(Enum):
    """Recoverable verification outcomes, one per failure."""
    DUPLICATE_ASSERTION = "duplicateAssertion"
    UNMATCHED_ASSERTION = "unmatchedAssertion"
    UNEXPECTED_DIAGNOSTIC = "unexpectedDiagnostic"
    MISSING_EXPECTED_ERROR = "missingExpectedError"
    TYPE_MISMATCH = "typeMismatch"


@dataclass(frozen=True)
class Failure:
    """
    A single verification failure.

    Attributes
    ----------
    start     : Offset of the failing span in the file under test
    length    : Length of the span (0 for file-level failures)
    message   : Human-readable description
    kind      : FailureKind
    file_name : File under test
    version_name        : Checker version that produced the failure
    next_higher_version : Version just above it that passed, when the
                          failure marks a version boundary
    """
    start: int
    length: int
    message: str
    kind: FailureKind
    file_name: str = ""
    version_name: Optional[str] = None
    next_higher_version: Optional[str] = None

    @property
    def end(self) -> int:
        return self.start + self.length

    def to_json(self) -> Dict[str, Any]:
        return {
            "file": self.file_name,
            "start": self.start,
            "length": self.length,
            "kind": self.kind.value,
            "message": self.message,
            "version": self.version_name,
            "nextHigherVersion": self.next_higher_version,
        }

    def to_json_str(self) -> str:
        """Single-line JSON string."""
        return json.dumps(self.to_json())

    def to_gcc_format(self, source: Optional[SourceText] = None) -> str:
        """GCC-style string: file:line:col: error: message [kind].

        The message is folded onto one line.  Without *source* the location
        is the raw offset.
        """
        if source is not None:
            line = source.line_of(self.start)
            col = self.start - source.line_start(line)
            loc = f"{self.file_name}:{line + 1}:{col + 1}"
        else:
            loc = f"{self.file_name}@{self.start}"
        text = " ".join(ln.strip() for ln in self.message.splitlines() if ln.strip())
        return f"{loc}: error: {text} [{self.kind.value}]"


# ── Message texts ────────────────────────────────────────────────────

FAILURE_STRING_DUPLICATE_ASSERTION = "This line has 2 $ExpectType assertions."
FAILURE_STRING_DUPLICATE_ERROR = "This line has 2 $ExpectError assertions."
FAILURE_STRING_ASSERTION_MISSING_NODE = "Can not match a node to this assertion."
FAILURE_STRING_EXPECTED_ERROR = "Expected an error on this line, but found none."


def duplicate_assertion_message(directive: str) -> str:
    if directive == "ExpectError":
        return FAILURE_STRING_DUPLICATE_ERROR
    return FAILURE_STRING_DUPLICATE_ASSERTION


def type_mismatch_message(expected: str, actual: str) -> str:
    return f"Expected type to be:\n  {expected}\ngot:\n  {actual}"


def version_intro(
    label: str,
    version_name: str,
    next_higher_version: Optional[str],
) -> str:
    """
    Opening text for a diagnostic failure.

    In a single-version run this only names the version.  When the failure
    marks a version boundary it names the next higher version that passed
    and how to pin the file to it.
    """
    if next_higher_version is None:
        return f"{label}@{version_name} compile error: "
    msg = (
        f"Compile error in {label}@{version_name} "
        f"but not in {label}@{next_higher_version}.\n"
    )
    if next_higher_version == "next":
        explain = f"{label}@next features not yet supported."
    else:
        explain = (
            f"Fix with a comment '// {label} Version: {next_higher_version}' "
            "just under the header."
        )
    return msg + explain


__all__ = [
    "Failure",
    "FailureKind",
    "FAILURE_STRING_DUPLICATE_ASSERTION",
    "FAILURE_STRING_DUPLICATE_ERROR",
    "FAILURE_STRING_ASSERTION_MISSING_NODE",
    "FAILURE_STRING_EXPECTED_ERROR",
    "duplicate_assertion_message",
    "type_mismatch_message",
    "version_intro",
]
