# expect_shims/errors.py
"""
Exception hierarchy for expect-shims.

Only conditions that stop a verification run are exceptions.  Everything a
user can fix in the file under test (wrong type, missing error, duplicate
directive) is reported as a :class:`~expect_shims.failures.Failure` value
instead.

Hierarchy
─────────
  ExpectShimsError (base)
  ├── ConfigurationError          - malformed rule options
  ├── CheckerLoadError            - a checker module could not be loaded
  └── InternalInvariantViolation  - the version search reached a state its
                                    own precondition rules out

Error codes follow ``EXP-XXXX``:
  - 1000-1999: configuration
  - 2000-2999: checker loading
  - 9000-9999: internal
"""

from __future__ import annotations

from enum import Enum, unique
from typing import Optional


@unique
class ErrorCode(Enum):
    """Stable identifiers for every raised error."""

    # Configuration (1000-1999)
    MISSING_OPTION = "EXP-1001"
    INVALID_OPTION = "EXP-1002"
    NO_OLDER_INSTALLS = "EXP-1003"
    DUPLICATE_VERSION = "EXP-1004"
    RESERVED_VERSION = "EXP-1005"
    UNREADABLE_OPTIONS = "EXP-1006"

    # Loading (2000-2999)
    CHECKER_NOT_FOUND = "EXP-2001"
    FACTORY_MISSING = "EXP-2002"

    # Internal (9000-9999)
    UNREACHABLE_VERSION_STATE = "EXP-9001"

    @property
    def number(self) -> int:
        return int(self.value.split("-")[1])


class ExpectShimsError(Exception):
    """Base class for all errors raised by expect-shims."""

    default_code: ErrorCode = ErrorCode.INVALID_OPTION

    def __init__(self, message: str, code: Optional[ErrorCode] = None) -> None:
        self.code = code or self.default_code
        self.message = message
        super().__init__(f"[{self.code.value}] {message}")


class ConfigurationError(ExpectShimsError):
    """Rule options are missing, malformed or inconsistent."""

    default_code = ErrorCode.INVALID_OPTION


class CheckerLoadError(ExpectShimsError):
    """A checker module could not be located or lacks its factory."""

    default_code = ErrorCode.CHECKER_NOT_FOUND


class InternalInvariantViolation(ExpectShimsError):
    """
    Raised when the version search contradicts its own precondition.

    This is fatal for the file being verified: returning a partial result
    would point the user at the wrong version boundary.
    """

    default_code = ErrorCode.UNREACHABLE_VERSION_STATE


__all__ = [
    "ErrorCode",
    "ExpectShimsError",
    "ConfigurationError",
    "CheckerLoadError",
    "InternalInvariantViolation",
]
