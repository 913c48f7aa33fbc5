"""
expect_shims — verify ``$ExpectType`` / ``$ExpectError`` directives
===================================================================

Type-definition authors annotate test sources with directives::

    const x = pick(a, b); // $ExpectType A | B
    // $ExpectError
    pick(a);

This package checks each directive against what an external type checker
actually infers or reports, across one or more checker versions, and
returns a list of :class:`Failure` values (empty means the file passed).

Core modules
------------
source
    Line bookkeeping over raw text.
scanner
    Lexical scan (parsimonious PEG) and directive extraction.
normalize
    Order-insensitive canonical form for union/intersection type text.
matcher
    ``$ExpectType`` → syntax node → rendered type comparison.
reconcile
    Checker diagnostics versus ``$ExpectError`` lines.
rule
    The per-file pipeline and the multi-version search.
session
    Per-(host, version) cache of checker instances.
loader
    Builds checker instances from installed checker modules.

Quick start
-----------
>>> from expect_shims import ExpectRule
>>> failures = ExpectRule().apply("test.ts", host_checker)   # doctest: +SKIP
"""

from __future__ import annotations

import logging

from .checker_api import (
    EXPRESSION_STATEMENT,
    CheckerDiagnostic,
    CheckerInstance,
    CheckerProvider,
    MessageChain,
    SyntaxNode,
    flatten_message,
)
from .config import ExpectOptions, VersionInstall, load_options
from .errors import (
    CheckerLoadError,
    ConfigurationError,
    ErrorCode,
    ExpectShimsError,
    InternalInvariantViolation,
)
from .failures import Failure, FailureKind
from .loader import ModuleCheckerProvider
from .normalize import normalize_type_text
from .rule import ExpectRule, walk_file
from .scanner import AssertionTable, parse_assertions
from .session import VerificationSession
from .source import SourceText

__version__ = "0.1.0"
__license__ = "MIT"

_log = logging.getLogger(__name__)
_log.addHandler(logging.NullHandler())

__all__ = [
    # Collaborator contracts
    "EXPRESSION_STATEMENT",
    "CheckerDiagnostic",
    "CheckerInstance",
    "CheckerProvider",
    "MessageChain",
    "SyntaxNode",
    "flatten_message",
    # Configuration
    "ExpectOptions",
    "VersionInstall",
    "load_options",
    # Errors
    "CheckerLoadError",
    "ConfigurationError",
    "ErrorCode",
    "ExpectShimsError",
    "InternalInvariantViolation",
    # Results
    "Failure",
    "FailureKind",
    # Engine
    "AssertionTable",
    "ExpectRule",
    "ModuleCheckerProvider",
    "SourceText",
    "VerificationSession",
    "normalize_type_text",
    "parse_assertions",
    "walk_file",
]
