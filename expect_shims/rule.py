"""
expect_shims/rule.py
════════════════════

The ``expect`` rule: asserts types with ``$ExpectType`` and the presence of
errors with ``$ExpectError``.

Pipeline for one file against one checker instance
──────────────────────────────────────────────────

  ┌──────────────┐   ┌───────────────────┐   ┌────────────────┐
  │   scanner    │──▶│    reconciler     │──▶│    matcher     │
  │ (directives) │   │ (diagnostics vs   │   │ (types vs      │
  │              │   │  $ExpectError)    │   │  $ExpectType)  │
  └──────────────┘   └───────────────────┘   └────────────────┘
            └───────────────┬──────────────────────┘
                            ▼
                      List[Failure]

Version search
──────────────
With options, the pipeline runs against ``next`` first; its failures are
reported as they are.  Only if ``next`` passes are older versions
consulted: the oldest one first, and when that fails, every older install
from newest to oldest until one fails.
That version is the boundary; its failures name the next higher version
that passed.  Checking the two extremes first avoids building a checker
instance per version in the common case, and relies on failures being
monotonic in version age.
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar, List, Mapping, Optional, Union

from .checker_api import CheckerDiagnostic, CheckerInstance, CheckerProvider
from .config import NEXT_VERSION, DEFAULT_CHECKER_LABEL, ExpectOptions, VersionInstall, coerce_options
from .errors import ConfigurationError, ErrorCode, InternalInvariantViolation
from .failures import (
    FAILURE_STRING_ASSERTION_MISSING_NODE,
    FAILURE_STRING_EXPECTED_ERROR,
    Failure,
    FailureKind,
    duplicate_assertion_message,
    type_mismatch_message,
    version_intro,
)
from .loader import ModuleCheckerProvider
from .matcher import match_type_assertions
from .reconcile import reconcile_diagnostics
from .scanner import EXPECT_ERROR, has_directives, parse_assertions
from .session import VerificationSession
from .source import SourceText

logger = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════════
#  PART 1: ONE FILE, ONE VERSION
# ═════════════════════════════════════════════════════════════════════════

class _FailureSink:
    """Collects failures for one file, converting lines and nodes to spans."""

    def __init__(
        self,
        file_name: str,
        source: SourceText,
        version_name: Optional[str] = None,
        next_higher_version: Optional[str] = None,
    ) -> None:
        self.file_name = file_name
        self.source = source
        self.version_name = version_name
        self.next_higher_version = next_higher_version
        self.failures: List[Failure] = []

    def add_at(self, start: int, length: int, message: str, kind: FailureKind) -> None:
        self.failures.append(Failure(
            start, length, message, kind, self.file_name,
            self.version_name, self.next_higher_version,
        ))

    def add_at_line(self, line: int, message: str, kind: FailureKind) -> None:
        start, end = self.source.line_extent(line)
        self.add_at(start, end - start, message, kind)

    def add_at_node(self, node: Any, message: str, kind: FailureKind) -> None:
        self.add_at(node.start, node.end - node.start, message, kind)


def walk_file(
    file_name: str,
    checker: CheckerInstance,
    version_name: str,
    next_higher_version: Optional[str] = None,
    checker_label: str = DEFAULT_CHECKER_LABEL,
) -> List[Failure]:
    """Verify *file_name* against one checker instance."""
    source = SourceText(checker.source_text(file_name))
    sink = _FailureSink(file_name, source, version_name, next_higher_version)
    diagnostics = checker.diagnostics(file_name)
    intro = version_intro(checker_label, version_name, next_higher_version)

    def add_diagnostic_failure(diag: CheckerDiagnostic) -> None:
        if diag.file_name == file_name and diag.start is not None:
            sink.add_at(
                diag.start, diag.length,
                f"{intro}\n{diag.message_text}",
                FailureKind.UNEXPECTED_DIAGNOSTIC,
            )
        else:
            owner = f"{diag.file_name}: " if diag.file_name else ""
            sink.add_at(
                0, 0,
                f"{intro}\n{owner}{diag.message_text}",
                FailureKind.UNEXPECTED_DIAGNOSTIC,
            )

    if checker.is_declaration_file(file_name) or not has_directives(source.text):
        for diag in diagnostics:
            add_diagnostic_failure(diag)
        return sink.failures

    table = parse_assertions(source)

    for dup in table.duplicates:
        sink.add_at_line(
            dup.line, duplicate_assertion_message(dup.directive),
            FailureKind.DUPLICATE_ASSERTION,
        )

    reconciled = reconcile_diagnostics(
        diagnostics, table.error_lines, source, file_name,
        duplicate_error_lines=table.duplicate_lines(EXPECT_ERROR),
    )
    for diag in reconciled.unexpected:
        add_diagnostic_failure(diag)
    for line in reconciled.missing_lines:
        sink.add_at_line(line, FAILURE_STRING_EXPECTED_ERROR, FailureKind.MISSING_EXPECTED_ERROR)

    root = checker.syntax_tree(file_name)
    matched = match_type_assertions(root, table.type_assertions, checker, source)
    for unmet in matched.unmet:
        sink.add_at_node(
            unmet.node, type_mismatch_message(unmet.expected, unmet.actual),
            FailureKind.TYPE_MISMATCH,
        )
    for line in matched.unused:
        sink.add_at_line(line, FAILURE_STRING_ASSERTION_MISSING_NODE, FailureKind.UNMATCHED_ASSERTION)

    return sink.failures


# ═════════════════════════════════════════════════════════════════════════
#  PART 2: THE RULE AND ITS VERSION SEARCH
# ═════════════════════════════════════════════════════════════════════════

class ExpectRule:
    """
    Verify a file's directives, across checker versions when configured.

    Parameters
    ----------
    options  : ExpectOptions, a mapping accepted by
               ``ExpectOptions.from_mapping``, or None for a single run
               against the host checker
    provider : builds a checker instance per version
               (default: ModuleCheckerProvider)
    session  : cache of built instances; share one across files
    """

    name: ClassVar[str] = "expect"
    description: ClassVar[str] = (
        "Asserts types with $ExpectType and presence of errors with $ExpectError."
    )
    options_description: ClassVar[str] = (
        "Project configuration path, the 'next' checker and older installs, oldest first."
    )
    requires_type_info: ClassVar[bool] = True

    def __init__(
        self,
        options: Union[ExpectOptions, Mapping[str, Any], None] = None,
        provider: Optional[CheckerProvider] = None,
        session: Optional[VerificationSession] = None,
    ) -> None:
        self.options = coerce_options(options)
        self.provider = provider or ModuleCheckerProvider()
        self.session = session if session is not None else VerificationSession()

    @property
    def checker_label(self) -> str:
        return self.options.checker_label if self.options else DEFAULT_CHECKER_LABEL

    def apply(self, file_name: str, host: CheckerInstance) -> List[Failure]:
        """Return the failures for *file_name*; empty means it passed."""
        if self.options is None:
            return walk_file(file_name, host, NEXT_VERSION, None, self.checker_label)
        return self._search_versions(file_name, host, self.options)

    def failures_for(
        self,
        file_name: str,
        host: CheckerInstance,
        install: VersionInstall,
        next_higher_version: Optional[str],
    ) -> List[Failure]:
        """Run the pipeline against the instance built for *install*."""
        options = self.options
        if options is None:
            raise ConfigurationError(
                "failures_for needs options naming the checker versions",
                ErrorCode.MISSING_OPTION,
            )
        checker = self.session.get_checker(
            host, install.version_name,
            lambda: self.provider.construct(options.config_path, install),
        )
        return walk_file(
            file_name, checker, install.version_name, next_higher_version,
            options.checker_label,
        )

    def _search_versions(
        self,
        file_name: str,
        host: CheckerInstance,
        options: ExpectOptions,
    ) -> List[Failure]:
        next_failures = self.failures_for(file_name, host, options.next_install, None)
        if next_failures:
            return next_failures

        # Passing on both min and next is taken to mean passing everywhere.
        min_failures = self.failures_for(file_name, host, options.min_install, None)
        if not min_failures:
            logger.debug(
                "%s passes on %s and %s; skipping versions in between",
                file_name, options.min_install.version_name, NEXT_VERSION,
            )
            return []

        # Fails on min but not next: find the newest version that still fails.
        installs = options.older_installs
        for i in range(len(installs) - 1, -1, -1):
            install = installs[i]
            logger.info("Test with %s", install.version_name)
            failures = self.failures_for(
                file_name, host, install, options.next_higher_version(i)
            )
            if failures:
                return failures

        raise InternalInvariantViolation(
            f"{file_name}: version {options.min_install.version_name} failed "
            "but no configured version reproduces a failure",
            ErrorCode.UNREACHABLE_VERSION_STATE,
        )

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} '{self.name}'>"


__all__ = ["walk_file", "ExpectRule"]
