"""
expect_shims/session.py
═══════════════════════

Memoizes checker instances per (host program, version).

Building a checker instance means analysing a whole project, so each one
is built once and reused for every file verified against the same host.
The session owns every instance it builds; closing the session drops
them all.

    with VerificationSession() as session:
        for file_name in files:
            failures = ExpectRule(options, session=session).apply(file_name, host)

Not thread-safe.  A caller that verifies files in parallel must guard the
session with a lock or give each worker its own session.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Tuple

from .checker_api import CheckerInstance

logger = logging.getLogger(__name__)


class VerificationSession:
    """Two-level cache: host identity → version name → checker instance."""

    def __init__(self) -> None:
        # id(host) → (host, {version_name: instance}); the host reference
        # keeps its id from being reused while the entry exists.
        self._entries: Dict[int, Tuple[Any, Dict[str, CheckerInstance]]] = {}
        self.builds = 0

    def get_checker(
        self,
        host: Any,
        version_name: str,
        build: Callable[[], CheckerInstance],
    ) -> CheckerInstance:
        """Return the cached instance for (*host*, *version_name*), building it once."""
        entry = self._entries.get(id(host))
        if entry is None:
            entry = (host, {})
            self._entries[id(host)] = entry
        versions = entry[1]

        instance = versions.get(version_name)
        if instance is None:
            logger.debug("building checker instance for version %s", version_name)
            instance = build()
            versions[version_name] = instance
            self.builds += 1
        else:
            logger.debug("reusing checker instance for version %s", version_name)
        return instance

    def forget(self, host: Any) -> None:
        """Drop every instance built for *host*."""
        self._entries.pop(id(host), None)

    def close(self) -> None:
        self._entries.clear()

    def __contains__(self, key: Tuple[Any, str]) -> bool:
        host, version_name = key
        entry = self._entries.get(id(host))
        return entry is not None and version_name in entry[1]

    def __len__(self) -> int:
        return sum(len(versions) for _, versions in self._entries.values())

    def __enter__(self) -> "VerificationSession":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<VerificationSession hosts={len(self._entries)} instances={len(self)}>"


__all__ = ["VerificationSession"]
