"""
expect_shims/config.py — rule options
=====================================

Options name the project configuration every checker instance is built
from, the newest ("next") checker, and the older installs to fall back
on::

    {
        "config_path": "types/foo/tsconfig.json",
        "next_path": "/opt/checkers/next",
        "older_installs": [
            {"version_name": "2.0", "path": "/opt/checkers/2.0"},
            {"version_name": "2.1", "path": "/opt/checkers/2.1"}
        ]
    }

``older_installs`` must be ordered oldest first.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple, Union

from .errors import ConfigurationError, ErrorCode

logger = logging.getLogger(__name__)

NEXT_VERSION = "next"
DEFAULT_CHECKER_LABEL = "TypeScript"


@dataclass(frozen=True)
class VersionInstall:
    """One installed checker version and where to load it from."""
    version_name: str
    path: str


@dataclass(frozen=True)
class ExpectOptions:
    """
    Attributes
    ----------
    config_path    : Project configuration each checker instance is built from
    next_path      : Location of the newest checker
    older_installs : Older versions, oldest first; never empty
    checker_label  : Name used in failure messages (``<label>@<version>``)
    """
    config_path: str
    next_path: str
    older_installs: Tuple[VersionInstall, ...]
    checker_label: str = DEFAULT_CHECKER_LABEL

    def __post_init__(self) -> None:
        if not self.older_installs:
            raise ConfigurationError(
                "older_installs must name at least one version",
                ErrorCode.NO_OLDER_INSTALLS,
            )
        seen = set()
        for install in self.older_installs:
            if install.version_name == NEXT_VERSION:
                raise ConfigurationError(
                    f"'{NEXT_VERSION}' is reserved and cannot be an older install",
                    ErrorCode.RESERVED_VERSION,
                )
            if install.version_name in seen:
                raise ConfigurationError(
                    f"version '{install.version_name}' is listed twice",
                    ErrorCode.DUPLICATE_VERSION,
                )
            seen.add(install.version_name)

    @property
    def next_install(self) -> VersionInstall:
        return VersionInstall(NEXT_VERSION, self.next_path)

    @property
    def min_install(self) -> VersionInstall:
        return self.older_installs[0]

    def next_higher_version(self, index: int) -> str:
        """Name of the version just above ``older_installs[index]``."""
        if index == len(self.older_installs) - 1:
            return NEXT_VERSION
        return self.older_installs[index + 1].version_name

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "ExpectOptions":
        for key in ("config_path", "next_path", "older_installs"):
            if key not in raw:
                raise ConfigurationError(
                    f"missing required option '{key}'", ErrorCode.MISSING_OPTION
                )
        installs_raw = raw["older_installs"]
        if not isinstance(installs_raw, (list, tuple)):
            raise ConfigurationError("older_installs must be a list")
        installs = []
        for i, entry in enumerate(installs_raw):
            try:
                installs.append(
                    VersionInstall(str(entry["version_name"]), str(entry["path"]))
                )
            except (KeyError, TypeError) as exc:
                raise ConfigurationError(
                    f"older_installs[{i}] needs 'version_name' and 'path'"
                ) from exc
        return cls(
            config_path=str(raw["config_path"]),
            next_path=str(raw["next_path"]),
            older_installs=tuple(installs),
            checker_label=str(raw.get("checker_label", DEFAULT_CHECKER_LABEL)),
        )


def load_options(path: Union[str, Path]) -> ExpectOptions:
    """Read :class:`ExpectOptions` from a JSON file."""
    p = Path(path)
    try:
        raw = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise ConfigurationError(
            f"cannot read options from {p}: {exc}", ErrorCode.UNREADABLE_OPTIONS
        ) from exc
    if not isinstance(raw, Mapping):
        raise ConfigurationError(f"options in {p} must be a JSON object")
    logger.debug("loaded options from %s", p)
    return ExpectOptions.from_mapping(raw)


def coerce_options(
    options: Union[ExpectOptions, Mapping[str, Any], None],
) -> Optional[ExpectOptions]:
    if options is None or isinstance(options, ExpectOptions):
        return options
    return ExpectOptions.from_mapping(options)


__all__ = [
    "NEXT_VERSION",
    "DEFAULT_CHECKER_LABEL",
    "VersionInstall",
    "ExpectOptions",
    "load_options",
    "coerce_options",
]
