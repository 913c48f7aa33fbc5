"""
expect_shims/loader.py — build checker instances from installed modules
=======================================================================

:class:`ModuleCheckerProvider` treats each :class:`~expect_shims.config.VersionInstall`
path as a Python module that wraps one checker version.  The path may be

* a ``.py`` file,
* a package directory (containing ``__init__.py``), or
* a dotted module name importable from ``sys.path``.

The module must expose a factory, ``create_checker(config_path)`` by
default, returning a :class:`~expect_shims.checker_api.CheckerInstance`.
Errors raised by the factory itself, and imports the checker module
itself cannot satisfy, propagate unchanged.
"""

from __future__ import annotations

import hashlib
import importlib
import importlib.util
import logging
import sys
from pathlib import Path
from types import ModuleType
from typing import Dict

from .checker_api import CheckerInstance
from .config import VersionInstall
from .errors import CheckerLoadError, ErrorCode

logger = logging.getLogger(__name__)

DEFAULT_FACTORY = "create_checker"


def _module_name_for(path: Path) -> str:
    digest = hashlib.sha1(str(path).encode("utf-8")).hexdigest()[:12]
    return f"_expect_shims_checker_{path.stem}_{digest}"


def load_checker_module(location: str) -> ModuleType:
    """Import the module found at *location* (file, package dir or dotted name)."""
    p = Path(location).expanduser()
    if p.suffix == ".py" or p.exists():
        p = p.resolve()
        if p.is_dir():
            init = p / "__init__.py"
            if not init.is_file():
                raise CheckerLoadError(f"{p} is not a package (no __init__.py)")
            spec = importlib.util.spec_from_file_location(
                _module_name_for(p), init, submodule_search_locations=[str(p)]
            )
        elif p.is_file():
            spec = importlib.util.spec_from_file_location(_module_name_for(p), p)
        else:
            raise CheckerLoadError(f"checker module not found: {p}")
        if spec is None or spec.loader is None:
            raise CheckerLoadError(f"cannot load checker module from {p}")
        module = importlib.util.module_from_spec(spec)
        sys.modules[spec.name] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            sys.modules.pop(spec.name, None)
            raise
        logger.debug("loaded checker module %s from %s", spec.name, p)
        return module

    try:
        return importlib.import_module(location)
    except ModuleNotFoundError as exc:
        # only the checker module (or a parent package of it) being absent
        # is a load error; a missing import inside the checker propagates
        missing = exc.name
        if missing is not None and location != missing and not location.startswith(missing + "."):
            raise
        raise CheckerLoadError(f"checker module not found: {location}") from exc


class ModuleCheckerProvider:
    """A CheckerProvider backed by importable checker modules."""

    def __init__(self, factory_name: str = DEFAULT_FACTORY) -> None:
        self.factory_name = factory_name
        self._modules: Dict[str, ModuleType] = {}

    def module_for(self, install: VersionInstall) -> ModuleType:
        module = self._modules.get(install.path)
        if module is None:
            module = load_checker_module(install.path)
            self._modules[install.path] = module
        return module

    def construct(self, config_path: str, install: VersionInstall) -> CheckerInstance:
        module = self.module_for(install)
        factory = getattr(module, self.factory_name, None)
        if not callable(factory):
            raise CheckerLoadError(
                f"checker module for version {install.version_name} "
                f"has no callable '{self.factory_name}'",
                ErrorCode.FACTORY_MISSING,
            )
        logger.debug("constructing %s checker for %s", install.version_name, config_path)
        return factory(config_path)


__all__ = ["DEFAULT_FACTORY", "load_checker_module", "ModuleCheckerProvider"]
