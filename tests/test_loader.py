# tests/test_loader.py
"""Tests for building checker instances from checker modules on disk."""

import textwrap

import pytest

from expect_shims.config import VersionInstall
from expect_shims.errors import CheckerLoadError, ErrorCode
from expect_shims.loader import ModuleCheckerProvider, load_checker_module

CHECKER_MODULE = textwrap.dedent("""
    BUILT = []

    class Checker:
        def __init__(self, config_path):
            self.config_path = config_path

    def create_checker(config_path):
        BUILT.append(config_path)
        return Checker(config_path)
""")


class TestLoadCheckerModule:

    def test_load_file(self, tmp_path):
        path = tmp_path / "checker_2_0.py"
        path.write_text(CHECKER_MODULE, encoding="utf-8")
        module = load_checker_module(str(path))
        assert callable(module.create_checker)

    def test_load_package_directory(self, tmp_path):
        pkg = tmp_path / "checker_pkg"
        pkg.mkdir()
        (pkg / "__init__.py").write_text("from .impl import create_checker\n", encoding="utf-8")
        (pkg / "impl.py").write_text(CHECKER_MODULE, encoding="utf-8")
        module = load_checker_module(str(pkg))
        assert module.create_checker("cfg").config_path == "cfg"

    def test_directory_without_init(self, tmp_path):
        with pytest.raises(CheckerLoadError) as exc_info:
            load_checker_module(str(tmp_path))
        assert exc_info.value.code is ErrorCode.CHECKER_NOT_FOUND

    def test_missing_file(self, tmp_path):
        with pytest.raises(CheckerLoadError):
            load_checker_module(str(tmp_path / "absent.py"))

    def test_dotted_name(self):
        module = load_checker_module("json")
        assert hasattr(module, "loads")

    def test_missing_dotted_name(self):
        with pytest.raises(CheckerLoadError):
            load_checker_module("no_such_checker_module_xyz")

    def test_missing_parent_package(self):
        with pytest.raises(CheckerLoadError):
            load_checker_module("no_such_checker_pkg_xyz.checker")

    def test_missing_dependency_of_dotted_module_propagates(self, tmp_path, monkeypatch):
        (tmp_path / "checker_needs_dep_xyz.py").write_text(
            "import no_such_dependency_xyz\n", encoding="utf-8"
        )
        monkeypatch.syspath_prepend(str(tmp_path))
        with pytest.raises(ModuleNotFoundError) as exc_info:
            load_checker_module("checker_needs_dep_xyz")
        assert not isinstance(exc_info.value, CheckerLoadError)
        assert exc_info.value.name == "no_such_dependency_xyz"

    def test_import_error_propagates(self, tmp_path):
        path = tmp_path / "broken.py"
        path.write_text("raise ValueError('broken checker')\n", encoding="utf-8")
        with pytest.raises(ValueError, match="broken checker"):
            load_checker_module(str(path))


class TestModuleCheckerProvider:

    def test_construct_calls_factory(self, tmp_path):
        path = tmp_path / "checker.py"
        path.write_text(CHECKER_MODULE, encoding="utf-8")
        provider = ModuleCheckerProvider()
        install = VersionInstall("2.0", str(path))
        checker = provider.construct("tsconfig.json", install)
        assert checker.config_path == "tsconfig.json"

    def test_module_loaded_once_per_path(self, tmp_path):
        path = tmp_path / "checker.py"
        path.write_text(CHECKER_MODULE, encoding="utf-8")
        provider = ModuleCheckerProvider()
        install = VersionInstall("2.0", str(path))
        provider.construct("a.json", install)
        provider.construct("b.json", install)
        assert provider.module_for(install).BUILT == ["a.json", "b.json"]

    def test_custom_factory_name(self, tmp_path):
        path = tmp_path / "checker.py"
        path.write_text("def make(config_path):\n    return config_path\n", encoding="utf-8")
        provider = ModuleCheckerProvider(factory_name="make")
        assert provider.construct("cfg", VersionInstall("1.0", str(path))) == "cfg"

    def test_missing_factory(self, tmp_path):
        path = tmp_path / "checker.py"
        path.write_text("create_checker = 42\n", encoding="utf-8")
        with pytest.raises(CheckerLoadError) as exc_info:
            ModuleCheckerProvider().construct("cfg", VersionInstall("1.0", str(path)))
        assert exc_info.value.code is ErrorCode.FACTORY_MISSING
        assert "1.0" in str(exc_info.value)
