"""Test the development environment setup."""
import sys
from pathlib import Path

import pytest


def test_python_version() -> None:
    """Ensure we're running Python 3.10+."""
    assert sys.version_info >= (3, 10), "Python version should be 3.10 or higher"


def test_project_structure() -> None:
    """Verify basic project structure."""
    project_root = Path(__file__).parent.parent
    package = project_root / "src" / "raop_resolved"
    assert package.is_dir()
    for subpackage in ("discovery", "tunnels", "models", "utils"):
        assert (package / subpackage / "__init__.py").is_file()
    assert (project_root / "pyproject.toml").is_file()


def test_test_extra_installs_dbus_bindings() -> None:
    """The resolved client tests only run when the D-Bus bindings are installed with the test extra."""
    tomllib = pytest.importorskip("tomllib")
    project_root = Path(__file__).parent.parent
    with open(project_root / "pyproject.toml", "rb") as f:
        project = tomllib.load(f)["project"]
    test_extra = project["optional-dependencies"]["test"]
    assert any(requirement.startswith("dbus-python") for requirement in test_extra)
    assert "readme" not in project
