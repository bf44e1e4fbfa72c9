"""Test the development environment setup."""
import sys
from pathlib import Path


def test_python_version() -> None:
    assert sys.version_info >= (3, 10), "Python version should be 3.10 or higher"


def test_project_structure() -> None:
    project_root = Path(__file__).parent.parent
    assert (project_root / "src" / "ssdp_agent").is_dir()
    assert (project_root / "pyproject.toml").is_file()
