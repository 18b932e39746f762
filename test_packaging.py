"""Packaging regression tests."""

import re
from pathlib import Path
from typing import Set

from workflowdraw.qml import WORKFLOWDRAW_QML_PATH


def _read_pyproject() -> str:
    return Path("pyproject.toml").read_text(encoding="utf-8")


def _read_list(key: str) -> Set[str]:
    match = re.search(rf"{key}\s*=\s*\[(.*?)\]", _read_pyproject(), flags=re.DOTALL)
    assert match is not None, f"{key} is missing from pyproject.toml"
    return set(re.findall(r'"([^"]+)"', match.group(1)))


def test_package_is_declared():
    assert "workflowdraw" in _read_list("packages")


def test_qml_files_are_package_data():
    patterns = _read_list("workflowdraw")
    assert "qml_ui/*.qml" in patterns
    assert WORKFLOWDRAW_QML_PATH.is_file()
    assert WORKFLOWDRAW_QML_PATH.parent.name == "qml_ui"


def test_runtime_dependencies():
    dependencies = {re.split(r"[<>=!~ ]", dep)[0] for dep in _read_list("dependencies")}
    assert "PySide6" in dependencies
