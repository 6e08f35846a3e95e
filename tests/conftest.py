"""Pytest configuration for the cpp_flowchart suite."""

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))


@pytest.fixture
def source_file(tmp_path):
    """Write a C++ snippet to a temporary file and return its path."""

    def write(code, name="prog.cpp"):
        path = tmp_path / name
        path.write_text(code, encoding="utf-8")
        return path

    return write
