"""Pytest configuration: make the src packages importable."""

import sys
from pathlib import Path

import pytest

SRC_DIR = Path(__file__).parent.parent / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixtures_dir() -> Path:
    """Directory holding the sample listings."""
    return FIXTURES_DIR


@pytest.fixture
def read_fixture():
    """Return the raw lines of a sample listing."""
    def _read(name: str):
        return (FIXTURES_DIR / name).read_text(encoding="utf-8").split("\n")
    return _read
