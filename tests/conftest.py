import pathlib

import pytest

from apwatch.registry import Registry

DATA_DIR = pathlib.Path(__file__).parent / "data"


@pytest.fixture
def scan_capture() -> pathlib.Path:
    return DATA_DIR / "iw_scan.txt"


@pytest.fixture
def make_registry():
    """Build a Registry from INI-style text."""

    def _make(text: str) -> Registry:
        reg = Registry()
        reg.load(text.splitlines())
        return reg

    return _make
