"""Pytest configuration and shared fixtures."""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv
load_dotenv()

from hlib.db import engine


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "sqlcipher: test needs the SQLCipher driver (sqlcipher3)")


def pytest_collection_modifyitems(config, items):
    """Skip sqlcipher tests when the driver is not installed."""
    if engine.sqlcipher is not None:
        return

    skip_cipher = pytest.mark.skip(reason="sqlcipher3 is not installed")
    for item in items:
        if "sqlcipher" in item.keywords:
            item.add_marker(skip_cipher)
