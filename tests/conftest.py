"""
Pytest configuration for nervechip tests.

Puts src/ on sys.path so the tests run without an editable install, and
detaches the static Logger between tests.
"""

import sys
import os

import pytest

# Add src/ to sys.path for imports
_src_root = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "src")
if _src_root not in sys.path:
    sys.path.insert(0, _src_root)

from nervechip.logger import Logger  # noqa: E402


@pytest.fixture(autouse=True)
def _detached_logger():
    Logger.reset()
    yield
    Logger.reset()
