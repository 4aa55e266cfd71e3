import os
import sys

import pytest

# Ensure project root is on sys.path so the scraper scripts import correctly
_TESTS_DIR = os.path.dirname(__file__)
_ROOT_DIR = os.path.abspath(os.path.join(_TESTS_DIR, os.pardir))
if _ROOT_DIR not in sys.path:
    sys.path.insert(0, _ROOT_DIR)

from discovered_on_scraper import Config
from tests.support.fakes import FakeSpotify


@pytest.fixture(autouse=True)
def _fast_waits(monkeypatch):
    """Keep bounded waits short so timeouts resolve quickly."""
    monkeypatch.setattr(Config, "GRID_TIMEOUT", 0.05)
    monkeypatch.setattr(Config, "LISTING_TIMEOUT", 0.05)
    monkeypatch.setattr(Config, "DETAIL_TIMEOUT", 0.05)
    monkeypatch.setattr(Config, "POLL_FREQUENCY", 0.01)
    yield


@pytest.fixture
def spotify():
    return FakeSpotify()
