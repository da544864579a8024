"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures/variables required for testing multiple layers.
"""

from typing import Iterator

import pytest

from src.core.config import SessionConfig
from tests.fakes import FakeGameService


@pytest.fixture
def fake_service() -> Iterator[FakeGameService]:
    """Fresh remote service for every test. The scripted game is dropped at teardown."""
    service = FakeGameService()
    try:
        yield service
    finally:
        service.game = None


@pytest.fixture
def fast_config() -> SessionConfig:
    """Poll quickly so tests of the timer do not have to wait a second per tick."""
    return SessionConfig(refresh_interval=0.01, retry_interval=0.01)
