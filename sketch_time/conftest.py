# sketch_time/conftest.py
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Add project root to PYTHONPATH
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from sketch_time.api.dependencies import build_services
from sketch_time.core.config import Settings
from sketch_time.features.uploads.store import InMemoryUploadStore
from sketch_time.tests.mocks import FixedClock, ManualSleep, RecordingNotifier


@pytest.fixture
def clock():
    """Noon UTC on 2024-03-15."""
    return FixedClock(datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def manual_sleep():
    return ManualSleep()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def store(clock):
    return InMemoryUploadStore(clock=clock)


@pytest.fixture
def test_settings():
    return Settings(_env_file=None, ENV="test", APP_URL="https://sketch.example", TIMER_MAX_MINUTES=180)


@pytest.fixture
def services(test_settings, store, notifier, clock, manual_sleep):
    return build_services(test_settings, store=store, notifier=notifier, clock=clock, sleep=manual_sleep)


@pytest.fixture
def client(services):
    """
    TestClient bound to one event loop for the whole test.

    Timer tasks and per-user locks live on that loop, so the client must be
    used as a context manager.
    """
    from sketch_time.main import create_app

    with TestClient(create_app(services)) as test_client:
        yield test_client
