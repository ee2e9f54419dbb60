"""Shared fixtures."""
import pytest

from fakes import FakeElevation, FakeGeocoder


@pytest.fixture
def fake_elevation():
    return FakeElevation()


@pytest.fixture
def fake_geocoder():
    return FakeGeocoder()


@pytest.fixture
def no_sleep(monkeypatch):
    """Replace asyncio.sleep with a recorder; returns the list of requested delays."""
    delays = []

    async def _sleep(delay, *args, **kwargs):
        delays.append(delay)

    monkeypatch.setattr("asyncio.sleep", _sleep)
    return delays


@pytest.fixture
def anyio_backend():
    """The code under test is asyncio-based; run anyio-marked tests on asyncio."""
    return "asyncio"
