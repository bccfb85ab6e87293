"""Shared fixtures for unit tests."""

import pytest
from fakes import FakeBackend, FakeTimer


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def fake_timer() -> FakeTimer:
    return FakeTimer()
