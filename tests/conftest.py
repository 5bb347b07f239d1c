"""Pytest configuration for all tests."""

from datetime import datetime, timezone

import pytest
import structlog

from stamplink.core.config import get_settings
from stamplink.domain.services.security_stamp import new_security_stamp
from stamplink.domain.services.token_provider import (
    DataProtectorTokenProvider,
    get_token_provider,
)
from stamplink.infrastructure.security.data_protection import FernetDataProtector


@pytest.fixture(autouse=True)
def _reset_global_state():
    """Reset cached settings, providers and logging config around each test."""
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
    get_settings.cache_clear()
    get_token_provider.cache_clear()
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
    get_settings.cache_clear()
    get_token_provider.cache_clear()


@pytest.fixture
def data_protector() -> FernetDataProtector:
    return FernetDataProtector("test-data-protection-key-for-unit-tests")


@pytest.fixture
def provider(data_protector) -> DataProtectorTokenProvider:
    return DataProtectorTokenProvider(data_protector)


@pytest.fixture
def security_stamp() -> str:
    return new_security_stamp()


class FrozenClock:
    """Clock that returns a settable aware UTC time."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2024, 5, 1, 12, 0, 0, 123456, tzinfo=timezone.utc))
