"""
Pytest configuration and fixtures for kinesis-writable.

Provides cross-platform event loop configuration and test utilities.
"""

import asyncio
import sys

import pytest

# Set policy *before* pytest-asyncio creates any loops
if sys.platform.startswith("win"):
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())


@pytest.fixture
def stream_name():
    """Kinesis stream name used across tests."""
    return "test-stream"


@pytest.fixture(autouse=True)
def _clean_settings_cache(monkeypatch):
    """Keep env-driven settings from leaking between tests."""
    from kinesis_writable.config import get_settings

    for var in (
        "KINESIS_WRITABLE_STREAM_NAME",
        "KINESIS_WRITABLE_REGION",
        "KINESIS_WRITABLE_HIGH_WATER_MARK",
        "KINESIS_WRITABLE_MAX_RETRIES",
    ):
        monkeypatch.delenv(var, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
