"""
Fixtures for writable unit tests.
"""

import pytest

from fakes import FakeKinesis, SleepRecorder


@pytest.fixture
def sleeps():
    return SleepRecorder()


@pytest.fixture
def kinesis():
    return FakeKinesis()
