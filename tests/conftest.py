import pytest

from helpers.fakes import RecordingGateway, RecordingSink


@pytest.fixture
def sink():
    return RecordingSink()

@pytest.fixture
def gateway():
    return RecordingGateway()
