from collections.abc import Callable

import pytest

from tests.fixtures.query_fakes import RecordingSink


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def fixed_clock() -> Callable[[], str]:
    return lambda: "2024-01-01 00:00:00"
