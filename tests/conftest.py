import os

# Keep dial retries fast in tests that go through the default backoff
os.environ.setdefault("DIAL_BACKOFF_MAX_SECONDS", "0")

import pytest  # noqa: E402

from ircrelay.logging_config import error_aggregator  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_error_aggregator():
    """Start every test with an empty error summary."""
    error_aggregator.clear()
    yield
    error_aggregator.clear()
