"""Shared fixtures."""

from pathlib import Path
from typing import Any

import pytest

from findmy_bridge.findmy import LocationRecord
from findmy_bridge.logging import JSONLLogger, configure_logger


@pytest.fixture(autouse=True)
def event_log(tmp_path: Path) -> JSONLLogger:
    """Route the global JSONL event log into a temporary directory."""
    return configure_logger(tmp_path / "logs")


def make_location(**overrides: Any) -> LocationRecord:
    """Build a friend location with sensible defaults."""
    data: dict[str, Any] = {
        "handle": "test@icloud.com",
        "coordinates": [37.7749, -122.4194],
        "long_address": "123 Main St",
        "short_address": "Main St",
        "title": "Home",
        "subtitle": "San Francisco",
        "last_updated": 1700000000000,
        "is_locating_in_progress": 0,
        "status": "live",
    }
    data.update(overrides)
    return LocationRecord.from_dict(data)


@pytest.fixture
def make_loc():
    return make_location
