"""Shared test fixtures for meeting-finder tests.

Attendee names follow the usual A/B/C convention; times are minute offsets.
"""

import pytest

from models import Event, TimeRange
from scheduler import MeetingQuery

PERSON_A = "Person A"
PERSON_B = "Person B"
PERSON_C = "Person C"

TIME_0800AM = 8 * 60
TIME_0830AM = 8 * 60 + 30
TIME_0900AM = 9 * 60
TIME_0930AM = 9 * 60 + 30
TIME_1000AM = 10 * 60

DURATION_30_MINUTES = 30
DURATION_60_MINUTES = 60
DURATION_90_MINUTES = 90
DURATION_1_HOUR = 60


def make_event(name, start, end, *attendees):
    """Build an event over [start, end) for the given attendees."""
    return Event(name=name, when=TimeRange(start, end), attendees=attendees)


@pytest.fixture
def query():
    return MeetingQuery()


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    """Point the JSON state file at a temporary directory."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("utils.CONFIG_FILE", str(tmp_path / "data" / "config.json"))
    return tmp_path / "data"
