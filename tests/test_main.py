"""Tests for the meeting-finder CLI in main.py."""

import json
import textwrap
from unittest.mock import MagicMock, patch

import pytest

from main import main

CONFIG = """
members:
  - name: Alice
    calendar_id: alice@example.com
  - name: Bob
    calendar_id: bob@example.com
events:
  - name: Morning block
    start: "00:00"
    end: "09:00"
    attendees: [Alice]
  - name: Dentist
    start: "09:00"
    end: "10:00"
    attendees: [Bob]
  - name: Afternoon block
    start: "12:00"
    end: "24:00"
    attendees: [Alice]
request:
  duration: 30
  attendees: [Alice]
  optional_attendees: [Bob]
"""


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "schedule.yaml"
    path.write_text(textwrap.dedent(CONFIG))
    return str(path)


class TestFindTimes:
    """Tests for the find-times command."""

    def test_prints_slots_with_optional_attendee(self, config_path, capsys):
        assert main(["find-times", config_path]) == 0

        out = capsys.readouterr().out
        assert out == "Available 30-minute slots:\n  10:00-12:00\nOptional attendees included: Bob\n"

    def test_duration_override_drops_optional_attendee(self, config_path, capsys):
        assert main(["find-times", config_path, "--duration", "150"]) == 0

        out = capsys.readouterr().out
        assert out == "Available 150-minute slots:\n  09:00-12:00\nOptional attendees left out: Bob\n"

    def test_json_output(self, config_path, capsys):
        assert main(["find-times", config_path, "--json"]) == 0

        assert json.loads(capsys.readouterr().out) == {
            "duration": 30,
            "attendees": ["Alice"],
            "optional_attendees_included": ["Bob"],
            "optional_attendees_left_out": [],
            "slots": [{"start": "10:00", "end": "12:00", "duration": 120}],
        }

    def test_no_slots(self, config_path, capsys):
        assert main(["find-times", config_path, "--duration", "500"]) == 0

        assert capsys.readouterr().out == "No available meeting times found.\n"

    def test_missing_config_file(self, tmp_path, capsys):
        assert main(["find-times", str(tmp_path / "nope.yaml")]) == 1

        assert capsys.readouterr().out.startswith("Error:")

    def test_invalid_config(self, tmp_path, capsys):
        path = tmp_path / "bad.yaml"
        path.write_text("events:\n  - start: '10:00'\n    end: '09:00'\n")

        assert main(["find-times", str(path)]) == 1

        assert "Invalid event time" in capsys.readouterr().out


class TestFindTimesGcal:
    """Tests for the find-times-gcal command."""

    @pytest.fixture
    def service(self):
        service = MagicMock()
        service.events.return_value.list.return_value.execute.side_effect = [
            {
                "items": [
                    {
                        "id": "a1",
                        "summary": "Busy",
                        "start": {"dateTime": "2024-03-05T00:00:00-05:00"},
                        "end": {"dateTime": "2024-03-05T16:00:00-05:00"},
                    }
                ]
            },
            {
                "items": [
                    {
                        "id": "b1",
                        "summary": "Gym",
                        "start": {"dateTime": "2024-03-05T16:00:00-05:00"},
                        "end": {"dateTime": "2024-03-05T17:00:00-05:00"},
                    }
                ]
            },
        ]
        return service

    def test_uses_google_calendar_events(self, config_path, data_dir, service, capsys):
        with patch("main.authenticate_google", return_value=service):
            assert main(["find-times-gcal", config_path, "2024-03-05"]) == 0

        out = capsys.readouterr().out
        assert out == "Available 30-minute slots:\n  17:00-24:00\nOptional attendees included: Bob\n"

    def test_books_first_slot(self, config_path, data_dir, service, capsys):
        with patch("main.authenticate_google", return_value=service):
            assert main(["find-times-gcal", config_path, "2024-03-05", "--book", "team@example.com",
                         "--title", "Planning"]) == 0

        service.events.return_value.insert.assert_called_once()
        kwargs = service.events.return_value.insert.call_args.kwargs
        assert kwargs["calendarId"] == "team@example.com"
        assert kwargs["body"]["summary"] == "Planning"
        assert kwargs["body"]["start"]["dateTime"] == "2024-03-05T22:00:00Z"
        assert kwargs["body"]["end"]["dateTime"] == "2024-03-06T05:00:00Z"
        assert sorted(a["email"] for a in kwargs["body"]["attendees"]) == ["alice@example.com", "bob@example.com"]
        assert "Booked 'Planning' on 2024-03-05 at 17:00-24:00" in capsys.readouterr().out

    def test_rejects_bad_date(self, config_path, data_dir, capsys):
        with patch("main.authenticate_google") as auth:
            assert main(["find-times-gcal", config_path, "05/03/2024"]) == 1

        auth.assert_not_called()
        assert "YYYY-MM-DD" in capsys.readouterr().out

    def test_warns_about_attendees_without_calendar(self, tmp_path, data_dir, capsys):
        path = tmp_path / "schedule.yaml"
        path.write_text("members: []\nrequest:\n  attendees: [Carol]\n")
        service = MagicMock()

        with patch("main.authenticate_google", return_value=service):
            assert main(["find-times-gcal", str(path), "2024-03-05"]) == 0

        assert "No calendar configured for 'Carol'" in capsys.readouterr().out


class TestTimezoneCommands:
    """Tests for the timezone commands."""

    def test_show_default_timezone(self, data_dir, capsys):
        assert main(["show-timezone"]) == 0

        assert capsys.readouterr().out == "Default timezone: America/New_York\n"

    def test_set_then_show_timezone(self, data_dir, capsys):
        assert main(["set-timezone", "Asia/Tokyo"]) == 0
        assert main(["show-timezone"]) == 0

        assert capsys.readouterr().out.splitlines()[-1] == "Default timezone: Asia/Tokyo"

    def test_set_unknown_timezone(self, data_dir, capsys):
        assert main(["set-timezone", "Nowhere/Special"]) == 1

        assert "Unknown timezone" in capsys.readouterr().out


def test_no_command_prints_help(capsys):
    assert main([]) == 0

    assert "usage:" in capsys.readouterr().out
