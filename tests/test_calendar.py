"""Tests for read-only Calendar operations and event parsing."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from googleapiclient.errors import HttpError

from gworkspace_auth.google.calendar import (
    get_event,
    get_free_busy,
    list_calendars,
    list_events,
    parse_event,
)
from gworkspace_auth.utils.errors import GoogleAPIError


@pytest.fixture
def sample_event():
    return {
        "id": "evt1",
        "summary": "Standup",
        "start": {"dateTime": "2026-01-20T09:00:00-05:00", "timeZone": "America/New_York"},
        "end": {"dateTime": "2026-01-20T09:15:00-05:00"},
        "htmlLink": "https://calendar.google.com/event?eid=abc",
        "attendees": [
            {"email": "a@example.com", "responseStatus": "accepted", "self": True},
            {"email": "b@example.com"},
            {"displayName": "Room 1"},
        ],
        "organizer": {"email": "boss@example.com", "displayName": "Boss"},
        "conferenceData": {
            "entryPoints": [{"uri": "https://meet.google.com/abc", "label": "meet.google.com/abc"}]
        },
    }


class TestParseEvent:
    def test_fields(self, sample_event):
        parsed = parse_event(sample_event, "primary")

        assert parsed["id"] == "evt1"
        assert parsed["calendarId"] == "primary"
        assert parsed["summary"] == "Standup"
        assert parsed["status"] == "confirmed"
        assert parsed["start"] == {
            "dateTime": "2026-01-20T09:00:00-05:00",
            "timeZone": "America/New_York",
        }
        assert parsed["organizer"] == {"email": "boss@example.com", "displayName": "Boss"}
        assert parsed["conferenceData"]["entryPoints"][0]["uri"] == "https://meet.google.com/abc"

    def test_attendees_without_email_dropped(self, sample_event):
        attendees = parse_event(sample_event, "primary")["attendees"]

        assert [a["email"] for a in attendees] == ["a@example.com", "b@example.com"]
        assert attendees[0]["responseStatus"] == "accepted"
        assert attendees[1]["responseStatus"] == "needsAction"

    def test_defaults(self):
        parsed = parse_event({"id": "evt2", "start": {"date": "2026-01-20"}}, "work")

        assert parsed["summary"] == "Untitled Event"
        assert parsed["start"] == {"date": "2026-01-20"}
        assert parsed["end"] == {}
        assert "attendees" not in parsed
        assert "organizer" not in parsed
        assert "conferenceData" not in parsed


class TestListEvents:
    def test_defaults(self, mock_service, sample_event):
        mock_service.events().list.return_value.execute.return_value = {"items": [sample_event]}

        events = list_events(mock_service)

        assert len(events) == 1
        kwargs = mock_service.events().list.call_args.kwargs
        assert kwargs["calendarId"] == "primary"
        assert kwargs["singleEvents"] is True
        assert kwargs["orderBy"] == "startTime"
        assert kwargs["timeMin"].endswith("Z")
        assert "timeMax" not in kwargs
        assert "q" not in kwargs

    def test_optional_filters(self, mock_service):
        mock_service.events().list.return_value.execute.return_value = {}

        list_events(
            mock_service,
            calendar_id="team@group.calendar.google.com",
            time_min="2026-01-01T00:00:00Z",
            time_max="2026-02-01T00:00:00Z",
            query="review",
        )

        kwargs = mock_service.events().list.call_args.kwargs
        assert kwargs["timeMin"] == "2026-01-01T00:00:00Z"
        assert kwargs["timeMax"] == "2026-02-01T00:00:00Z"
        assert kwargs["q"] == "review"

    def test_api_error(self, mock_service):
        mock_service.events().list.return_value.execute.side_effect = HttpError(
            MagicMock(status=401, reason="Unauthorized"), b"Unauthorized"
        )

        with pytest.raises(GoogleAPIError) as exc_info:
            list_events(mock_service)

        assert exc_info.value.status_code == 401


class TestOtherCalendarCalls:
    def test_get_event(self, mock_service, sample_event):
        mock_service.events().get.return_value.execute.return_value = sample_event

        event = get_event(mock_service, "evt1")

        assert event["id"] == "evt1"
        mock_service.events().get.assert_called_with(calendarId="primary", eventId="evt1")

    def test_list_calendars(self, mock_service):
        mock_service.calendarList().list.return_value.execute.return_value = {
            "items": [
                {"id": "primary@example.com", "summary": "Me", "primary": True, "accessRole": "owner"},
                {"id": "holidays"},
                {"summary": "no id"},
            ]
        }

        calendars = list_calendars(mock_service)

        assert [c["id"] for c in calendars] == ["primary@example.com", "holidays"]
        assert calendars[1]["summary"] == "Untitled"
        assert calendars[1]["accessRole"] == "reader"
        assert calendars[1]["primary"] is False

    def test_free_busy(self, mock_service):
        mock_service.freebusy().query.return_value.execute.return_value = {
            "calendars": {
                "primary": {"busy": [{"start": "2026-01-20T09:00:00Z", "end": "2026-01-20T10:00:00Z"}]},
                "other": {},
            }
        }

        busy = get_free_busy(
            mock_service, ["primary", "other"], "2026-01-20T00:00:00Z", "2026-01-21T00:00:00Z"
        )

        assert busy == {
            "primary": [{"start": "2026-01-20T09:00:00Z", "end": "2026-01-20T10:00:00Z"}],
            "other": [],
        }
        body = mock_service.freebusy().query.call_args.kwargs["body"]
        assert body["items"] == [{"id": "primary"}, {"id": "other"}]
