"""Read-only Google Calendar operations and event parsing."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from googleapiclient.discovery import Resource
from googleapiclient.errors import HttpError

from gworkspace_auth.utils.errors import GoogleAPIError

logger = logging.getLogger(__name__)


def _api_error(action: str, e: HttpError) -> GoogleAPIError:
    status = getattr(e.resp, "status", None)
    return GoogleAPIError(
        f"Failed to {action}: {e}",
        status_code=int(status) if status is not None else None,
    )


def _utc_now_iso() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


def list_events(
    service: Resource,
    calendar_id: str = "primary",
    time_min: str | None = None,
    time_max: str | None = None,
    max_results: int = 10,
    single_events: bool = True,
    order_by: str = "startTime",
    query: str | None = None,
) -> list[dict[str, Any]]:
    """List events from a calendar, starting now unless ``time_min`` is given."""
    params: dict[str, Any] = {
        "calendarId": calendar_id,
        "timeMin": time_min or _utc_now_iso(),
        "maxResults": max_results,
        "singleEvents": single_events,
        "orderBy": order_by,
    }
    if time_max:
        params["timeMax"] = time_max
    if query:
        params["q"] = query

    try:
        response = service.events().list(**params).execute()
    except HttpError as e:
        logger.error("Failed to list events for %s: %s", calendar_id, e)
        raise _api_error(f"list events for {calendar_id}", e) from e

    events = response.get("items", [])
    logger.debug("Listed %d events from %s", len(events), calendar_id)
    return [parse_event(event, calendar_id) for event in events]


def get_event(
    service: Resource, event_id: str, calendar_id: str = "primary"
) -> dict[str, Any]:
    """Get a specific event by ID."""
    try:
        event = service.events().get(calendarId=calendar_id, eventId=event_id).execute()
    except HttpError as e:
        logger.error("Failed to get event %s: %s", event_id, e)
        raise _api_error(f"get event {event_id}", e) from e
    return parse_event(event, calendar_id)


def list_calendars(service: Resource) -> list[dict[str, Any]]:
    """List all calendars the user has access to."""
    try:
        response = service.calendarList().list().execute()
    except HttpError as e:
        logger.error("Failed to list calendars: %s", e)
        raise _api_error("list calendars", e) from e

    calendars = []
    for cal in response.get("items", []):
        if not cal.get("id"):
            continue
        calendars.append(
            {
                "id": cal["id"],
                "summary": cal.get("summary") or "Untitled",
                "description": cal.get("description"),
                "primary": cal.get("primary", False),
                "backgroundColor": cal.get("backgroundColor"),
                "foregroundColor": cal.get("foregroundColor"),
                "accessRole": cal.get("accessRole") or "reader",
            }
        )
    return calendars


def get_free_busy(
    service: Resource,
    calendar_ids: list[str],
    time_min: str,
    time_max: str,
) -> dict[str, list[dict[str, str]]]:
    """Busy intervals per calendar between ``time_min`` and ``time_max``."""
    body = {
        "timeMin": time_min,
        "timeMax": time_max,
        "items": [{"id": cal_id} for cal_id in calendar_ids],
    }
    try:
        response = service.freebusy().query(body=body).execute()
    except HttpError as e:
        logger.error("Failed to query free/busy: %s", e)
        raise _api_error("query free/busy", e) from e

    return {
        cal_id: [
            {"start": b.get("start", ""), "end": b.get("end", "")}
            for b in data.get("busy", [])
        ]
        for cal_id, data in response.get("calendars", {}).items()
    }


def _event_time(value: dict[str, Any] | None) -> dict[str, str]:
    value = value or {}
    return {k: value[k] for k in ("dateTime", "date", "timeZone") if value.get(k)}


def parse_event(event: dict[str, Any], calendar_id: str) -> dict[str, Any]:
    """Convert a Calendar API event resource into a flat summary."""
    parsed: dict[str, Any] = {
        "id": event.get("id", ""),
        "calendarId": calendar_id,
        "summary": event.get("summary") or "Untitled Event",
        "description": event.get("description"),
        "location": event.get("location"),
        "start": _event_time(event.get("start")),
        "end": _event_time(event.get("end")),
        "status": event.get("status") or "confirmed",
        "htmlLink": event.get("htmlLink", ""),
        "hangoutLink": event.get("hangoutLink"),
        "recurrence": event.get("recurrence"),
        "recurringEventId": event.get("recurringEventId"),
        "created": event.get("created"),
        "updated": event.get("updated"),
    }

    if "attendees" in event:
        parsed["attendees"] = [
            {
                "email": a["email"],
                "displayName": a.get("displayName"),
                "responseStatus": a.get("responseStatus") or "needsAction",
                "organizer": a.get("organizer"),
                "self": a.get("self"),
            }
            for a in event["attendees"]
            if a.get("email")
        ]

    organizer = event.get("organizer") or {}
    if organizer.get("email"):
        parsed["organizer"] = {
            "email": organizer["email"],
            "displayName": organizer.get("displayName"),
        }

    entry_points = (event.get("conferenceData") or {}).get("entryPoints")
    if entry_points:
        parsed["conferenceData"] = {
            "entryPoints": [
                {"uri": ep.get("uri", ""), "label": ep.get("label")}
                for ep in entry_points
            ]
        }

    return parsed


__all__ = [
    "list_events",
    "get_event",
    "list_calendars",
    "get_free_busy",
    "parse_event",
]
