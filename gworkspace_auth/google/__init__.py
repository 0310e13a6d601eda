"""Read-only Gmail and Calendar API operations."""

from gworkspace_auth.google.calendar import (
    get_event,
    get_free_busy,
    list_calendars,
    list_events,
    parse_event,
)
from gworkspace_auth.google.client import build_service, calendar_service, gmail_service
from gworkspace_auth.google.gmail import (
    get_message,
    get_thread,
    list_labels,
    parse_message,
    search_messages,
)

__all__ = [
    "build_service",
    "gmail_service",
    "calendar_service",
    "search_messages",
    "get_message",
    "get_thread",
    "list_labels",
    "parse_message",
    "list_events",
    "get_event",
    "list_calendars",
    "get_free_busy",
    "parse_event",
]
