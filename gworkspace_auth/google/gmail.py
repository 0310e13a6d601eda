"""Read-only Gmail operations and message parsing."""

from __future__ import annotations

import base64
import logging
import re
from datetime import UTC
from email.utils import parsedate_to_datetime
from typing import Any

from googleapiclient.discovery import Resource
from googleapiclient.errors import HttpError

from gworkspace_auth.utils.errors import GoogleAPIError

logger = logging.getLogger(__name__)

MAX_SEARCH_RESULTS = 50

# Commas outside double quotes separate addresses
_ADDRESS_SPLIT = re.compile(r',(?=(?:[^"]*"[^"]*")*[^"]*$)')


def _api_error(action: str, e: HttpError) -> GoogleAPIError:
    status = getattr(e.resp, "status", None)
    return GoogleAPIError(
        f"Failed to {action}: {e}",
        status_code=int(status) if status is not None else None,
    )


def search_messages(
    service: Resource,
    query: str,
    max_results: int = 10,
    include_body: bool = False,
) -> list[dict[str, Any]]:
    """Search messages with Gmail query syntax.

    Args:
        service: Gmail v1 Resource.
        query: Gmail search query (e.g. ``is:unread from:boss@example.com``).
        max_results: Number of messages to return, clamped to 1-50.
        include_body: Fetch full messages including decoded bodies.

    Returns:
        Parsed messages, newest first as returned by Gmail.
    """
    max_results = min(max(max_results, 1), MAX_SEARCH_RESULTS)
    try:
        response = (
            service.users()
            .messages()
            .list(userId="me", q=query, maxResults=max_results)
            .execute()
        )
    except HttpError as e:
        logger.error("Failed to search messages: %s", e)
        raise _api_error("search messages", e) from e

    stubs = [m for m in response.get("messages", []) if m.get("id")]
    logger.debug("Search matched %d messages", len(stubs))
    fmt = "full" if include_body else "metadata"
    return [get_message(service, m["id"], format=fmt) for m in stubs]


def get_message(
    service: Resource, message_id: str, format: str = "full"
) -> dict[str, Any]:
    """Get and parse a message by ID."""
    try:
        message = (
            service.users()
            .messages()
            .get(userId="me", id=message_id, format=format)
            .execute()
        )
    except HttpError as e:
        logger.error("Failed to get message %s: %s", message_id, e)
        raise _api_error(f"get message {message_id}", e) from e

    logger.debug("Retrieved message %s", message_id)
    return parse_message(message, include_body=format == "full")


def get_thread(
    service: Resource, thread_id: str, include_body: bool = False
) -> list[dict[str, Any]]:
    """Get all messages of a thread."""
    try:
        thread = (
            service.users()
            .threads()
            .get(userId="me", id=thread_id, format="full" if include_body else "metadata")
            .execute()
        )
    except HttpError as e:
        logger.error("Failed to get thread %s: %s", thread_id, e)
        raise _api_error(f"get thread {thread_id}", e) from e

    messages = thread.get("messages", [])
    logger.debug("Retrieved thread %s with %d messages", thread_id, len(messages))
    return [parse_message(m, include_body) for m in messages]


def list_labels(service: Resource) -> list[dict[str, Any]]:
    """List all labels in the mailbox."""
    try:
        response = service.users().labels().list(userId="me").execute()
    except HttpError as e:
        logger.error("Failed to list labels: %s", e)
        raise _api_error("list labels", e) from e

    labels = []
    for label in response.get("labels", []):
        if not label.get("id") or not label.get("name"):
            continue
        parsed: dict[str, Any] = {
            "id": label["id"],
            "name": label["name"],
            "type": "system" if label.get("type") == "system" else "user",
        }
        if label.get("messagesTotal") is not None:
            parsed["messagesTotal"] = label["messagesTotal"]
        if label.get("messagesUnread") is not None:
            parsed["messagesUnread"] = label["messagesUnread"]
        labels.append(parsed)
    return labels


def parse_message(message: dict[str, Any], include_body: bool) -> dict[str, Any]:
    """Convert a Gmail API message resource into a flat summary.

    Bodies are only decoded when ``include_body`` is set; attachment
    metadata is always collected.
    """
    payload = message.get("payload") or {}
    headers = payload.get("headers", [])

    def header(name: str) -> str:
        for h in headers:
            if h.get("name", "").lower() == name:
                return h.get("value", "")
        return ""

    body: dict[str, str] = {}
    if include_body and payload:
        body = extract_body_content(payload)

    attachments = extract_attachments(payload)
    cc = parse_address_list(header("cc"))

    parsed: dict[str, Any] = {
        "id": message.get("id", ""),
        "threadId": message.get("threadId", ""),
        "from": header("from"),
        "to": parse_address_list(header("to")),
        "subject": header("subject"),
        "date": parse_email_date(header("date")),
        "snippet": message.get("snippet", ""),
        "labels": message.get("labelIds", []),
        "hasAttachments": bool(attachments),
        "body": body,
    }
    if cc:
        parsed["cc"] = cc
    if attachments:
        parsed["attachments"] = attachments
    return parsed


def parse_address_list(value: str) -> list[str]:
    """Split a header like ``"Doe, J" <j@x.com>, k@y.com`` into addresses."""
    if not value.strip():
        return []
    return [part.strip() for part in _ADDRESS_SPLIT.split(value) if part.strip()]


def parse_email_date(value: str) -> str:
    """Convert an RFC 2822 date to ISO 8601 UTC, or return it unchanged."""
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return value
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC).isoformat().replace("+00:00", "Z")


def _safe_base64_decode(data: str) -> str:
    """Decode Gmail's URL-safe base64, or empty string on failure."""
    try:
        padded = data + "=" * (-len(data) % 4)
        return base64.urlsafe_b64decode(padded).decode("utf-8", errors="replace")
    except (ValueError, UnicodeDecodeError) as e:
        logger.warning("Failed to decode base64 body data: %s", e)
        return ""


def extract_body_content(payload: dict[str, Any]) -> dict[str, str]:
    """Collect text/plain and text/html bodies from a (multipart) payload."""
    body: dict[str, str] = {}

    def visit(part: dict[str, Any]) -> None:
        mime_type = part.get("mimeType", "")
        data = (part.get("body") or {}).get("data")
        if data and mime_type == "text/plain":
            body["text"] = _safe_base64_decode(data)
        elif data and mime_type == "text/html":
            body["html"] = _safe_base64_decode(data)
        for sub_part in part.get("parts", []):
            visit(sub_part)

    visit(payload)
    return body


def extract_attachments(payload: dict[str, Any]) -> list[dict[str, Any]]:
    """Collect attachment metadata (filename, MIME type, size)."""
    attachments: list[dict[str, Any]] = []

    def visit(part: dict[str, Any]) -> None:
        part_body = part.get("body") or {}
        if part.get("filename") and part_body.get("attachmentId"):
            attachments.append(
                {
                    "filename": part["filename"],
                    "mimeType": part.get("mimeType") or "application/octet-stream",
                    "size": part_body.get("size", 0),
                }
            )
        for sub_part in part.get("parts", []):
            visit(sub_part)

    if payload:
        visit(payload)
    return attachments


__all__ = [
    "search_messages",
    "get_message",
    "get_thread",
    "list_labels",
    "parse_message",
    "parse_address_list",
    "parse_email_date",
    "extract_body_content",
    "extract_attachments",
]
