"""Audit trail for authentication events."""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class AuditEntry(BaseModel):
    """Model for an authentication audit entry."""

    timestamp: str = Field(
        default_factory=lambda: datetime.now(UTC).isoformat(),
        description="ISO format timestamp",
    )
    profile_id: str | None = Field(default=None, description="Credential profile")
    event: str = Field(..., description="Event type (login, refresh, fallback)")
    mode: str | None = Field(default=None, description="OAuth flow mode")
    result_status: str = Field(default="success", description="success/error")
    error_message: str | None = Field(default=None, description="Error if failed")
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Event details (sensitive data redacted)",
    )


class AuditLogger:
    """Writes auth audit entries to stderr as JSON lines.

    Disabled by setting ``AUTH_AUDIT=false``.
    """

    SENSITIVE_KEYS = {
        "access",
        "refresh",
        "token",
        "access_token",
        "refresh_token",
        "code",
        "code_verifier",
        "verifier",
        "state",
        "client_secret",
        "secret",
        "authorization",
    }

    def __init__(self, enabled: bool | None = None):
        if enabled is None:
            enabled = os.getenv("AUTH_AUDIT", "true").lower() not in ("false", "0", "no")
        self._enabled = enabled

    def _redact_sensitive(self, params: dict[str, Any]) -> dict[str, Any]:
        """Redact sensitive values from event details."""
        redacted: dict[str, Any] = {}
        for key, value in params.items():
            if key.lower() in self.SENSITIVE_KEYS:
                redacted[key] = "[REDACTED]"
            elif isinstance(value, dict):
                redacted[key] = self._redact_sensitive(value)
            else:
                redacted[key] = value
        return redacted

    def log(self, entry: AuditEntry) -> None:
        """Write audit entry to stderr."""
        if not self._enabled:
            return

        try:
            line = json.dumps({"audit": entry.model_dump()})
            print(line, file=sys.stderr, flush=True)
        except (TypeError, ValueError, OSError) as e:
            logger.error("Failed to write audit log: %s", e)

    def log_auth_event(
        self,
        event: str,
        profile_id: str | None = None,
        mode: str | None = None,
        success: bool = True,
        error_message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Log an authentication event.

        Args:
            event: Event type (login, refresh, fallback).
            profile_id: Credential profile, when known.
            mode: OAuth flow mode (local/manual).
            success: Whether the event succeeded.
            error_message: Error message if failed.
            details: Additional event details (will be redacted).
        """
        entry = AuditEntry(
            profile_id=profile_id,
            event=event,
            mode=mode,
            result_status="success" if success else "error",
            error_message=error_message,
            details=self._redact_sensitive(details or {}),
        )
        self.log(entry)


# Global singleton
audit_logger = AuditLogger()
