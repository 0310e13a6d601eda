"""Middleware module for gworkspace-auth."""

from gworkspace_auth.middleware.audit_logger import AuditEntry, AuditLogger, audit_logger

__all__ = [
    "AuditLogger",
    "AuditEntry",
    "audit_logger",
]
