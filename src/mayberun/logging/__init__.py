"""Structured logging utilities."""

from .audit import (
    DEFAULT_AUDIT_FILENAME,
    JsonlAuditLogger,
    RunEvent,
    sanitize_command,
    utc_timestamp,
)

__all__ = [
    "DEFAULT_AUDIT_FILENAME",
    "JsonlAuditLogger",
    "RunEvent",
    "sanitize_command",
    "utc_timestamp",
]
