"""Typed models for live status and persisted black-box records."""

from ecusentinel.models.log_record import LogRecord
from ecusentinel.models.status import DashboardSnapshot, StatusEntry

__all__ = [
    "DashboardSnapshot",
    "LogRecord",
    "StatusEntry",
]
