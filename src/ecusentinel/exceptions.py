"""Custom exception hierarchy for ecusentinel."""

from __future__ import annotations


class SentinelError(Exception):
    """Base exception for all ecusentinel errors."""


class SentinelConfigError(SentinelError):
    """Invalid or missing configuration."""


class PersistenceWriteError(SentinelError):
    """The black-box log store was unavailable or rejected a write."""

    def __init__(
        self,
        message: str,
        *,
        sensor_id: int | None = None,
    ) -> None:
        self.sensor_id = sensor_id
        super().__init__(message)
