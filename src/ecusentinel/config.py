"""Runtime configuration for ecusentinel."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Callable
from typing import Any

from ecusentinel.exceptions import SentinelConfigError


def _env_optional_int(value: str) -> int | None:
    normalized = value.strip().lower()
    if normalized in {"", "none", "random"}:
        return None
    return int(normalized)


@dataclasses.dataclass(frozen=True)
class SentinelConfig:
    """Fleet monitoring configuration.

    Parameters
    ----------
    db_path : str
        Location of the SQLite black-box store. Created if absent.
    seed : int or None
        Seed for the per-sensor random sources. ``None`` draws fresh
        entropy on every run.
    poll_min_ms : int
        Lower bound of the jittered polling interval in milliseconds.
    poll_max_ms : int
        Upper bound of the jittered polling interval in milliseconds.
    trouble_log_capacity : int
        Number of trouble-code lines kept for the dashboard.
    refresh_interval : float
        Seconds between dashboard refreshes; also the input poll timeout.
    sink_retry_attempts : int
        Attempts per record before a failed black-box write is dropped.
    sink_retry_backoff : float
        Seconds to wait after the first failed attempt. Doubles per retry.
    stale_after : float
        Seconds without a report before a sensor is shown as stale.
    log_file : str
        Log destination while the terminal dashboard owns the screen.
    """

    db_path: str = "blackbox.db"
    seed: int | None = None
    poll_min_ms: int = 500
    poll_max_ms: int = 1500
    trouble_log_capacity: int = 20
    refresh_interval: float = 0.1
    sink_retry_attempts: int = 3
    sink_retry_backoff: float = 0.1
    stale_after: float = 5.0
    log_file: str = "ecusentinel.log"

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Raise :class:`SentinelConfigError` if any field is out of range."""
        if not self.db_path:
            raise SentinelConfigError("db_path must be non-empty")
        if self.poll_min_ms < 0 or self.poll_max_ms < self.poll_min_ms:
            raise SentinelConfigError(
                f"invalid poll interval: min={self.poll_min_ms}ms max={self.poll_max_ms}ms"
            )
        if self.trouble_log_capacity < 1:
            raise SentinelConfigError("trouble_log_capacity must be at least 1")
        if self.refresh_interval <= 0:
            raise SentinelConfigError("refresh_interval must be positive")
        if self.sink_retry_attempts < 1:
            raise SentinelConfigError("sink_retry_attempts must be at least 1")
        if self.sink_retry_backoff < 0:
            raise SentinelConfigError("sink_retry_backoff must not be negative")
        if self.stale_after <= 0:
            raise SentinelConfigError("stale_after must be positive")

    @property
    def poll_interval_s(self) -> tuple[float, float]:
        """Jitter bounds in seconds."""
        return self.poll_min_ms / 1000.0, self.poll_max_ms / 1000.0

    @classmethod
    def from_env(cls, **overrides: Any) -> SentinelConfig:
        """Create configuration from environment variables.

        Reads optional ``ECU_SENTINEL_*`` variables. Explicit keyword
        arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        SentinelConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_CONFIG_MAP: dict[str, tuple[str, Callable[[str], Any]]] = {
            "ECU_SENTINEL_DB_PATH": ("db_path", str),
            "ECU_SENTINEL_SEED": ("seed", _env_optional_int),
            "ECU_SENTINEL_POLL_MIN_MS": ("poll_min_ms", int),
            "ECU_SENTINEL_POLL_MAX_MS": ("poll_max_ms", int),
            "ECU_SENTINEL_TROUBLE_LOG_CAPACITY": ("trouble_log_capacity", int),
            "ECU_SENTINEL_REFRESH_INTERVAL": ("refresh_interval", float),
            "ECU_SENTINEL_SINK_RETRY_ATTEMPTS": ("sink_retry_attempts", int),
            "ECU_SENTINEL_SINK_RETRY_BACKOFF": ("sink_retry_backoff", float),
            "ECU_SENTINEL_STALE_AFTER": ("stale_after", float),
            "ECU_SENTINEL_LOG_FILE": ("log_file", str),
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, (field_name, convert) in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is None or field_name in overrides:
                continue
            try:
                config_kwargs[field_name] = convert(val)
            except ValueError as exc:
                raise SentinelConfigError(f"{env_key}={val!r} is not valid: {exc}") from exc

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
