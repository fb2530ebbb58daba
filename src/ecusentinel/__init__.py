"""ecusentinel - Simulated vehicle ECU fleet monitor with a black-box log."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("ecusentinel")
except PackageNotFoundError:
    __version__ = "0+local"
from ecusentinel.config import SentinelConfig
from ecusentinel.exceptions import (
    PersistenceWriteError,
    SentinelConfigError,
    SentinelError,
)
from ecusentinel.models import DashboardSnapshot, LogRecord, StatusEntry
from ecusentinel.monitor import MonitoringLoop, SensorFleet, build_default_fleet
from ecusentinel.sensors import (
    AdasModule,
    BmsCell,
    Sensor,
    SensorComponent,
    SensorKind,
    is_fault_message,
)
from ecusentinel.sink import LogSink, SqliteLogSink
from ecusentinel.state.events import StatusReport
from ecusentinel.state.store import DashboardState

__all__ = [
    "__version__",
    "AdasModule",
    "BmsCell",
    "DashboardSnapshot",
    "DashboardState",
    "LogRecord",
    "LogSink",
    "MonitoringLoop",
    "PersistenceWriteError",
    "Sensor",
    "SensorComponent",
    "SentinelConfigError",
    "SensorFleet",
    "SensorKind",
    "SentinelConfig",
    "SentinelError",
    "SqliteLogSink",
    "StatusEntry",
    "StatusReport",
    "build_default_fleet",
    "is_fault_message",
]
