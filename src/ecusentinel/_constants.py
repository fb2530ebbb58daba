"""Internal constants shared across the library."""

#: Marker token that classifies a status message as a diagnostic trouble code.
DTC_MARKER = "DTC"

INITIAL_STATUS = "Initializing..."

# ------------------------------------------------------------------
# BMS cell sampling and thermal-runaway detection
# ------------------------------------------------------------------

BMS_WINDOW_SIZE = 10
BMS_MIN_SAMPLES = 5
BMS_STD_DEV_FLOOR = 0.05
BMS_SIGMA_FACTOR = 2.0
BMS_FAULT_PROBABILITY = 0.1
BMS_ANOMALY_VOLTAGE = 2.5
BMS_NOMINAL_RANGE: tuple[float, float] = (3.7, 4.1)
BMS_DTC = "P0A80"

# ------------------------------------------------------------------
# ADAS perception
# ------------------------------------------------------------------

ADAS_FAULT_PROBABILITY = 0.1
ADAS_CONFIDENCE_RANGE: tuple[int, int] = (95, 100)
ADAS_DTC = "C1A67"

# ------------------------------------------------------------------
# Reference fleet (CAN id, kind, display name)
# ------------------------------------------------------------------

DEFAULT_FLEET: tuple[tuple[int, str, str | None], ...] = (
    (0x186A, "bms", None),
    (0x2901, "adas", "Front_Radar"),
    (0x186B, "bms", None),
    (0x2902, "adas", "Lane_Cam"),
)


def format_can_id(sensor_id: int) -> str:
    """Render a bus address the way diagnostic tools print it (``0x186A``)."""
    return f"0x{sensor_id:X}"
