"""trackersim - Simulated GPS tracker publishing telemetry over MQTT."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("trackersim")
except PackageNotFoundError:
    __version__ = "0+local"
from trackersim.config import SimulatorConfig
from trackersim.exceptions import (
    TrackerConfigError,
    TrackerConnectionError,
    TrackerPublishError,
    TrackerSimError,
)
from trackersim.models import TelemetrySnapshot
from trackersim.simulator import TrackerSimulator
from trackersim.state import DeviceState, MotionState, StateStore

__all__ = [
    "__version__",
    "DeviceState",
    "MotionState",
    "SimulatorConfig",
    "StateStore",
    "TelemetrySnapshot",
    "TrackerConfigError",
    "TrackerConnectionError",
    "TrackerPublishError",
    "TrackerSimError",
    "TrackerSimulator",
]
