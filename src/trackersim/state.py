"""In-memory device state store.

This is the only component allowed to mutate the simulated device state.
The timer tick and the command dispatcher both run on the same asyncio
event loop, so no locking is needed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum

from trackersim._constants import DEFAULT_RIDING_SPEED
from trackersim.config import SimulatorConfig
from trackersim.models import TelemetrySnapshot
from trackersim.normalize import parse_position

_logger = logging.getLogger(__name__)


class MotionState(StrEnum):
    STOPPED = "stopped"
    MOVING = "moving"


@dataclass(slots=True)
class DeviceState:
    """Current simulated device state.

    ``speed`` is in km/h and never negative; ``heading`` is in degrees,
    0 = North, clockwise.
    """

    latitude: float
    longitude: float
    altitude: float = 0.0
    speed: float = 0.0
    heading: float = 0.0
    locked: bool = False
    moving: bool = False

    @property
    def motion(self) -> MotionState:
        return MotionState.MOVING if self.moving else MotionState.STOPPED


class StateStore:
    """Owner of the single :class:`DeviceState` instance."""

    def __init__(self, state: DeviceState) -> None:
        self._state = state

    @classmethod
    def from_config(cls, config: SimulatorConfig) -> StateStore:
        return cls(
            DeviceState(
                latitude=config.start_latitude,
                longitude=config.start_longitude,
                altitude=config.start_altitude,
                heading=config.start_heading,
            )
        )

    @property
    def state(self) -> DeviceState:
        return self._state

    def toggle_locked(self) -> bool:
        """Flip the lock flag and return the new value."""
        self._state.locked = not self._state.locked
        _logger.debug("Lock toggled locked=%s", self._state.locked)
        return self._state.locked

    def toggle_moving(self) -> bool:
        """Flip between STOPPED and MOVING and return the new ``moving`` value.

        Starting to move sets the default riding speed; stopping sets speed
        to zero.
        """
        state = self._state
        state.moving = not state.moving
        state.speed = DEFAULT_RIDING_SPEED if state.moving else 0.0
        _logger.debug("Motion toggled motion=%s speed=%s", state.motion, state.speed)
        return state.moving

    def set_coordinates(self, latitude: float, longitude: float) -> None:
        self._state.latitude = latitude
        self._state.longitude = longitude
        _logger.debug("Position set lat=%s lng=%s", latitude, longitude)

    def set_position(self, text: str) -> tuple[float, float] | None:
        """Apply a ``"lat,lng"`` string.

        Returns the applied pair, or ``None`` (and leaves the state
        untouched) when the input is malformed.
        """
        parsed = parse_position(text)
        if parsed is None:
            _logger.debug("Ignoring malformed position input %r", text)
            return None
        self.set_coordinates(*parsed)
        return parsed

    def snapshot(self) -> TelemetrySnapshot:
        state = self._state
        return TelemetrySnapshot(
            latitude=state.latitude,
            longitude=state.longitude,
            altitude=state.altitude,
            speed=state.speed,
            locked=state.locked,
        )
