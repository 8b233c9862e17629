"""Dead-reckoning position updates.

Equirectangular approximation: 111 km per degree of latitude, longitude
degrees scaled by the cosine of the current latitude. Pure functions over
:class:`~trackersim.state.DeviceState`, no I/O.
"""

from __future__ import annotations

import math
import random

from trackersim._constants import (
    ALTITUDE_JITTER,
    KM_PER_DEGREE,
    LAT_LNG_JITTER,
    MS_PER_HOUR,
    SPEED_JITTER,
)
from trackersim.state import DeviceState


def displacement(
    speed_kmh: float,
    heading_deg: float,
    latitude_deg: float,
    interval_ms: float,
) -> tuple[float, float]:
    """Return ``(delta_lat, delta_lng)`` in degrees for one time step."""
    hours = interval_ms / MS_PER_HOUR
    distance_km = speed_kmh * hours
    heading_rad = math.radians(heading_deg)
    delta_lat = (distance_km / KM_PER_DEGREE) * math.cos(heading_rad)
    delta_lng = (distance_km / (KM_PER_DEGREE * math.cos(math.radians(latitude_deg)))) * math.sin(heading_rad)
    return delta_lat, delta_lng


def _jitter(rng: random.Random, amplitude: float) -> float:
    return (rng.random() - 0.5) * amplitude


def advance(state: DeviceState, interval_ms: float, rng: random.Random) -> bool:
    """Advance *state* by one tick in place.

    Returns ``False`` without touching the state when the device is not
    moving or has zero speed.
    """
    if not state.moving or state.speed == 0:
        return False

    delta_lat, delta_lng = displacement(state.speed, state.heading, state.latitude, interval_ms)
    state.latitude += delta_lat
    state.longitude += delta_lng

    state.latitude += _jitter(rng, LAT_LNG_JITTER)
    state.longitude += _jitter(rng, LAT_LNG_JITTER)
    state.altitude += _jitter(rng, ALTITUDE_JITTER)
    state.speed = max(0.0, state.speed + _jitter(rng, SPEED_JITTER))
    return True
