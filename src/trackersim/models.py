"""Telemetry snapshot model.

:class:`TelemetrySnapshot` is the immutable, rounded copy of the device
state that goes on the wire. Rounding happens in field validators, so a
snapshot built from any float carries the published precision.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

from trackersim._constants import ALTITUDE_SPEED_DECIMALS, LAT_LNG_DECIMALS


class TelemetrySnapshot(BaseModel):
    """Published tracker telemetry.

    Parameters
    ----------
    latitude : float
        Latitude in degrees, 6 decimals.
    longitude : float
        Longitude in degrees, 6 decimals.
    altitude : float
        Altitude in metres, 1 decimal.
    speed : float
        Speed in km/h, 1 decimal.
    locked : bool
        Whether the tracker reports the bike as locked.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    latitude: float
    longitude: float
    altitude: float
    speed: float
    locked: bool

    @field_validator("latitude", "longitude")
    @classmethod
    def _round_coordinate(cls, value: float) -> float:
        return round(value, LAT_LNG_DECIMALS)

    @field_validator("altitude", "speed")
    @classmethod
    def _round_measurement(cls, value: float) -> float:
        return round(value, ALTITUDE_SPEED_DECIMALS)

    def to_payload(self) -> bytes:
        """Serialize to compact UTF-8 JSON."""
        return self.model_dump_json().encode("utf-8")
