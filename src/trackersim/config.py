"""Simulator configuration for trackersim."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from trackersim._constants import (
    DEFAULT_BROKER_HOST,
    DEFAULT_BROKER_PORT,
    DEFAULT_INTERVAL_MS,
    DEFAULT_KEEPALIVE,
    DEFAULT_NAMESPACE,
    DEFAULT_START_ALTITUDE,
    DEFAULT_START_LATITUDE,
    DEFAULT_START_LONGITUDE,
    DEFAULT_TRACKER_ID,
)
from trackersim.exceptions import TrackerConfigError
from trackersim.normalize import float_or, positive_int_or, safe_str

# TCP ports and the MQTT keepalive field are both 16-bit.
_MAX_UINT16 = 65535


@dataclasses.dataclass(frozen=True)
class SimulatorConfig:
    """Simulator configuration.

    Parameters
    ----------
    tracker_id : str
        Tracker identifier, used in the MQTT topic.
    update_interval_ms : int
        Publish interval in milliseconds. Also the time step of the
        dead-reckoning model.
    start_latitude : float
        Initial latitude in degrees.
    start_longitude : float
        Initial longitude in degrees.
    start_altitude : float
        Initial altitude in metres.
    start_heading : float
        Initial heading in degrees (0 = North, clockwise).
    namespace : str
        Topic namespace (``<namespace>/trackers/<namespace>-tracker-<id>``).
    broker_host : str
        MQTT broker hostname.
    broker_port : int
        MQTT broker port (plain TCP).
    mqtt_keepalive : int
        MQTT keepalive in seconds.
    client_id : str
        MQTT client id. Empty lets paho generate a random one.
    """

    tracker_id: str = DEFAULT_TRACKER_ID
    update_interval_ms: int = DEFAULT_INTERVAL_MS
    start_latitude: float = DEFAULT_START_LATITUDE
    start_longitude: float = DEFAULT_START_LONGITUDE
    start_altitude: float = DEFAULT_START_ALTITUDE
    start_heading: float = 0.0
    namespace: str = DEFAULT_NAMESPACE
    broker_host: str = DEFAULT_BROKER_HOST
    broker_port: int = DEFAULT_BROKER_PORT
    mqtt_keepalive: int = DEFAULT_KEEPALIVE
    client_id: str = ""

    def __post_init__(self) -> None:
        # Startup parameters are never rejected: bad values fall back to defaults.
        object.__setattr__(self, "tracker_id", safe_str(self.tracker_id) or DEFAULT_TRACKER_ID)
        object.__setattr__(
            self,
            "update_interval_ms",
            positive_int_or(self.update_interval_ms, DEFAULT_INTERVAL_MS),
        )
        object.__setattr__(self, "start_latitude", float_or(self.start_latitude, DEFAULT_START_LATITUDE))
        object.__setattr__(self, "start_longitude", float_or(self.start_longitude, DEFAULT_START_LONGITUDE))
        object.__setattr__(self, "start_altitude", float_or(self.start_altitude, DEFAULT_START_ALTITUDE))
        object.__setattr__(self, "start_heading", float_or(self.start_heading, 0.0) % 360.0)
        object.__setattr__(self, "namespace", safe_str(self.namespace) or DEFAULT_NAMESPACE)
        object.__setattr__(self, "broker_host", safe_str(self.broker_host) or DEFAULT_BROKER_HOST)
        object.__setattr__(self, "broker_port", positive_int_or(self.broker_port, DEFAULT_BROKER_PORT, _MAX_UINT16))
        object.__setattr__(self, "mqtt_keepalive", positive_int_or(self.mqtt_keepalive, DEFAULT_KEEPALIVE, _MAX_UINT16))
        object.__setattr__(self, "client_id", safe_str(self.client_id) or "")

    @property
    def update_interval_seconds(self) -> float:
        return self.update_interval_ms / 1000.0

    @classmethod
    def from_env(cls, **overrides: Any) -> SimulatorConfig:
        """Create configuration from environment variables.

        Reads optional ``TRACKER_*`` variables. Explicit keyword arguments
        override environment values; ``None`` overrides are ignored so
        callers can pass through optional CLI values unchanged.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        SimulatorConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "TRACKER_ID": "tracker_id",
            "TRACKER_INTERVAL_MS": "update_interval_ms",
            "TRACKER_START_LAT": "start_latitude",
            "TRACKER_START_LNG": "start_longitude",
            "TRACKER_START_ALTITUDE": "start_altitude",
            "TRACKER_HEADING": "start_heading",
            "TRACKER_NAMESPACE": "namespace",
            "TRACKER_BROKER_HOST": "broker_host",
            "TRACKER_BROKER_PORT": "broker_port",
            "TRACKER_MQTT_KEEPALIVE": "mqtt_keepalive",
            "TRACKER_CLIENT_ID": "client_id",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise TrackerConfigError(f"Unknown configuration field(s): {', '.join(unknown)}")
        config_kwargs.update({key: value for key, value in overrides.items() if value is not None})

        return cls(**config_kwargs)
