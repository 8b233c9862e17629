"""Custom exception hierarchy for trackersim."""

from __future__ import annotations


class TrackerSimError(Exception):
    """Base exception for all trackersim errors."""


class TrackerConfigError(TrackerSimError):
    """Invalid configuration that cannot be defaulted."""


class TrackerConnectionError(TrackerSimError):
    """MQTT broker connection failed or was refused.

    Always fatal: the simulator exits with status 1.
    """

    def __init__(
        self,
        message: str,
        *,
        host: str = "",
        port: int | None = None,
    ) -> None:
        self.host = host
        self.port = port
        super().__init__(message)


class TrackerPublishError(TrackerSimError):
    """A telemetry publish call was rejected by the MQTT client."""

    def __init__(self, message: str, *, topic: str = "", rc: int | None = None) -> None:
        self.topic = topic
        self.rc = rc
        super().__init__(message)
