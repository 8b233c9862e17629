"""Internal MQTT topic and publishing runtime helpers."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any, cast

import paho.mqtt.client as mqtt

from trackersim.exceptions import TrackerConnectionError, TrackerPublishError


def build_topic(namespace: str, tracker_id: str) -> str:
    """Return ``<namespace>/trackers/<namespace>-tracker-<tracker_id>``."""
    return f"{namespace}/trackers/{namespace}-tracker-{tracker_id}"


class TelemetryPublisher:
    """Threaded paho-mqtt runtime that reports connection events onto an asyncio loop.

    The paho network loop runs in its own thread; ``on_connected`` and
    ``on_error`` are always invoked on *loop* via ``call_soon_threadsafe``.
    """

    def __init__(
        self,
        *,
        loop: asyncio.AbstractEventLoop,
        keepalive: int = 60,
        client_id: str = "",
        logger: logging.Logger | None = None,
    ) -> None:
        self._loop = loop
        self._keepalive = keepalive
        self._client_id = client_id
        self._logger = logger or logging.getLogger(__name__)
        self._client: mqtt.Client | None = None
        self._running = False

    def start(
        self,
        host: str,
        port: int,
        on_connected: Callable[[], None],
        on_error: Callable[[BaseException], None],
    ) -> None:
        """Connect to the broker and start the network loop.

        Raises :class:`TrackerConnectionError` when the socket connection
        cannot be opened. Later failures (refused CONNACK, failed
        reconnects) are reported through *on_error*.
        """
        self.stop()
        self._logger.debug(
            "MQTT runtime start requested host=%s port=%s client_id=%s",
            host,
            port,
            self._client_id or "<generated>",
        )

        client = mqtt.Client(
            callback_api_version=cast(Any, mqtt).CallbackAPIVersion.VERSION2,
            client_id=self._client_id,
            protocol=mqtt.MQTTv311,
        )
        client.enable_logger(self._logger)

        def report_error(message: str) -> None:
            self._loop.call_soon_threadsafe(on_error, TrackerConnectionError(message, host=host, port=port))

        def on_connect(
            _c: mqtt.Client,
            _userdata: Any,
            _flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if reason_code.is_failure:
                self._logger.warning("MQTT connect failed: %s", reason_code)
                report_error(f"Connection refused by {host}:{port}: {reason_code}")
                return
            self._logger.debug("MQTT connected successfully reason=%s", reason_code)
            self._loop.call_soon_threadsafe(on_connected)

        def on_connect_fail(_c: mqtt.Client, _userdata: Any) -> None:
            report_error(f"Could not connect to {host}:{port}")

        def on_disconnect(
            _client: mqtt.Client,
            _userdata: Any,
            _disconnect_flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if self._running:
                self._logger.warning("MQTT disconnected: %s", reason_code)

        client.on_connect = on_connect
        client.on_connect_fail = on_connect_fail
        client.on_disconnect = on_disconnect

        try:
            client.connect(host, port, keepalive=self._keepalive)
        except OSError as exc:
            raise TrackerConnectionError(f"Could not connect to {host}:{port}: {exc}", host=host, port=port) from exc
        client.loop_start()

        self._client = client
        self._running = True
        self._logger.debug("MQTT network loop started")

    def publish(self, topic: str, payload: bytes) -> None:
        """Publish *payload* on *topic* with QoS 0, fire-and-forget.

        Raises :class:`TrackerPublishError` when paho rejects the message.
        """
        client = self._client
        if client is None or not self._running:
            raise TrackerPublishError("MQTT runtime is not running", topic=topic)
        info = client.publish(topic, payload, qos=0)
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            raise TrackerPublishError(
                f"Publish to {topic} failed: {mqtt.error_string(info.rc)}",
                topic=topic,
                rc=info.rc,
            )
        self._logger.debug("Published topic=%s bytes=%d", topic, len(payload))

    def stop(self) -> None:
        """Stop and disconnect current MQTT client if running."""
        client = self._client
        self._client = None
        was_running = self._running
        self._running = False

        if client is None:
            return
        try:
            if was_running:
                self._logger.debug("MQTT disconnect requested")
                client.disconnect()
        finally:
            client.loop_stop()
            self._logger.debug("MQTT network loop stopped")
