#!/usr/bin/env python3
"""Passive MQTT watcher for simulated tracker telemetry.

Subscribes to the topic a ``tracker-sim`` instance publishes on and prints
every message, validating it against the snapshot model. Use this to check
the publish interval and payload shape from a second terminal.
"""

from __future__ import annotations

import argparse
import json
import logging
import signal
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

# Allow running from repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

import paho.mqtt.client as mqtt  # noqa: E402
from pydantic import ValidationError  # noqa: E402

from trackersim import SimulatorConfig, TelemetrySnapshot  # noqa: E402
from trackersim._mqtt import build_topic  # noqa: E402

_LOG = logging.getLogger("watch_tracker")


@dataclass
class WatchStats:
    started_at: float
    total_messages: int = 0
    valid: int = 0
    invalid: int = 0
    last_message_at: float | None = None

    def on_message(self, now: float) -> float | None:
        previous = self.last_message_at
        self.total_messages += 1
        self.last_message_at = now
        return None if previous is None else now - previous


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Watch telemetry published by a simulated tracker.",
    )
    parser.add_argument(
        "tracker_id",
        nargs="?",
        help="Tracker identifier (default: TRACKER_ID or 001). Use '+' for all trackers.",
    )
    parser.add_argument(
        "--duration",
        type=int,
        default=0,
        help="Maximum runtime in seconds (0 = run until Ctrl+C).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logs.",
    )
    return parser.parse_args()


def _print_summary(stats: WatchStats) -> None:
    runtime = time.time() - stats.started_at
    print("[watch] Summary")
    print(f"[watch]   runtime_s      : {runtime:.1f}")
    print(f"[watch]   total_messages : {stats.total_messages}")
    print(f"[watch]   valid          : {stats.valid}")
    print(f"[watch]   invalid        : {stats.invalid}")


def _main() -> int:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = SimulatorConfig.from_env(tracker_id=args.tracker_id)
    if config.tracker_id == "+":
        topic = f"{config.namespace}/trackers/+"
    else:
        topic = build_topic(config.namespace, config.tracker_id)

    stats = WatchStats(started_at=time.time())
    should_stop = False

    def stop_handler(_signum: int, _frame: Any) -> None:
        nonlocal should_stop
        should_stop = True

    signal.signal(signal.SIGINT, stop_handler)
    signal.signal(signal.SIGTERM, stop_handler)

    mqtt_client = mqtt.Client(callback_api_version=mqtt.CallbackAPIVersion.VERSION2)
    mqtt_client.enable_logger(_LOG)

    def on_connect(
        client: mqtt.Client,
        _userdata: Any,
        _flags: mqtt.ConnectFlags,
        reason_code: mqtt.ReasonCode,
        _properties: mqtt.Properties | None,
    ) -> None:
        if reason_code.is_failure:
            print(f"[watch] MQTT connect failed: {reason_code}", file=sys.stderr)
            client.disconnect()
            return
        print(f"[watch] Connected. Subscribing to {topic}")
        client.subscribe(topic, qos=0)

    def on_message(_client: mqtt.Client, _userdata: Any, msg: mqtt.MQTTMessage) -> None:
        now = time.time()
        delta = stats.on_message(now)
        ts_text = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(now))
        gap_text = "first" if delta is None else f"{delta:.1f}s"
        print(f"[watch] msg#{stats.total_messages} at {ts_text} gap={gap_text} topic={msg.topic}")

        try:
            snapshot = TelemetrySnapshot.model_validate_json(msg.payload)
        except ValidationError as exc:
            stats.invalid += 1
            print(f"[watch] invalid payload: {exc.error_count()} error(s) raw={msg.payload!r}")
            return
        stats.valid += 1
        print(json.dumps(snapshot.model_dump(), sort_keys=True))

    mqtt_client.on_connect = on_connect
    mqtt_client.on_message = on_message

    print(f"[watch] Connecting to {config.broker_host}:{config.broker_port}...")
    try:
        mqtt_client.connect(config.broker_host, config.broker_port, keepalive=config.mqtt_keepalive)
        mqtt_client.loop_start()

        while not should_stop:
            if args.duration > 0 and (time.time() - stats.started_at) >= args.duration:
                print(f"[watch] Reached --duration={args.duration}s, stopping.")
                break
            time.sleep(0.5)
    except OSError as exc:
        print(f"[watch] MQTT error: {exc}", file=sys.stderr)
        return 1
    finally:
        should_stop = True
        try:
            mqtt_client.disconnect()
        finally:
            mqtt_client.loop_stop()

    _print_summary(stats)
    return 0


if __name__ == "__main__":
    raise SystemExit(_main())
