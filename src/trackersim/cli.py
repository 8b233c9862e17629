"""Command-line entry point for the tracker simulator."""

from __future__ import annotations

import argparse
import asyncio
import logging
from collections.abc import Sequence
from typing import Any

from trackersim.config import SimulatorConfig
from trackersim.normalize import positive_int_or, safe_float, safe_str
from trackersim.simulator import EXIT_OK, TrackerSimulator


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="tracker-sim",
        description="Simulated GPS tracker publishing telemetry over MQTT.",
    )
    parser.add_argument("tracker_id", nargs="?", help="Tracker identifier (default: 001).")
    parser.add_argument("interval", nargs="?", help="Update interval in milliseconds (default: 2000).")
    parser.add_argument("latitude", nargs="?", help="Starting latitude (default: 42.6977).")
    parser.add_argument("longitude", nargs="?", help="Starting longitude (default: 23.3219).")
    parser.add_argument("--broker-host", help="MQTT broker hostname.")
    parser.add_argument("--broker-port", help="MQTT broker port.")
    parser.add_argument("--namespace", help="Topic namespace.")
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logs.",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> SimulatorConfig:
    """Merge positional/optional arguments over environment configuration.

    Malformed values are dropped so the environment or built-in default
    applies instead.
    """
    overrides: dict[str, Any] = {
        "tracker_id": safe_str(args.tracker_id),
        "update_interval_ms": positive_int_or(args.interval, 0) or None,
        "start_latitude": safe_float(args.latitude),
        "start_longitude": safe_float(args.longitude),
        "broker_host": safe_str(args.broker_host),
        "broker_port": positive_int_or(args.broker_port, 0) or None,
        "namespace": safe_str(args.namespace),
    }
    return SimulatorConfig.from_env(**overrides)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    simulator = TrackerSimulator(build_config(args))
    try:
        return asyncio.run(simulator.run())
    except KeyboardInterrupt:
        return EXIT_OK
