"""Simulation and publish loop.

Owns the tracker lifecycle: connect to the broker, publish a snapshot on a
fixed interval, dispatch keyboard commands and shut down cleanly on quit or
interrupt. The timer task and the key-reader callback share one event loop,
so state mutations never interleave.
"""

from __future__ import annotations

import asyncio
import contextlib
import functools
import logging
import random
import signal
from collections.abc import Callable
from typing import Protocol

from trackersim._mqtt import TelemetryPublisher, build_topic
from trackersim.commands import CommandDispatcher
from trackersim.config import SimulatorConfig
from trackersim.console import Console, TerminalConsole
from trackersim.exceptions import TrackerConnectionError, TrackerPublishError
from trackersim.models import TelemetrySnapshot
from trackersim.motion import advance
from trackersim.state import StateStore

_logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CONNECTION_ERROR = 1


class Publisher(Protocol):
    def start(
        self,
        host: str,
        port: int,
        on_connected: Callable[[], None],
        on_error: Callable[[BaseException], None],
    ) -> None: ...

    def publish(self, topic: str, payload: bytes) -> None: ...

    def stop(self) -> None: ...


class TrackerSimulator:
    """Periodic telemetry publisher for one simulated tracker."""

    def __init__(
        self,
        config: SimulatorConfig,
        *,
        store: StateStore | None = None,
        publisher: Publisher | None = None,
        console: Console | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._config = config
        self._store = store or StateStore.from_config(config)
        self._publisher = publisher
        self._console = console
        self._rng = rng or random.Random()
        self._topic = build_topic(config.namespace, config.tracker_id)
        self._dispatcher: CommandDispatcher | None = None
        self._publish_task: asyncio.Task[None] | None = None
        self._done: asyncio.Future[int] | None = None
        self._connected = False

    @property
    def topic(self) -> str:
        return self._topic

    @property
    def store(self) -> StateStore:
        return self._store

    @property
    def console(self) -> Console:
        if self._console is None:
            self._console = TerminalConsole()
        return self._console

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def tick(self) -> TelemetrySnapshot:
        """Advance, snapshot, publish and render, in that order."""
        advance(self._store.state, self._config.update_interval_ms, self._rng)
        snapshot = self._store.snapshot()
        if self._publisher is None:
            raise TrackerPublishError("No publisher configured", topic=self._topic)
        self._publisher.publish(self._topic, snapshot.to_payload())
        self.console.render_status(self._store.state)
        return snapshot

    async def _publish_loop(self) -> None:
        interval = self._config.update_interval_seconds
        while True:
            await asyncio.sleep(interval)
            self.tick()

    def _on_publish_done(self, task: asyncio.Task[None]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is None:
            return
        _logger.debug("Publish loop failed", exc_info=exc)
        self.console.error(f"MQTT error: {exc}")
        self._finish(EXIT_CONNECTION_ERROR)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def request_stop(self, exit_code: int = EXIT_OK) -> None:
        """Ask :meth:`run` to shut down and return *exit_code*."""
        self._finish(exit_code)

    def _finish(self, exit_code: int) -> None:
        done = self._done
        if done is not None and not done.done():
            done.set_result(exit_code)

    def _on_interrupt(self) -> None:
        self.console.echo("\nShutting down...")
        self._finish(EXIT_OK)

    def _on_connected(self) -> None:
        if self._connected:
            _logger.debug("MQTT reconnected")
            return
        self._connected = True
        console = self.console
        console.banner(self._config, self._topic)

        task = asyncio.get_running_loop().create_task(self._publish_loop())
        task.add_done_callback(self._on_publish_done)
        self._publish_task = task

        self._dispatcher = CommandDispatcher(self._store, console, on_quit=self.request_stop)
        console.start_keys(self._dispatcher.handle_key)

    def _on_connection_error(self, exc: BaseException) -> None:
        self.console.error(f"MQTT error: {exc}")
        self._finish(EXIT_CONNECTION_ERROR)

    async def run(self) -> int:
        """Run until quit, interrupt or a fatal MQTT error; return the exit code."""
        loop = asyncio.get_running_loop()
        self._done = loop.create_future()
        self._connected = False
        if self._publisher is None:
            self._publisher = TelemetryPublisher(
                loop=loop,
                keepalive=self._config.mqtt_keepalive,
                client_id=self._config.client_id,
            )
        publisher = self._publisher

        _logger.debug(
            "Connecting to %s:%s topic=%s",
            self._config.broker_host,
            self._config.broker_port,
            self._topic,
        )
        try:
            await loop.run_in_executor(
                None,
                functools.partial(
                    publisher.start,
                    self._config.broker_host,
                    self._config.broker_port,
                    self._on_connected,
                    self._on_connection_error,
                ),
            )
        except TrackerConnectionError as exc:
            self.console.error(f"MQTT error: {exc}")
            await loop.run_in_executor(None, publisher.stop)
            return EXIT_CONNECTION_ERROR

        installed: list[signal.Signals] = []
        for sig in (signal.SIGINT, signal.SIGTERM):
            with contextlib.suppress(NotImplementedError, RuntimeError):
                loop.add_signal_handler(sig, self._on_interrupt)
                installed.append(sig)

        try:
            return await self._done
        finally:
            for sig in installed:
                loop.remove_signal_handler(sig)
            if self._dispatcher is not None:
                await self._dispatcher.aclose()
            if self._connected:
                self.console.stop_keys()
            task = self._publish_task
            self._publish_task = None
            if task is not None and not task.done():
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
            await loop.run_in_executor(None, publisher.stop)
            _logger.debug("Simulator stopped")
