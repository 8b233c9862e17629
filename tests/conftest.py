from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

from trackersim.config import SimulatorConfig
from trackersim.exceptions import TrackerConnectionError, TrackerPublishError
from trackersim.state import DeviceState


class FakeConsole:
    def __init__(self, answers: list[str | None] | None = None) -> None:
        self.answers = list(answers or [])
        self.events: list[tuple[str, Any]] = []
        self.on_key: Callable[[str], Any] | None = None
        self.prompt_gate: asyncio.Event | None = None

    @property
    def echoes(self) -> list[str]:
        return [value for kind, value in self.events if kind == "echo"]

    @property
    def errors(self) -> list[str]:
        return [value for kind, value in self.events if kind == "error"]

    def banner(self, config: SimulatorConfig, topic: str) -> None:
        self.events.append(("banner", topic))

    def render_status(self, state: DeviceState) -> None:
        self.events.append(("status", (state.latitude, state.longitude, state.speed)))

    def echo(self, message: str) -> None:
        self.events.append(("echo", message))

    def error(self, message: str) -> None:
        self.events.append(("error", message))

    def start_keys(self, on_key: Callable[[str], Any]) -> None:
        self.events.append(("start_keys", None))
        self.on_key = on_key

    def stop_keys(self) -> None:
        self.events.append(("stop_keys", None))

    def suspend_keys(self) -> None:
        self.events.append(("suspend_keys", None))

    async def prompt(self, text: str) -> str | None:
        self.events.append(("prompt", text))
        if self.prompt_gate is not None:
            await self.prompt_gate.wait()
        return self.answers.pop(0) if self.answers else None


class FakePublisher:
    """Stands in for the paho runtime; reports events onto the given loop."""

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop | None = None,
        *,
        connect_error: TrackerConnectionError | None = None,
        refuse: bool = False,
        fail_publish_after: int | None = None,
    ) -> None:
        self.loop = loop
        self.connect_error = connect_error
        self.refuse = refuse
        self.fail_publish_after = fail_publish_after
        self.published: list[tuple[str, bytes]] = []
        self.started = False
        self.stopped = False

    def start(
        self,
        host: str,
        port: int,
        on_connected: Callable[[], None],
        on_error: Callable[[BaseException], None],
    ) -> None:
        self.started = True
        if self.connect_error is not None:
            raise self.connect_error
        assert self.loop is not None
        if self.refuse:
            self.loop.call_soon_threadsafe(on_error, TrackerConnectionError("not authorised"))
        else:
            self.loop.call_soon_threadsafe(on_connected)

    def publish(self, topic: str, payload: bytes) -> None:
        if self.fail_publish_after is not None and len(self.published) >= self.fail_publish_after:
            raise TrackerPublishError("The client is not currently connected.", topic=topic, rc=4)
        self.published.append((topic, payload))

    def stop(self) -> None:
        self.stopped = True
