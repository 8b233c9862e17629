"""Terminal adapter: banner, live status line and keyboard input.

Key capture puts the terminal in cbreak mode (no line buffering, no echo,
signals kept) and reads stdin through ``loop.add_reader``. The position
prompt temporarily restores the original terminal mode to read one line.
"""

from __future__ import annotations

import asyncio
import os
import sys
import termios
import tty
from collections.abc import Callable
from typing import Any, Protocol, TextIO

from trackersim.config import SimulatorConfig
from trackersim.state import DeviceState

_RULE = "=" * 60


class Console(Protocol):
    def banner(self, config: SimulatorConfig, topic: str) -> None: ...

    def render_status(self, state: DeviceState) -> None: ...

    def echo(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def start_keys(self, on_key: Callable[[str], Any]) -> None: ...

    def stop_keys(self) -> None: ...

    def suspend_keys(self) -> None: ...

    async def prompt(self, text: str) -> str | None: ...


def format_status(state: DeviceState) -> str:
    return " | ".join(
        [
            f"Status: {'LOCKED' if state.locked else 'UNLOCKED'}",
            "MOVING" if state.moving else "STOPPED",
            f"Speed: {state.speed:.1f} km/h",
            f"Pos: {state.latitude:.6f}, {state.longitude:.6f}",
        ]
    )


class TerminalConsole:
    """Console bound to the process stdin/stdout."""

    def __init__(self, *, stdin: TextIO | None = None, stdout: TextIO | None = None) -> None:
        self._stdin = stdin or sys.stdin
        self._stdout = stdout or sys.stdout
        self._fd = self._stdin.fileno()
        self._is_tty = os.isatty(self._fd)
        self._saved_mode: list[Any] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._on_key: Callable[[str], Any] | None = None
        self._reading = False
        self._suspended = False
        self._pending = ""

    def _write(self, text: str) -> None:
        self._stdout.write(text)
        self._stdout.flush()

    def banner(self, config: SimulatorConfig, topic: str) -> None:
        lines = [
            f"Connected to MQTT broker {config.broker_host}:{config.broker_port}",
            f"Publishing to topic: {topic}",
            f"Tracker ID: {config.tracker_id}",
            f"Update interval: {config.update_interval_ms}ms",
            f"Starting position: {config.start_latitude}, {config.start_longitude}",
            "",
            _RULE,
            "Commands:",
            "  l - Toggle lock/unlock",
            "  m - Toggle movement (simulates riding)",
            "  p - Set position (lat,lng)",
            "  q - Quit",
            _RULE,
            "",
        ]
        self._write("\n".join(lines) + "\n")

    def render_status(self, state: DeviceState) -> None:
        # Overwrite the same line.
        self._write("\r" + format_status(state))

    def echo(self, message: str) -> None:
        self._write(f"\n{message}\n")

    def error(self, message: str) -> None:
        print(message, file=sys.stderr, flush=True)

    # ------------------------------------------------------------------
    # Key capture
    # ------------------------------------------------------------------

    def start_keys(self, on_key: Callable[[str], Any]) -> None:
        self._loop = asyncio.get_running_loop()
        self._on_key = on_key
        self._enter_cbreak()
        self._add_reader(self._on_readable)

    def stop_keys(self) -> None:
        self._remove_reader()
        self._restore_mode()
        self._on_key = None
        self._suspended = False
        self._pending = ""

    def _enter_cbreak(self) -> None:
        if not self._is_tty:
            return
        if self._saved_mode is None:
            self._saved_mode = termios.tcgetattr(self._fd)
        tty.setcbreak(self._fd, termios.TCSANOW)

    def _restore_mode(self) -> None:
        if self._saved_mode is not None:
            termios.tcsetattr(self._fd, termios.TCSADRAIN, self._saved_mode)

    def _add_reader(self, callback: Callable[[], None]) -> None:
        if self._loop is None or self._reading:
            return
        self._loop.add_reader(self._fd, callback)
        self._reading = True

    def _remove_reader(self) -> None:
        if self._loop is None or not self._reading:
            return
        self._loop.remove_reader(self._fd)
        self._reading = False

    def _on_readable(self) -> None:
        data = os.read(self._fd, 64)
        if not data:
            # EOF on stdin: nothing more to dispatch.
            self._remove_reader()
            return
        self._dispatch(data.decode("utf-8", errors="ignore"))

    def _dispatch(self, text: str) -> None:
        for index, char in enumerate(text):
            on_key = self._on_key
            if self._suspended or on_key is None:
                # Read ahead of a prompt: keep it for the prompt and later keys.
                self._pending += text[index:]
                return
            on_key(char)

    def _flush_pending(self) -> None:
        text, self._pending = self._pending, ""
        if text:
            self._dispatch(text)

    def suspend_keys(self) -> None:
        """Stop dispatching keys until the next :meth:`prompt` completes."""
        self._suspended = True
        self._remove_reader()

    async def prompt(self, text: str) -> str | None:
        """Read one line in cooked mode, then resume key capture.

        Input already read ahead of the prompt is consumed first; anything
        after the line is replayed as keys once capture resumes.
        """
        loop = self._loop or asyncio.get_running_loop()
        self._loop = loop
        resume = self._on_key is not None
        self._suspended = True
        self._remove_reader()
        self._restore_mode()
        self._write(f"\n{text}")

        answer: asyncio.Future[str | None] = loop.create_future()
        buffered, self._pending = self._pending, ""

        def take_line(chunk: str) -> bool:
            nonlocal buffered
            buffered += chunk
            line, newline, rest = buffered.partition("\n")
            if not newline:
                return False
            self._pending = rest + self._pending
            answer.set_result(line)
            return True

        def on_line() -> None:
            data = os.read(self._fd, 1024)
            if answer.done():
                return
            if not data:
                answer.set_result(buffered or None)
                return
            take_line(data.decode("utf-8", errors="ignore"))

        watching = not take_line("")
        if watching:
            loop.add_reader(self._fd, on_line)
        try:
            line = await answer
        finally:
            if watching:
                loop.remove_reader(self._fd)
            self._suspended = False
            if resume:
                self._enter_cbreak()
                self._add_reader(self._on_readable)
                if self._pending:
                    loop.call_soon(self._flush_pending)
        return None if line is None else line.rstrip("\r")
