"""Keyboard command dispatch.

Maps single keystrokes onto :class:`~trackersim.state.StateStore`
mutations. Everything except the position prompt runs synchronously in
the key-reader callback.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from enum import StrEnum

from trackersim._constants import DEFAULT_RIDING_SPEED
from trackersim.console import Console
from trackersim.state import StateStore

_logger = logging.getLogger(__name__)

_CTRL_C = "\x03"


class Command(StrEnum):
    TOGGLE_LOCK = "l"
    TOGGLE_MOVE = "m"
    SET_POSITION = "p"
    QUIT = "q"


class CommandDispatcher:
    def __init__(
        self,
        store: StateStore,
        console: Console,
        *,
        on_quit: Callable[[], None],
    ) -> None:
        self._store = store
        self._console = console
        self._on_quit = on_quit
        self._prompt_task: asyncio.Task[bool] | None = None

    @property
    def prompt_active(self) -> bool:
        task = self._prompt_task
        return task is not None and not task.done()

    def handle_key(self, key: str) -> bool:
        """Dispatch one keystroke. Returns ``True`` if it mapped to a command."""
        if key == _CTRL_C:
            key = Command.QUIT
        try:
            command = Command(key.lower())
        except ValueError:
            return False
        if self.prompt_active:
            _logger.debug("Ignoring key %r while position prompt is active", key)
            return False

        _logger.debug("Dispatching command %s", command.name)
        if command is Command.TOGGLE_LOCK:
            locked = self._store.toggle_locked()
            self._console.echo("LOCKED" if locked else "UNLOCKED")
        elif command is Command.TOGGLE_MOVE:
            moving = self._store.toggle_moving()
            self._console.echo(f"Started moving at {DEFAULT_RIDING_SPEED:g} km/h" if moving else "Stopped")
        elif command is Command.SET_POSITION:
            self._console.suspend_keys()
            self._prompt_task = asyncio.get_running_loop().create_task(self.prompt_position())
        elif command is Command.QUIT:
            self._console.echo("\nShutting down...")
            self._on_quit()
        return True

    async def prompt_position(self) -> bool:
        """Ask for a ``lat,lng`` line and apply it.

        Malformed input leaves the state unchanged.
        """
        answer = await self._console.prompt("Enter position (lat,lng): ")
        if answer is None:
            return False
        applied = self._store.set_position(answer)
        if applied is None:
            self._console.echo(f"Ignored invalid position: {answer.strip()!r}")
            return False
        latitude, longitude = applied
        self._console.echo(f"Position set to {latitude}, {longitude}")
        return True

    async def aclose(self) -> None:
        """Cancel a pending position prompt and wait for it to unwind."""
        task = self._prompt_task
        self._prompt_task = None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
