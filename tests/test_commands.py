from __future__ import annotations

import asyncio

import pytest

from conftest import FakeConsole
from trackersim.commands import CommandDispatcher
from trackersim.config import SimulatorConfig
from trackersim.state import StateStore


def _dispatcher(console: FakeConsole) -> tuple[CommandDispatcher, StateStore, list[bool]]:
    store = StateStore.from_config(SimulatorConfig())
    quits: list[bool] = []
    dispatcher = CommandDispatcher(store, console, on_quit=lambda: quits.append(True))
    return dispatcher, store, quits


def test_lock_key_toggles_and_echoes() -> None:
    console = FakeConsole()
    dispatcher, store, _ = _dispatcher(console)

    assert dispatcher.handle_key("l") is True
    assert store.state.locked is True
    assert dispatcher.handle_key("L") is True
    assert store.state.locked is False
    assert console.echoes == ["LOCKED", "UNLOCKED"]


def test_move_key_toggles_speed() -> None:
    console = FakeConsole()
    dispatcher, store, _ = _dispatcher(console)

    dispatcher.handle_key("m")
    assert store.state.moving is True
    assert store.state.speed == 15.0

    dispatcher.handle_key("m")
    assert store.state.moving is False
    assert store.state.speed == 0.0
    assert console.echoes == ["Started moving at 15 km/h", "Stopped"]


@pytest.mark.parametrize("key", ["q", "Q", "\x03"])
def test_quit_keys_invoke_quit_callback(key: str) -> None:
    console = FakeConsole()
    dispatcher, _, quits = _dispatcher(console)

    assert dispatcher.handle_key(key) is True
    assert quits == [True]
    assert console.echoes[-1].endswith("Shutting down...")


@pytest.mark.parametrize("key", ["x", " ", "\n", "1"])
def test_unmapped_keys_are_ignored(key: str) -> None:
    console = FakeConsole()
    dispatcher, store, quits = _dispatcher(console)

    assert dispatcher.handle_key(key) is False
    assert store.state.locked is False
    assert quits == []
    assert console.events == []


@pytest.mark.asyncio
async def test_prompt_position_applies_valid_input() -> None:
    console = FakeConsole(answers=["10.5, 20.25"])
    dispatcher, store, _ = _dispatcher(console)

    assert await dispatcher.prompt_position() is True
    assert (store.state.latitude, store.state.longitude) == (10.5, 20.25)
    assert console.echoes == ["Position set to 10.5, 20.25"]


@pytest.mark.asyncio
async def test_prompt_position_ignores_invalid_input() -> None:
    console = FakeConsole(answers=["abc,20"])
    dispatcher, store, _ = _dispatcher(console)
    before = (store.state.latitude, store.state.longitude)

    assert await dispatcher.prompt_position() is False
    assert (store.state.latitude, store.state.longitude) == before
    assert console.echoes[0].startswith("Ignored invalid position")


@pytest.mark.asyncio
async def test_prompt_position_handles_eof() -> None:
    console = FakeConsole(answers=[None])
    dispatcher, store, _ = _dispatcher(console)

    assert await dispatcher.prompt_position() is False
    assert console.echoes == []


@pytest.mark.asyncio
async def test_keys_are_ignored_while_prompt_is_active() -> None:
    console = FakeConsole(answers=["1,2"])
    console.prompt_gate = asyncio.Event()
    dispatcher, store, quits = _dispatcher(console)

    assert dispatcher.handle_key("p") is True
    await asyncio.sleep(0)
    assert dispatcher.prompt_active is True

    assert dispatcher.handle_key("l") is False
    assert dispatcher.handle_key("q") is False
    assert store.state.locked is False
    assert quits == []

    console.prompt_gate.set()
    for _ in range(10):
        await asyncio.sleep(0)
        if not dispatcher.prompt_active:
            break
    assert dispatcher.prompt_active is False
    assert (store.state.latitude, store.state.longitude) == (1.0, 2.0)

    await dispatcher.aclose()


@pytest.mark.asyncio
async def test_aclose_cancels_pending_prompt() -> None:
    console = FakeConsole()
    console.prompt_gate = asyncio.Event()
    dispatcher, _, _ = _dispatcher(console)

    dispatcher.handle_key("p")
    await asyncio.sleep(0)
    await dispatcher.aclose()

    assert dispatcher.prompt_active is False
