from __future__ import annotations

import pytest

from trackersim.config import SimulatorConfig
from trackersim.state import DeviceState, MotionState, StateStore


def _store() -> StateStore:
    return StateStore.from_config(SimulatorConfig())


def test_initial_state_from_config() -> None:
    state = StateStore.from_config(SimulatorConfig(start_latitude=1.5, start_longitude=-2.5, start_heading=450)).state

    assert (state.latitude, state.longitude) == (1.5, -2.5)
    assert state.altitude == 550.0
    assert state.speed == 0.0
    assert state.heading == 90.0
    assert state.locked is False
    assert state.motion is MotionState.STOPPED


def test_toggle_locked_flips_and_returns_new_value() -> None:
    store = _store()

    assert store.toggle_locked() is True
    assert store.state.locked is True
    assert store.toggle_locked() is False
    assert store.state.locked is False


def test_toggle_moving_sets_exact_speeds() -> None:
    store = _store()

    assert store.toggle_moving() is True
    assert store.state.speed == 15.0
    assert store.state.motion is MotionState.MOVING

    store.state.speed = 13.87  # drifted by jitter
    assert store.toggle_moving() is False
    assert store.state.speed == 0.0
    assert store.state.motion is MotionState.STOPPED


def test_set_position_accepts_spaced_pair() -> None:
    store = _store()

    assert store.set_position("10.5, 20.25") == (10.5, 20.25)
    assert (store.state.latitude, store.state.longitude) == (10.5, 20.25)


@pytest.mark.parametrize(
    "text",
    ["abc,20", "10", "1,2,3", "", ",", "10,", "nan,1", "inf,1", "10;20"],
)
def test_set_position_rejects_malformed_input(text: str) -> None:
    store = _store()
    before = (store.state.latitude, store.state.longitude)

    assert store.set_position(text) is None
    assert (store.state.latitude, store.state.longitude) == before


def test_snapshot_is_rounded_copy() -> None:
    store = StateStore(DeviceState(latitude=1.23456789, longitude=-9.87654321, altitude=550.04, speed=14.96))
    store.state.locked = True

    snapshot = store.snapshot()

    assert snapshot.latitude == 1.234568
    assert snapshot.longitude == -9.876543
    assert snapshot.altitude == 550.0
    assert snapshot.speed == 15.0
    assert snapshot.locked is True

    store.state.latitude = 0.0
    assert snapshot.latitude == 1.234568
