"""Keyboard, wheel and explicit-control routing."""

import pygame
import pytest

from viewer_state import ViewerState


def key(k):
    return pygame.event.Event(pygame.KEYDOWN, key=k, mod=0, unicode="")


def wheel(y):
    return pygame.event.Event(pygame.MOUSEWHEEL, x=0, y=y, flipped=False)


def test_keyboard_walkthrough(controller, events):
    controller.on_open(1)
    assert controller.state == ViewerState(True, 1, True, False)

    assert events.handle(key(pygame.K_DOWN)) is True
    assert controller.state == ViewerState(True, 2, True, False)

    events.handle(key(pygame.K_DOWN))
    assert controller.state == ViewerState(True, 2, True, False)

    events.handle(key(pygame.K_m))
    assert controller.state == ViewerState(True, 2, False, False)

    events.handle(key(pygame.K_ESCAPE))
    assert not controller.state.is_open


def test_arrow_up_moves_back(controller, events):
    controller.on_open(2)
    events.handle(key(pygame.K_UP))
    assert controller.state.current_index == 1


def test_unbound_key_is_not_consumed(controller, events):
    controller.on_open(0)
    assert events.handle(key(pygame.K_a)) is False
    assert controller.state == ViewerState(True, 0, True, False)


def test_space_toggles_playback_without_state_change(controller, events, players):
    controller.on_open(0)
    before = controller.state
    assert events.handle(key(pygame.K_SPACE)) is True
    assert players[0].paused is True
    events.handle(key(pygame.K_SPACE))
    assert players[0].paused is False
    assert controller.state == before


@pytest.mark.parametrize("y, expected", [(-1, 2), (1, 0), (-3, 2)])
def test_wheel_moves_one_step(controller, events, y, expected):
    controller.on_open(1)
    assert events.handle(wheel(y)) is True
    assert controller.state.current_index == expected


def test_wheel_ticks_apply_in_order(controller, events):
    controller.on_open(0)
    for y in (-1, -1, 1):
        events.handle(wheel(y))
    assert controller.state.current_index == 1


def test_inert_while_closed(controller, events):
    assert events.listener_count() == 0
    assert events.handle(key(pygame.K_DOWN)) is False
    assert controller.router.dispatch(key(pygame.K_m)) is False
    assert controller.state == ViewerState()


def test_listener_attached_once_per_session(controller, events):
    calls = []

    for _ in range(3):
        controller.on_open(0)
        controller.on_navigate("next")     # state changes while open
        assert events.listener_count() == 1
        controller.on_close()
        assert events.listener_count() == 0

    controller.on_open(0)
    events.add_listener(lambda e: calls.append(e) or False)
    events.handle(key(pygame.K_DOWN))
    # our spy sits on top and runs once; the router underneath moved once
    assert len(calls) == 1
    assert controller.state.current_index == 1
    assert controller.router.attached


def test_listener_detached_when_collection_replaced(controller, events, store):
    controller.on_open(2)
    store.replace([])
    assert events.listener_count() == 0
    assert not controller.router.attached


@pytest.mark.parametrize("action, expected", [
    ({"type": "navigate", "direction": "next"}, ViewerState(True, 2, True, False)),
    ({"type": "navigate", "direction": "prev"}, ViewerState(True, 0, True, False)),
    ({"type": "toggle_mute"}, ViewerState(True, 1, False, False)),
    ({"type": "wheel", "delta_y": 120}, ViewerState(True, 2, True, False)),
    ({"type": "wheel", "delta_y": -4.5}, ViewerState(True, 0, True, False)),
    ({"type": "close"}, ViewerState()),
])
def test_explicit_controls(controller, action, expected):
    controller.on_open(1)
    controller.router.dispatch(action)
    assert controller.state == expected


def test_unknown_direction_is_ignored(controller):
    controller.on_open(1)
    assert controller.router.dispatch({"type": "navigate", "direction": "up"}) is False
    assert controller.state.current_index == 1


def test_quit_is_queued(events):
    assert events.handle(pygame.event.Event(pygame.QUIT)) is True
    assert events.poll() == {"type": "quit"}
    assert events.poll() is None
