"""Viewer reducer and state machine."""

import pytest

from conftest import make_reels
from reel_store import ReelStore
from viewer_state import (
    Close, Direction, Navigate, Open, ToggleCaption, ToggleMute,
    ViewerState, ViewerStateMachine, transition,
)

LONG = "x" * 200
SHORT = "y" * 50


@pytest.fixture
def reels():
    return make_reels(3, captions={0: LONG, 1: SHORT})


@pytest.fixture
def machine():
    s = ReelStore()
    s.replace(make_reels(3, captions={0: LONG, 1: SHORT}))
    return ViewerStateMachine(s)


class TestTransition:
    def test_initial_state_is_closed_and_muted(self):
        assert ViewerState() == ViewerState(False, 0, True, False)

    def test_open_valid_index(self, reels):
        s = transition(ViewerState(), Open(1), reels)
        assert s == ViewerState(True, 1, True, False)

    @pytest.mark.parametrize("index", [-1, 3, 100])
    def test_open_out_of_range_is_noop(self, reels, index):
        s = ViewerState()
        assert transition(s, Open(index), reels) is s

    def test_open_on_empty_collection_is_noop(self):
        s = ViewerState()
        assert transition(s, Open(0), []) is s

    def test_open_keeps_previous_mute(self, reels):
        s = transition(ViewerState(muted=False), Open(2), reels)
        assert s.muted is False

    def test_close_when_closed_is_noop(self, reels):
        s = ViewerState()
        assert transition(s, Close(), reels) is s

    @pytest.mark.parametrize("event", [Navigate(Direction.NEXT), ToggleMute(), ToggleCaption()])
    def test_operations_ignored_while_closed(self, reels, event):
        s = ViewerState()
        assert transition(s, event, reels) is s

    def test_real_move_resets_caption(self, reels):
        s = ViewerState(True, 0, True, True)
        assert transition(s, Navigate(Direction.NEXT), reels) == ViewerState(True, 1, True, False)

    def test_boundary_noop_keeps_caption(self, reels):
        s = ViewerState(True, 0, True, True)
        assert transition(s, Navigate(Direction.PREV), reels) is s

    def test_navigate_does_not_touch_mute(self, reels):
        s = ViewerState(True, 1, False, False)
        assert transition(s, Navigate(Direction.PREV), reels).muted is False

    def test_toggle_caption_long(self, reels):
        s = transition(ViewerState(True, 0), ToggleCaption(), reels)
        assert s.caption_expanded is True
        assert s.current_index == 0

    def test_toggle_caption_short_is_noop(self, reels):
        s = ViewerState(True, 1)
        assert transition(s, ToggleCaption(), reels) is s

    def test_caption_exactly_at_threshold_is_not_expandable(self):
        reels = make_reels(1, captions={0: "z" * 150})
        s = ViewerState(True, 0)
        assert transition(s, ToggleCaption(), reels) is s


class TestStateMachine:
    def test_open_close_restores_closed_state(self, machine):
        before = machine.state
        machine.open(2)
        machine.close()
        assert machine.state == before

    def test_mute_survives_close_and_reopen(self, machine):
        machine.open(0)
        machine.toggle_mute()
        machine.close()
        assert machine.state == ViewerState(muted=False)
        machine.open(1)
        assert machine.state.muted is False

    def test_next_repeated_clamps_at_end(self, machine):
        machine.open(0)
        for _ in range(machine.store.count()):
            machine.navigate("next")
        assert machine.state.current_index == 2

    def test_prev_at_zero_is_noop(self, machine):
        machine.open(0)
        before = machine.state
        machine.navigate(Direction.PREV)
        assert machine.state == before

    def test_toggle_mute_twice(self, machine):
        machine.open(0)
        machine.toggle_mute()
        machine.toggle_mute()
        assert machine.state.muted is True

    def test_observers_only_see_real_changes(self, machine):
        seen = []
        machine.add_observer(lambda old, new: seen.append((old, new)))
        machine.open(2)
        machine.navigate("next")          # boundary
        machine.toggle_caption()          # short caption
        machine.close()
        machine.close()
        assert [new.is_open for _, new in seen] == [True, False]

    def test_post_close_operations_are_noops(self, machine):
        machine.open(1)
        machine.close()
        machine.navigate("next")
        machine.toggle_mute()
        machine.toggle_caption()
        assert machine.state == ViewerState()

    def test_bad_direction_raises(self, machine):
        machine.open(0)
        with pytest.raises(ValueError):
            machine.navigate("sideways")

    def test_current_reel(self, machine):
        assert machine.current_reel() is None
        machine.open(1)
        assert machine.current_reel().id == "r1"


class TestCollectionReplacement:
    def test_shorter_collection_closes_viewer(self, machine):
        machine.open(2)
        machine.store.replace(make_reels(2))
        assert not machine.is_open

    def test_empty_collection_closes_viewer(self, machine):
        machine.open(0)
        machine.store.replace([])
        assert not machine.is_open

    def test_long_enough_collection_keeps_viewer(self, machine):
        machine.open(1)
        machine.store.replace(make_reels(5))
        assert machine.state.is_open and machine.state.current_index == 1

    def test_failed_fetch_closes_viewer(self, machine):
        machine.open(0)
        machine.store.fail("boom")
        assert not machine.is_open
