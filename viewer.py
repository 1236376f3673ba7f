"""
viewer.py – wires the viewer core to the rest of the app

ViewerController owns the state machine, the playback synchronizer, the
input router and the grid scroll lock, and exposes the presentation-facing
calls used by grid clicks, modal buttons and the web remote alike.
"""

from __future__ import annotations

import logging

from events import EventManager, InputRouter
from playback_sync import PlaybackSynchronizer
from reel_store import ReelStore
from viewer_state import Direction, ViewerState, ViewerStateMachine

log = logging.getLogger(__name__)


class ScrollLock:
    """Grid scrolling is held while the viewer covers it."""

    def __init__(self) -> None:
        self.locked = False

    def acquire(self) -> None:
        self.locked = True

    def release(self) -> None:
        self.locked = False


class ViewerController:
    def __init__(self, store: ReelStore, events: EventManager,
                 player_factory=None) -> None:
        self.store   = store
        self.events  = events
        self.machine = ViewerStateMachine(store)
        # observer order: media first, then input, then the scroll lock
        self.sync    = PlaybackSynchronizer(self.machine, player_factory)
        self.router  = InputRouter(self.machine, self.sync, events)
        self.scroll_lock = ScrollLock()
        self.machine.add_observer(self._on_state_change)
        store.subscribe(self._on_reels_replaced)

    def _on_state_change(self, old: ViewerState, new: ViewerState) -> None:
        if new.is_open and not old.is_open:
            self.scroll_lock.acquire()
            log.info("viewer opened at %d", new.current_index)
        elif old.is_open and not new.is_open:
            self.scroll_lock.release()
            log.info("viewer closed")

    def _on_reels_replaced(self, reels) -> None:
        # the machine has already closed if the index fell off the end
        if self.machine.is_open:
            self.sync.reload()

    # ── presentation-facing events ─────────────────────────────────────────
    @property
    def state(self) -> ViewerState:
        return self.machine.state

    def on_open(self, index: int) -> None:
        self.machine.open(index)

    def on_close(self) -> None:
        self.machine.close()

    def on_navigate(self, direction: Direction | str) -> None:
        self.machine.navigate(direction)

    def on_toggle_mute(self) -> None:
        self.machine.toggle_mute()

    def on_toggle_caption(self) -> None:
        self.machine.toggle_caption()

    def on_toggle_play(self) -> None:
        if self.machine.is_open:
            self.sync.toggle_play()

    def shutdown(self) -> None:
        self.machine.close()
        self.sync.release()
