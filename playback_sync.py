"""
playback_sync.py

Keeps the one video player in step with the viewer state.

The synchronizer is the only owner of the player.  It reacts to
`(old, new)` viewer states:

* viewer opened, or index changed  → open the reel from the start, apply mute
* mute flag changed                → apply mute
* viewer closed                    → stop and release the player

Media failures are recorded in `.failure` for the overlay to show; they
never reach the state machine.
"""

from __future__ import annotations

import functools
import logging
from typing import Callable, Optional

from viewer_state import ViewerState, ViewerStateMachine

log = logging.getLogger(__name__)


class PlaybackError(RuntimeError):
    """A reel's video could not be opened or played."""


def _gst_player():
    try:
        from video_player import VideoPlayer      # GStreamer only when needed
    except (ImportError, ValueError) as e:
        raise PlaybackError(f"video backend unavailable: {e}") from e
    return VideoPlayer()


class PlaybackSynchronizer:
    def __init__(self, machine: ViewerStateMachine,
                 player_factory: Optional[Callable] = None) -> None:
        self.machine  = machine
        self._factory = player_factory or _gst_player
        self.player   = None
        self.active   = False       # player holds a live source
        self.failure: Optional[str] = None
        self._generation = 0
        machine.add_observer(self._on_state_change)

    # ── observer ───────────────────────────────────────────────────────────
    def _on_state_change(self, old: ViewerState, new: ViewerState) -> None:
        if not new.is_open:
            if old.is_open:
                self.release()
            return
        if not old.is_open or old.current_index != new.current_index:
            self._start(new)
        elif old.muted != new.muted:
            self._apply_mute(new.muted)

    def reload(self) -> None:
        """Restart the current reel, e.g. after the collection was swapped."""
        if self.machine.is_open:
            self._start(self.machine.state)

    # ── player control ─────────────────────────────────────────────────────
    def _start(self, state: ViewerState) -> None:
        self.release()
        reel = self.machine.store.at(state.current_index)
        try:
            if self.player is None:
                self.player = self._factory()
            on_error = functools.partial(self._on_player_error, self._generation)
            self.active = True
            self.player.open(reel.video_url, on_error)
            self.player.set_muted(state.muted)
        except PlaybackError as e:
            log.warning("reel %s failed to start: %s", reel.id, e)
            self._drop()
            self.failure = str(e) or "Video unavailable"
            return
        log.info("playing reel %s (%d)", reel.id, state.current_index)

    def _apply_mute(self, muted: bool) -> None:
        if self.active:
            self.player.set_muted(muted)

    def toggle_play(self) -> None:
        """Flip play/pause on the live player; viewer state is untouched."""
        if self.active and not self.failure:
            self.player.toggle_pause()

    def release(self) -> None:
        """Stop the current source and forget any failure it reported."""
        # error callbacks still in flight for the old source become stale
        self._generation += 1
        self.failure = None
        self._drop()

    def _drop(self) -> None:
        if self.active:
            self.player.close()
            self.active = False

    # ── presentation helpers ───────────────────────────────────────────────
    @property
    def paused(self) -> bool:
        return bool(self.active and self.player.paused)

    def frame(self):
        """Latest decoded frame, or None (nothing playing, loading or failed)."""
        if self.failure:
            self._drop()
            return None
        if not self.active:
            return None
        return self.player.decode_frame()

    @property
    def sar(self) -> float:
        return self.player.sar if self.player is not None else 1.0

    # ── out-of-band errors (bus thread) ────────────────────────────────────
    def _on_player_error(self, generation: int, message: str) -> None:
        if generation != self._generation:
            return
        self.failure = message or "Video unavailable"
