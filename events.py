#!/usr/bin/env python3
"""
events.py  – central hub

• Thread-safe action queue so *any* source (fetch thread, web remote,
  thumbnail loader) can inject high-level action dicts.
• Listener registry: a pygame event is offered to registered listeners
  (newest first) before the rest of the app sees it.
• InputRouter maps keyboard, wheel and explicit controls onto the viewer.
"""

from __future__ import annotations

import logging
import queue
from typing import TYPE_CHECKING, Callable, List

import pygame
from pygame.locals import *

from viewer_state import Direction, ViewerState, ViewerStateMachine

if TYPE_CHECKING:
    from playback_sync import PlaybackSynchronizer

log = logging.getLogger(__name__)

Action = dict      # alias for readability
Listener = Callable[[object], bool]


class EventManager:
    def __init__(self) -> None:
        self._fifo: "queue.Queue[Action]" = queue.Queue()
        self._listeners: List[Listener] = []

    # ── SDL / keyboard path ────────────────────────────────────────────
    def handle(self, event) -> bool:
        """Offer one pygame event to the listeners; True if one consumed it."""
        if event.type == QUIT:
            self._fifo.put({"type": "quit"})
            return True
        for fn in reversed(list(self._listeners)):
            if fn(event):
                return True
        return False

    def add_listener(self, fn: Listener) -> None:
        self._listeners.append(fn)

    def remove_listener(self, fn: Listener) -> None:
        self._listeners.remove(fn)

    def listener_count(self) -> int:
        return len(self._listeners)

    # ── external / programmatic path ───────────────────────────────────
    def post(self, action: Action) -> None:
        """
        Any thread may call this to inject an already-formed action dict, e.g.:
            events.post({"type": "navigate", "direction": "next"})
        """
        self._fifo.put(action)

    # ── main-loop consumer ─────────────────────────────────────────────
    def poll(self) -> Action | None:
        """Return next queued action or None (non-blocking)."""
        try:
            return self._fifo.get_nowait()
        except queue.Empty:
            return None


# keys whose default handling is swallowed while the viewer is open
_SUPPRESSED_KEYS = (K_UP, K_DOWN, K_SPACE)


class InputRouter:
    """
    Viewer input, live only while the viewer is open.

    The keyboard/wheel listener is attached when the viewer opens and
    detached when it closes, whatever closed it.
    """

    def __init__(self, machine: ViewerStateMachine,
                 sync: "PlaybackSynchronizer",
                 events: EventManager) -> None:
        self.machine  = machine
        self.sync     = sync
        self.events   = events
        self.attached = False
        machine.add_observer(self._on_state_change)

    # ── registration ───────────────────────────────────────────────────
    def _on_state_change(self, old: ViewerState, new: ViewerState) -> None:
        if new.is_open and not old.is_open:
            self.attach()
        elif old.is_open and not new.is_open:
            self.detach()

    def attach(self) -> None:
        if not self.attached:
            self.events.add_listener(self.dispatch)
            self.attached = True

    def detach(self) -> None:
        if self.attached:
            self.events.remove_listener(self.dispatch)
            self.attached = False

    # ── dispatch ───────────────────────────────────────────────────────
    def dispatch(self, event) -> bool:
        """
        Apply one pygame event or action dict.  Returns True when the
        event's default handling (grid scroll, text entry) must be skipped.
        """
        if not self.machine.is_open:
            return False
        if isinstance(event, dict):
            return self._dispatch_action(event)
        if event.type == KEYDOWN:
            return self._dispatch_key(event.key)
        if event.type == MOUSEWHEEL:
            # pygame y > 0 is wheel-up, i.e. a negative browser deltaY
            return self._dispatch_wheel(-event.y)
        return False

    def _dispatch_key(self, key: int) -> bool:
        if key == K_ESCAPE:
            self.machine.close()
        elif key == K_UP:
            self.machine.navigate(Direction.PREV)
        elif key == K_DOWN:
            self.machine.navigate(Direction.NEXT)
        elif key == K_SPACE:
            self.sync.toggle_play()
        elif key == K_m:                    # same key code for m and M
            self.machine.toggle_mute()
        else:
            return False
        return key in _SUPPRESSED_KEYS

    def _dispatch_wheel(self, delta_y: float) -> bool:
        if delta_y > 0:
            self.machine.navigate(Direction.NEXT)
        elif delta_y < 0:
            self.machine.navigate(Direction.PREV)
        return True

    def _dispatch_action(self, act: Action) -> bool:
        t = act.get("type")
        if t == "navigate":
            try:
                direction = Direction(act.get("direction"))
            except ValueError:
                log.warning("ignoring navigate with direction %r", act.get("direction"))
                return False
            self.machine.navigate(direction)
        elif t == "close":
            self.machine.close()
        elif t == "toggle_mute":
            self.machine.toggle_mute()
        elif t == "toggle_caption":
            self.machine.toggle_caption()
        elif t == "toggle_play":
            self.sync.toggle_play()
        elif t == "wheel":
            return self._dispatch_wheel(float(act.get("delta_y", 0.0)))
        else:
            return False
        return True
