"""
viewer_state.py – the full-screen viewer as a value plus a reducer

`transition(state, event, reels)` is pure: it never touches media, input
or the store.  `ViewerStateMachine` keeps the current value, feeds it
through `transition()` and tells observers about every real change.

Closed ──Open(i)──▶ Open(i, muted, caption_expanded=False)
  ▲                   │ Navigate / ToggleMute / ToggleCaption
  └──────Close────────┘
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, List, Sequence, Union

import config
from formatting import caption_expandable
from reel_store import Reel, ReelStore

log = logging.getLogger(__name__)


class Direction(str, Enum):
    PREV = "prev"
    NEXT = "next"


@dataclass(frozen=True)
class ViewerState:
    is_open: bool = False
    current_index: int = 0              # meaningful only while open
    muted: bool = config.START_MUTED    # sticky across navigation and close
    caption_expanded: bool = False      # per reel

    def closed(self) -> "ViewerState":
        return ViewerState(muted=self.muted)


# ── events ─────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class Open:
    index: int


@dataclass(frozen=True)
class Close:
    pass


@dataclass(frozen=True)
class Navigate:
    direction: Direction


@dataclass(frozen=True)
class ToggleMute:
    pass


@dataclass(frozen=True)
class ToggleCaption:
    pass


ViewerEvent = Union[Open, Close, Navigate, ToggleMute, ToggleCaption]


# ── reducer ────────────────────────────────────────────────────────────────
def transition(state: ViewerState, event: ViewerEvent,
               reels: Sequence[Reel]) -> ViewerState:
    """Return the state after *event*; invalid requests return *state* itself."""
    n = len(reels)

    if isinstance(event, Open):
        if not 0 <= event.index < n:
            return state
        return ViewerState(True, event.index, state.muted, False)

    if not state.is_open:
        return state

    if isinstance(event, Close):
        return state.closed()

    if isinstance(event, Navigate):
        step = 1 if Direction(event.direction) is Direction.NEXT else -1
        dest = state.current_index + step
        if not 0 <= dest < n:
            return state                       # clamp, no wrap
        return replace(state, current_index=dest, caption_expanded=False)

    if isinstance(event, ToggleMute):
        return replace(state, muted=not state.muted)

    if isinstance(event, ToggleCaption):
        if state.current_index >= n:
            return state
        if not caption_expandable(reels[state.current_index].caption):
            return state
        return replace(state, caption_expanded=not state.caption_expanded)

    raise TypeError(f"unknown viewer event {event!r}")


Observer = Callable[[ViewerState, ViewerState], None]


# ── state machine ──────────────────────────────────────────────────────────
class ViewerStateMachine:
    """Process-wide viewer; one instance per app."""

    def __init__(self, store: ReelStore, state: ViewerState | None = None):
        self.store = store
        self.state = state or ViewerState()
        self._observers: List[Observer] = []
        store.subscribe(self._on_reels_replaced)

    def add_observer(self, fn: Observer) -> None:
        """`fn(old, new)` runs synchronously after each change, in order added."""
        self._observers.append(fn)

    # ── operations ─────────────────────────────────────────────────────────
    def apply(self, event: ViewerEvent) -> ViewerState:
        old = self.state
        new = transition(old, event, self.store.reels)
        if new != old:
            self.state = new
            log.debug("%s: %s → %s", type(event).__name__, old, new)
            for fn in list(self._observers):
                fn(old, new)
        return self.state

    def open(self, index: int) -> ViewerState:
        return self.apply(Open(index))

    def close(self) -> ViewerState:
        return self.apply(Close())

    def navigate(self, direction: Direction | str) -> ViewerState:
        return self.apply(Navigate(Direction(direction)))

    def toggle_mute(self) -> ViewerState:
        return self.apply(ToggleMute())

    def toggle_caption(self) -> ViewerState:
        return self.apply(ToggleCaption())

    # ── helpers ────────────────────────────────────────────────────────────
    @property
    def is_open(self) -> bool:
        return self.state.is_open

    def current_reel(self) -> Reel | None:
        if not self.state.is_open:
            return None
        return self.store.at(self.state.current_index)

    def _on_reels_replaced(self, reels: Sequence[Reel]) -> None:
        if self.state.is_open and self.state.current_index >= len(reels):
            log.info("collection replaced under open viewer; closing")
            self.close()
