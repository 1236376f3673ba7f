"""
reel_store.py

In-memory holder for the fetched reels and the state of the request that
produced them.

Public API – `begin()`, `replace()`, `fail()`, `count()`, `at()`,
`subscribe()`, `.reels`, `.status`, `.error`, `.has_searched` – is all the
rest of the app needs; nothing here survives a restart.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional, Sequence, Tuple

log = logging.getLogger(__name__)

# ── Request status ─────────────────────────────────────────────────────────
IDLE    = "idle"
LOADING = "loading"
LOADED  = "loaded"
FAILED  = "failed"


# ── Field helpers ───────────────────────────────────────────────────────────
def _count(value: Any) -> Optional[int]:
    """Engagement counts are optional; anything unusable becomes None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        n = int(value)
    except (TypeError, ValueError):
        return None
    return n if n >= 0 else None


def _timestamp(value: Any) -> Optional[datetime]:
    if value in (None, ""):
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None
    return None


# ── Data structures ─────────────────────────────────────────────────────────
@dataclass(frozen=True)
class Reel:
    id: str
    thumbnail_url: str = ""
    video_url: str = ""
    likes: Optional[int] = None
    comments: Optional[int] = None
    views: Optional[int] = None
    caption: str = ""
    posted_at: Optional[datetime] = None

    @classmethod
    def from_json(cls, data: dict, position: int = 0) -> "Reel":
        """Build a reel from one backend record, tolerating missing fields."""
        rid = data.get("id")
        return cls(
            id=str(rid) if rid not in (None, "") else str(position),
            thumbnail_url=data.get("thumbnail_url") or "",
            video_url=data.get("video_url") or "",
            likes=_count(data.get("likes")),
            comments=_count(data.get("comments")),
            views=_count(data.get("views")),
            caption=data.get("caption") or "",
            posted_at=_timestamp(data.get("posted_at")),
        )


def parse_reels(payload: Any) -> List[Reel]:
    """Return the reels of a `/scrape` response body (empty if absent)."""
    if not isinstance(payload, dict):
        return []
    records = payload.get("reels") or []
    if not isinstance(records, list):
        return []
    return [Reel.from_json(r, i) for i, r in enumerate(records) if isinstance(r, dict)]


# ── Store ───────────────────────────────────────────────────────────────────
class ReelStore:
    """Ordered reel collection plus request status for one session."""

    def __init__(self) -> None:
        self._reels: Tuple[Reel, ...] = ()
        self._subscribers: List[Callable[[Tuple[Reel, ...]], None]] = []
        self.status   = IDLE
        self.error: Optional[str] = None
        self.username = ""
        self.limit    = 0
        self.has_searched = False

    # ---------------------------------------------------------- accessors
    @property
    def reels(self) -> Tuple[Reel, ...]:
        return self._reels

    def count(self) -> int:
        return len(self._reels)

    def at(self, index: int) -> Reel:
        return self._reels[index]

    @property
    def loading(self) -> bool:
        return self.status == LOADING

    # ---------------------------------------------------------- subscribers
    def subscribe(self, fn: Callable[[Tuple[Reel, ...]], None]) -> None:
        """`fn(reels)` runs after every replace(), in subscription order."""
        self._subscribers.append(fn)

    # ---------------------------------------------------------- request flow
    def begin(self, username: str, limit: int) -> None:
        self.status   = LOADING
        self.error    = None
        self.username = username
        self.limit    = limit
        self.has_searched = True

    def replace(self, reels: Sequence[Reel]) -> None:
        """Swap in a whole new collection; no incremental append."""
        self._reels = tuple(reels)
        self.status = LOADED
        self.error  = None
        log.info("store now holds %d reels for @%s", len(self._reels), self.username)
        for fn in list(self._subscribers):
            fn(self._reels)

    def fail(self, message: str) -> None:
        self.status = FAILED
        self.error  = message
        self._reels = ()
        log.warning("fetch for @%s failed: %s", self.username, message)
        for fn in list(self._subscribers):
            fn(self._reels)
