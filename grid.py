"""
grid.py – thumbnail grid layout, hit-testing and scrolling

Thumbnails download on a small worker pool and come back through the
event queue as {"type": "thumbnail", "id": ..., "data": bytes | None};
decoding into surfaces happens on the UI thread.
"""

from __future__ import annotations

import io
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Optional

import httpx
import pygame

import config
from reel_store import Reel, ReelStore

log = logging.getLogger(__name__)

TILE_RATIO = 16 / 9          # height / width


class GridPresenter:
    def __init__(self, store: ReelStore, scroll_lock) -> None:
        self.store  = store
        self.lock   = scroll_lock
        self.offset = 0
        store.subscribe(lambda reels: self.reset())

    def reset(self) -> None:
        self.offset = 0

    # ── layout ─────────────────────────────────────────────────────────────
    def columns(self, width: int) -> int:
        gap = config.GRID_GAP
        return max(2, (width - gap) // (config.GRID_TILE_WIDTH + gap))

    def tile_size(self, width: int) -> tuple[int, int]:
        cols = self.columns(width)
        gap  = config.GRID_GAP
        w    = (width - gap * (cols + 1)) // cols
        return w, int(w * TILE_RATIO)

    def tile_rect(self, index: int, width: int) -> pygame.Rect:
        cols = self.columns(width)
        tw, th = self.tile_size(width)
        row, col = divmod(index, cols)
        gap = config.GRID_GAP
        return pygame.Rect(gap + col * (tw + gap),
                           config.GRID_TOP + gap + row * (th + gap) - self.offset,
                           tw, th)

    def content_height(self, width: int) -> int:
        n = self.store.count()
        if not n:
            return 0
        rows = -(-n // self.columns(width))
        _, th = self.tile_size(width)
        return rows * (th + config.GRID_GAP) + config.GRID_GAP

    def hit_test(self, pos, width: int) -> Optional[int]:
        """Index of the tile under *pos*, or None."""
        if pos[1] < config.GRID_TOP:
            return None
        for i in range(self.store.count()):
            if self.tile_rect(i, width).collidepoint(pos):
                return i
        return None

    # ── scrolling ──────────────────────────────────────────────────────────
    def scroll(self, wheel_y: int, size: tuple[int, int]) -> bool:
        """Scroll by wheel ticks (pygame sign); False while the lock is held."""
        if self.lock.locked:
            return False
        w, h = size
        limit = max(0, self.content_height(w) - (h - config.GRID_TOP))
        self.offset = max(0, min(limit, self.offset - wheel_y * config.GRID_SCROLL_STEP))
        return True


class ThumbnailCache:
    def __init__(self, events) -> None:
        self.events = events
        self._surfaces: Dict[str, Optional[pygame.Surface]] = {}
        self._pool = ThreadPoolExecutor(max_workers=config.THUMBNAIL_WORKERS,
                                        thread_name_prefix="thumb")

    def get(self, reel: Reel) -> Optional[pygame.Surface]:
        """Cached surface, queueing a download on first request."""
        if reel.id not in self._surfaces:
            self._surfaces[reel.id] = None
            if reel.thumbnail_url:
                self._pool.submit(self._download, reel.id, reel.thumbnail_url)
        return self._surfaces[reel.id]

    def clear(self) -> None:
        self._surfaces.clear()

    def _download(self, rid: str, url: str) -> None:
        data = None
        try:
            r = httpx.get(url, timeout=config.FETCH_TIMEOUT, follow_redirects=True)
            r.raise_for_status()
            data = r.content
        except httpx.HTTPError as e:
            log.warning("thumbnail %s failed: %s", url, e)
        self.events.post({"type": "thumbnail", "id": rid, "data": data})

    def store_bytes(self, rid: str, data: Optional[bytes]) -> None:
        """UI thread: decode downloaded bytes; failures keep the placeholder."""
        if not data or rid not in self._surfaces:
            return
        try:
            self._surfaces[rid] = pygame.image.load(io.BytesIO(data))
        except pygame.error as e:
            log.warning("thumbnail for reel %s undecodable: %s", rid, e)

    def shutdown(self) -> None:
        self._pool.shutdown(wait=False, cancel_futures=True)
