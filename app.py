#!/usr/bin/env python3
"""
app.py – reels explorer main loop

Search bar → background fetch → thumbnail grid → full-screen viewer.
All input goes through events.py: the viewer's InputRouter sees pygame
events first while the viewer is open, everything else lands here.
"""
from __future__ import annotations

import logging
import time
from typing import List, Tuple

import pygame
from pygame.locals import *

import config
from events import EventManager
from fetcher import clamp_limit, normalize_username, start_fetch
from grid import GridPresenter, ThumbnailCache
from overlays import draw_grid, draw_search_bar, draw_toasts, draw_viewer
from reel_store import ReelStore
from viewer import ViewerController

log = logging.getLogger(__name__)


# ── main application ───────────────────────────────────────────────────────
class ReelsExplorer:
    def __init__(self, player_factory=None):
        # window ----------------------------------------------------------
        pygame.init()
        pygame.display.set_caption("Reels Explorer")
        self.screen = pygame.display.set_mode(
            (0, 0) if config.FULLSCREEN else config.WINDOWED_SIZE,
            pygame.FULLSCREEN if config.FULLSCREEN else 0,
        )
        self.clock = pygame.time.Clock()
        pygame.key.start_text_input()

        # core state ------------------------------------------------------
        self.events = EventManager()
        self.store  = ReelStore()
        self.viewer = ViewerController(self.store, self.events, player_factory)
        self.grid   = GridPresenter(self.store, self.viewer.scroll_lock)
        self.thumbs = ThumbnailCache(self.events)

        # search form -----------------------------------------------------
        self.username   = ""
        self.limit_text = str(config.DEFAULT_LIMIT)
        self.focus      = "username"
        self.request_id = 0

        # presentation ----------------------------------------------------
        self.toasts: List[Tuple[str, bool, float]] = []
        self.search_rects: dict = {}
        self.viewer_rects: dict = {}
        self.running = True

    # ── search ------------------------------------------------------------
    def search(self, username: str | None = None, limit=None):
        name = normalize_username(self.username if username is None else username)
        if not name or self.store.loading:
            return
        n = clamp_limit(self.limit_text if limit is None else limit)
        self.username, self.limit_text = name, str(n)
        self.request_id += 1
        self.store.begin(name, n)
        log.info("searching @%s (limit %d)", name, n)
        start_fetch(self.events, name, n, request_id=self.request_id)

    def _toast(self, message: str, ok: bool):
        self.toasts.append((message, ok, time.time() + config.TOAST_DURATION))

    # ── queued actions ----------------------------------------------------
    def _apply(self, act: dict):
        t = act.get("type")
        if t == "quit":
            self.running = False
        elif t == "fetch_done":
            if act.get("request_id") != self.request_id:
                return
            self.thumbs.clear()
            self.store.replace(act["reels"])
            self._toast(config.FETCH_SUCCESS_MESSAGE, True)
        elif t == "fetch_failed":
            if act.get("request_id") != self.request_id:
                return
            self.thumbs.clear()
            self.store.fail(act["message"])
            self._toast(act["message"], False)
        elif t == "thumbnail":
            self.thumbs.store_bytes(act["id"], act.get("data"))
        elif t == "search":
            if act.get("username") is not None:
                self.username = act["username"]
            if act.get("limit") is not None:
                self.limit_text = str(act["limit"])
            self.search()
        elif t == "open":
            self.viewer.on_open(int(act.get("index", -1)))
        else:
            # explicit viewer controls from the web remote
            self.viewer.router.dispatch(act)

    def _toggle_fullscreen(self):
        config.FULLSCREEN ^= True
        self.screen = pygame.display.set_mode(
            (0, 0) if config.FULLSCREEN else config.WINDOWED_SIZE,
            pygame.FULLSCREEN if config.FULLSCREEN else 0)

    # ── raw pygame events the viewer did not consume ----------------------
    def _handle_ui_event(self, e):
        if e.type == KEYDOWN and e.key == K_F11:
            self._toggle_fullscreen()
            return

        if self.viewer.state.is_open:
            if e.type == MOUSEBUTTONDOWN and e.button == 1:
                self._click_viewer(e.pos)
            return

        if e.type == MOUSEBUTTONDOWN and e.button == 1:
            self._click_page(e.pos)
        elif e.type == MOUSEWHEEL:
            self.grid.scroll(e.y, self.screen.get_size())
        elif e.type == TEXTINPUT:
            if self.focus == "username":
                self.username += e.text.replace("@", "")
            elif e.text.isdigit():
                self.limit_text += e.text
        elif e.type == KEYDOWN:
            if e.key == K_BACKSPACE:
                if self.focus == "username":
                    self.username = self.username[:-1]
                else:
                    self.limit_text = self.limit_text[:-1]
            elif e.key == K_TAB:
                self.focus = "limit" if self.focus == "username" else "username"
            elif e.key in (K_RETURN, K_KP_ENTER):
                self.search()

    def _click_page(self, pos):
        for name in ("username", "limit"):
            r = self.search_rects.get(name)
            if r and r.collidepoint(pos):
                self.focus = name
                return
        r = self.search_rects.get("button")
        if r and r.collidepoint(pos):
            self.search()
            return
        idx = self.grid.hit_test(pos, self.screen.get_width())
        if idx is not None:
            self.viewer.on_open(idx)

    def _click_viewer(self, pos):
        controls = {
            "close":   self.viewer.on_close,
            "prev":    lambda: self.viewer.on_navigate("prev"),
            "next":    lambda: self.viewer.on_navigate("next"),
            "mute":    self.viewer.on_toggle_mute,
            "caption": self.viewer.on_toggle_caption,
        }
        for name, fn in controls.items():
            r = self.viewer_rects.get(name)
            if r and r.collidepoint(pos):
                fn()
                return

    # ── drawing -----------------------------------------------------------
    def _draw(self):
        draw_grid(self.screen, self.grid, self.store, self.thumbs)
        self.search_rects = draw_search_bar(self.screen, self.username,
                                            self.limit_text, self.focus,
                                            self.store.loading)
        self.viewer_rects = {}
        state = self.viewer.state
        if state.is_open:
            self.viewer_rects = draw_viewer(
                self.screen, state, self.store.at(state.current_index),
                self.store.count(), self.store.username, self.viewer.sync)
        now = time.time()
        self.toasts = [t for t in self.toasts if t[2] > now]
        draw_toasts(self.screen, [(m, ok) for m, ok, _ in self.toasts])

    # ── main loop ---------------------------------------------------------
    def run(self):
        while self.running:
            for e in pygame.event.get():
                if not self.events.handle(e):
                    self._handle_ui_event(e)

            # drain external queue (non-blocking), in receipt order
            while (act := self.events.poll()):
                self._apply(act)

            self._draw()
            pygame.display.flip()
            self.clock.tick(config.FPS)

        self.viewer.shutdown()
        self.thumbs.shutdown()
        pygame.quit()


if __name__ == "__main__":
    ReelsExplorer().run()
