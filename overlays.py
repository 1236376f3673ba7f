"""
overlays.py

Pygame drawing for the reels explorer: search bar, thumbnail grid, the
full-screen viewer and its overlays, and toast notifications.

Every draw_* function that has clickable parts returns a dict of
name → pygame.Rect for the app to hit-test.
"""

from __future__ import annotations

import pygame

import config
from formatting import caption_expandable, fmt_count, fmt_date
from renderer import fit_rect, render_cover, render_frame

# ── colours ────────────────────────────────────────────────────────────────
WHITE  = (255, 255, 255)
DIM    = (200, 200, 200)
GREY   = (90, 90, 90)
PURPLE = (147, 51, 234)
PINK   = (219, 39, 119)
RED    = (255,  50, 50)
GREEN  = (0, 200, 90)
PAGE   = (248, 245, 252)
INK    = (30, 30, 40)
BG     = (0, 0, 0, 150)
SCRIM  = (0, 0, 0, 242)

HINT = "↑↓ navigate • Space play/pause • M mute • Esc close"

pygame.font.init()


# ── helpers ────────────────────────────────────────────────────────────────
def _compute_font_sizes(h: int) -> tuple[int, int, int]:
    return max(12, h // 60), max(16, h // 45), max(24, h // 25)


def _fonts(h: int):
    tiny_pt, small_pt, large_pt = _compute_font_sizes(h)
    return (pygame.font.SysFont("sans", tiny_pt),
            pygame.font.SysFont("sans", small_pt),
            pygame.font.SysFont("sans", large_pt, bold=True))


def _badge(surface: pygame.Surface, text: str, font, colour, **anchor) -> pygame.Rect:
    """Text on a translucent pill; `anchor` is any pygame.Rect position kwarg."""
    txt = font.render(text, True, colour)
    pad = max(4, font.get_height() // 4)
    bg  = pygame.Surface((txt.get_width() + 2 * pad, txt.get_height() + pad),
                         pygame.SRCALPHA)
    bg.fill(BG)
    bg.blit(txt, (pad, pad // 2))
    rect = bg.get_rect(**anchor)
    surface.blit(bg, rect)
    return rect


def wrap_text(text: str, font, width: int) -> list[str]:
    """Greedy word wrap; words wider than `width` get a line of their own."""
    lines: list[str] = []
    for para in text.splitlines() or [""]:
        line = ""
        for word in para.split():
            trial = f"{line} {word}".strip()
            if line and font.size(trial)[0] > width:
                lines.append(line)
                line = word
            else:
                line = trial
        lines.append(line)
    return lines


# ── search bar ─────────────────────────────────────────────────────────────
def draw_search_bar(surface: pygame.Surface, username: str, limit_text: str,
                    focus: str, loading: bool) -> dict:
    sw = surface.get_width()
    tiny, small, large = _fonts(surface.get_height())
    surface.fill(WHITE, pygame.Rect(0, 0, sw, config.SEARCH_BAR_HEIGHT))
    bottom = config.SEARCH_BAR_HEIGHT - 1
    pygame.draw.line(surface, PURPLE, (0, bottom), (sw, bottom))

    title = large.render("Reels Explorer", True, PURPLE)
    surface.blit(title, (16, (config.SEARCH_BAR_HEIGHT - title.get_height()) // 2))

    h = small.get_height() + 12
    y = (config.SEARCH_BAR_HEIGHT - h) // 2
    rects = {
        "username": pygame.Rect(sw - 560, y, 320, h),
        "limit":    pygame.Rect(sw - 230, y, 90, h),
        "button":   pygame.Rect(sw - 130, y, 110, h),
    }
    for name, text, ph in (("username", username, "@username"),
                           ("limit", limit_text, "Limit")):
        r = rects[name]
        pygame.draw.rect(surface, PINK if focus == name else PURPLE, r, 2, border_radius=6)
        shown = small.render(text or ph, True, INK if text else GREY)
        surface.blit(shown, (r.x + 8, r.centery - shown.get_height() // 2))

    enabled = bool(username.strip()) and not loading
    pygame.draw.rect(surface, PURPLE if enabled else GREY, rects["button"], border_radius=6)
    label = small.render("Loading…" if loading else "Explore", True, WHITE)
    surface.blit(label, label.get_rect(center=rects["button"].center))
    return rects


# ── grid ───────────────────────────────────────────────────────────────────
def draw_grid(surface: pygame.Surface, grid, store, thumbs) -> None:
    sw, sh = surface.get_size()
    tiny, small, large = _fonts(sh)
    surface.fill(PAGE)

    if store.loading:
        msg = small.render("Fetching reels…", True, PURPLE)
        surface.blit(msg, msg.get_rect(center=(sw // 2, sh // 2)))
        return

    if not store.count():
        if store.has_searched:
            head = large.render("No Reels Found", True, GREY)
            sub  = small.render("Try a different username or check that the "
                                "profile is public", True, GREY)
        else:
            head = large.render("Discover reels", True, PURPLE)
            sub  = small.render("Enter a username above to explore their reels",
                                True, GREY)
        surface.blit(head, head.get_rect(center=(sw // 2, sh // 2 - 20)))
        surface.blit(sub, sub.get_rect(center=(sw // 2, sh // 2 + 20)))
        return

    clip = surface.get_clip()
    surface.set_clip(pygame.Rect(0, config.GRID_TOP, sw, sh - config.GRID_TOP))
    for i, reel in enumerate(store.reels):
        r = grid.tile_rect(i, sw)
        if r.bottom < config.GRID_TOP or r.top > sh:
            continue
        img = thumbs.get(reel)
        if img is not None:
            render_cover(surface, img, r)
        else:
            surface.fill(GREY, r)
        if reel.views:
            _badge(surface, f"▶ {fmt_count(reel.views)}", tiny, WHITE,
                   topleft=(r.x + 4, r.y + 4))
        _badge(surface, f"♥ {fmt_count(reel.likes)}  ✉ {fmt_count(reel.comments)}",
               tiny, WHITE, bottomleft=(r.x + 4, r.bottom - 4))
    surface.set_clip(clip)
    draw_results_header(surface, store)


def draw_results_header(surface: pygame.Surface, store) -> pygame.Rect | None:
    """Avatar initial, @username and reel count above a non-empty grid."""
    n = store.count()
    if not n:
        return None
    sw = surface.get_width()
    tiny, small, large = _fonts(surface.get_height())
    rect = pygame.Rect(0, config.SEARCH_BAR_HEIGHT, sw, config.RESULTS_HEADER_HEIGHT)
    surface.fill(PAGE, rect)

    radius = rect.height // 2 - 8
    centre = (16 + radius, rect.centery)
    pygame.draw.circle(surface, PINK, centre, radius)
    initial = large.render((store.username or "?")[0].upper(), True, WHITE)
    surface.blit(initial, initial.get_rect(center=centre))

    x = centre[0] + radius + 12
    name = small.render(f"@{store.username}", True, INK)
    count = tiny.render(f"{n} reel" + ("" if n == 1 else "s"), True, GREY)
    surface.blit(name, (x, rect.centery - name.get_height()))
    surface.blit(count, (x, rect.centery + 2))
    return rect


# ── viewer ─────────────────────────────────────────────────────────────────
def draw_viewer(surface: pygame.Surface, state, reel, count: int,
                username: str, sync) -> dict:
    """Full-screen modal for `reel`; returns the clickable control rects."""
    sw, sh = surface.get_size()
    tiny, small, large = _fonts(sh)

    scrim = pygame.Surface((sw, sh), pygame.SRCALPHA)
    scrim.fill(SCRIM)
    surface.blit(scrim, (0, 0))

    card = fit_rect(9, 16, pygame.Rect(0, 0, sw, sh).inflate(-sw // 10, -sh // 10))
    frame = sync.frame()
    if frame is not None:
        render_frame(surface, frame, sync.sar, card)
    else:
        surface.fill((0, 0, 0), card)
        msg = ("Video unavailable" if sync.failure else "Loading…")
        txt = small.render(msg, True, DIM)
        surface.blit(txt, txt.get_rect(center=card.center))

    rects: dict = {}
    btn = large.get_height() + 8

    rects["close"] = _badge(surface, "✕", large, WHITE, topright=(sw - 16, 16))
    if state.current_index > 0:
        rects["prev"] = _badge(surface, "‹", large, WHITE,
                               midleft=(card.left - btn - 16, sh // 2))
    if state.current_index < count - 1:
        rects["next"] = _badge(surface, "›", large, WHITE,
                               midleft=(card.right + 16, sh // 2))
    rects["mute"] = _badge(surface, "muted" if state.muted else "sound on",
                           small, WHITE, topleft=(card.x + 8, card.y + 8))
    _badge(surface, f"{state.current_index + 1} / {count}", small, WHITE,
           topright=(card.right - 8, card.y + 8))
    if sync.paused:
        _badge(surface, "❚❚ paused", small, WHITE, center=card.center)

    # ── engagement column ──────────────────────────────────────────────
    y = card.bottom - card.height // 3
    for text in (f"♥ {fmt_count(reel.likes)}", f"✉ {fmt_count(reel.comments)}"):
        r = _badge(surface, text, tiny, WHITE, topright=(card.right - 8, y))
        y = r.bottom + 6

    # ── caption block ──────────────────────────────────────────────────
    lines = wrap_text(reel.caption, tiny, card.width - 24)
    if not state.caption_expanded:
        lines = lines[:config.CAPTION_COLLAPSED_LINES]
    info = []
    if reel.posted_at is not None:
        info.append(fmt_date(reel.posted_at))
    if reel.views:
        info.append(f"{fmt_count(reel.views)} views")

    line_h = tiny.get_linesize()
    rows = 1 + len(lines) + (1 if caption_expandable(reel.caption) else 0) + (1 if info else 0)
    block = pygame.Rect(card.x, card.bottom - rows * line_h - 16, card.width, rows * line_h + 16)
    shade = pygame.Surface(block.size, pygame.SRCALPHA)
    shade.fill(BG)
    surface.blit(shade, block)

    y = block.y + 8
    surface.blit(small.render(f"@{username}", True, WHITE), (block.x + 12, y))
    y += line_h
    for ln in lines:
        surface.blit(tiny.render(ln, True, WHITE), (block.x + 12, y))
        y += line_h
    if caption_expandable(reel.caption):
        more = tiny.render("Show less" if state.caption_expanded else "Show more", True, DIM)
        rects["caption"] = surface.blit(more, (block.x + 12, y))
        y += line_h
    if info:
        surface.blit(tiny.render("   ".join(info), True, DIM), (block.x + 12, y))

    _badge(surface, HINT, tiny, DIM, midbottom=(sw // 2, sh - 8))
    return rects


# ── toasts ─────────────────────────────────────────────────────────────────
def draw_toasts(surface: pygame.Surface, toasts) -> None:
    """`toasts` is a sequence of (message, ok) pairs, newest last."""
    sw, sh = surface.get_size()
    tiny, small, _ = _fonts(sh)
    y = sh - 16
    for message, ok in reversed(list(toasts)):
        r = _badge(surface, message, small, GREEN if ok else RED,
                   bottomright=(sw - 16, y))
        y = r.top - 6
