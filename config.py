# config.py
"""
Configuration settings for the reels explorer.
"""
import os

FPS = 30

# ── Backend ────────────────────────────────────────────────────────────────

# Base URL of the scraping service (GET <url>/scrape?username=…&limit=…)
BACKEND_URL = os.environ.get("REELS_BACKEND_URL", "http://localhost:8000")

# Seconds before a fetch is abandoned
FETCH_TIMEOUT = 30.0

# Bounds for the "number of reels" field
MIN_LIMIT     = 1
MAX_LIMIT     = 50
DEFAULT_LIMIT = 6

# Shown when the backend gives no message of its own
FETCH_FAILED_MESSAGE  = "Failed to fetch reels"
FETCH_SUCCESS_MESSAGE = "Reels fetched successfully"

# ── Viewer ─────────────────────────────────────────────────────────────────

# Captions longer than this get a "Show more" control
CAPTION_EXPAND_THRESHOLD = 150

# Lines of caption shown while collapsed
CAPTION_COLLAPSED_LINES = 3

# Viewer opens muted the first time
START_MUTED = True

# ── Display settings ───────────────────────────────────────────────────────

FULLSCREEN    = False
WINDOWED_SIZE = (1280, 800)

# Grid tiles are 9:16 like the reels themselves
GRID_TILE_WIDTH = 180
GRID_GAP        = 8
SEARCH_BAR_HEIGHT = 80
RESULTS_HEADER_HEIGHT = 56   # avatar, @username and reel count
GRID_TOP        = SEARCH_BAR_HEIGHT + RESULTS_HEADER_HEIGHT
GRID_SCROLL_STEP = 60     # pixels per wheel tick

# Concurrent thumbnail downloads
THUMBNAIL_WORKERS = 4

# ── Toasts ─────────────────────────────────────────────────────────────────

TOAST_DURATION = 3.0      # seconds a notification stays on screen

# ── Web remote ─────────────────────────────────────────────────────────────

WEB_PORT = int(os.environ.get("REELS_WEB_PORT", "8080"))
DIAG_REFRESH_INTERVAL = 1.0

# ── Logging ────────────────────────────────────────────────────────────────

LOG_FILE = "runtime.log"
