"""
fetcher.py – client for the scraping backend

    GET <BACKEND_URL>/scrape?username=<handle>&limit=<1..50>

One request per search, no retries.  `start_fetch()` runs the request on
a worker thread and reports back through the event queue as
{"type": "fetch_done", "reels": [...]} or {"type": "fetch_failed", "message": ...}.
"""

from __future__ import annotations

import logging
import threading
from typing import List, Optional

import httpx

import config
from reel_store import Reel, parse_reels

log = logging.getLogger(__name__)


class FetchError(Exception):
    """The backend could not deliver reels; `str(e)` is user-facing."""


# ── input normalisation ─────────────────────────────────────────────────────
def normalize_username(text: str) -> str:
    return text.replace("@", "").strip()


def clamp_limit(value, default: int = config.DEFAULT_LIMIT) -> int:
    """Whatever was typed → an int in [MIN_LIMIT, MAX_LIMIT]; junk → default."""
    try:
        n = int(str(value).strip())
    except (TypeError, ValueError):
        n = 0
    if n == 0:
        n = default
    return max(config.MIN_LIMIT, min(config.MAX_LIMIT, n))


# ── request ─────────────────────────────────────────────────────────────────
def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return config.FETCH_FAILED_MESSAGE
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return config.FETCH_FAILED_MESSAGE


def fetch_reels(username: str, limit: int, *,
                base_url: str = config.BACKEND_URL,
                client: Optional[httpx.Client] = None) -> List[Reel]:
    """Fetch up to *limit* reels for *username*; raises FetchError."""
    params = {"username": username, "limit": limit}
    url = base_url.rstrip("/") + "/scrape"
    own_client = client is None
    if own_client:
        client = httpx.Client(timeout=config.FETCH_TIMEOUT)
    try:
        response = client.get(url, params=params, follow_redirects=True)
    except httpx.HTTPError as e:
        log.error("fetch %s failed: %s", url, e)
        raise FetchError(config.FETCH_FAILED_MESSAGE) from e
    finally:
        if own_client:
            client.close()

    if not response.is_success:
        message = _error_message(response)
        log.error("fetch %s → HTTP %d: %s", url, response.status_code, message)
        raise FetchError(message)

    try:
        payload = response.json()
    except ValueError as e:
        log.error("fetch %s returned invalid JSON", url)
        raise FetchError(config.FETCH_FAILED_MESSAGE) from e

    reels = parse_reels(payload)
    log.info("fetched %d reels for @%s", len(reels), username)
    return reels


def start_fetch(events, username: str, limit: int, request_id: int = 0,
                **kwargs) -> threading.Thread:
    """Fetch in the background; the result arrives as a queued action."""
    def _worker():
        try:
            reels = fetch_reels(username, limit, **kwargs)
        except FetchError as e:
            events.post({"type": "fetch_failed", "username": username,
                         "request_id": request_id,
                         "message": str(e)})
        else:
            events.post({"type": "fetch_done", "username": username,
                         "request_id": request_id,
                         "reels": reels})

    t = threading.Thread(target=_worker, name=f"fetch-{username}", daemon=True)
    t.start()
    return t
