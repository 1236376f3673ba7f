#!/usr/bin/env python3
"""
web_remote.py  –  web remote control + diagnostics

Endpoints
---------
/               → HTML page with buttons, viewer state, diagnostics, and link to /log
/state          → JSON object describing the viewer and the loaded reels
/diag, /data    → JSON object of diagnostic metrics
/action?cmd=…   → inject control commands (next, prev, close, mute, caption,
                  play, open&index=N, search&username=U&limit=L, quit)
/log            → contents of runtime.log (if present)

Commands are posted to the app's event queue; the UI thread applies them
in order, exactly as if they came from the keyboard or a click.
"""

from __future__ import annotations
import http.server
import json
import logging
import os
import platform
import socketserver
import threading
import time
import traceback
import urllib.parse
from typing import TYPE_CHECKING, Any

import psutil

import config
from formatting import fmt_date

if TYPE_CHECKING:                       # avoid circular import at runtime
    from app import ReelsExplorer

log = logging.getLogger(__name__)

# ── diagnostics refresh cadence ───────────────────────────────────────────
_last_diag_time = 0.0
_diag_interval  = config.DIAG_REFRESH_INTERVAL

# ── global diagnostic store ───────────────────────────────────────────────
monitor_data: dict[str, Any] = {
    "cpu_percent":       0.0,
    "mem_used":          "0 MB",
    "mem_total":         "0 MB",
    "process_rss":       "0 MB",
    "threads":           0,
    "script_uptime":     "0d 00:00:00",
    "last_http_crash":   "",
    "python_version":    platform.python_version(),
}

_script_start = time.monotonic()
_proc         = psutil.Process()


# ── helpers ────────────────────────────────────────────────────────────────
def _fmt_duration(secs: float) -> str:
    d, rem = divmod(int(secs), 86400)
    h, rem = divmod(rem, 3600)
    m, s   = divmod(rem, 60)
    return f"{d}d {h:02}:{m:02}:{s:02}"


def _maybe_update_diagnostics() -> None:
    global _last_diag_time
    now = time.monotonic()
    if now - _last_diag_time >= _diag_interval:
        _last_diag_time = now
        _update_diagnostics()


def _update_diagnostics() -> None:
    """Refresh CPU, memory, thread count and uptime in `monitor_data`."""
    monitor_data["cpu_percent"] = round(psutil.cpu_percent(), 1)
    vm = psutil.virtual_memory()
    monitor_data["mem_used"]    = f"{vm.used // 1024**2} MB"
    monitor_data["mem_total"]   = f"{vm.total // 1024**2} MB"
    monitor_data["process_rss"] = f"{_proc.memory_info().rss // 1024**2} MB"
    monitor_data["threads"]     = threading.active_count()
    monitor_data["script_uptime"] = _fmt_duration(time.monotonic() - _script_start)


def viewer_snapshot(app: "ReelsExplorer") -> dict[str, Any]:
    """JSON-ready view of the viewer and store (read-only)."""
    # one read of each; the UI thread may swap either in the meantime
    state, store = app.viewer.state, app.store
    reels = store.reels
    snap: dict[str, Any] = {
        "is_open":          state.is_open,
        "current_index":    state.current_index if state.is_open else None,
        "muted":            state.muted,
        "caption_expanded": state.caption_expanded,
        "count":            len(reels),
        "status":           store.status,
        "username":         store.username,
        "error":            store.error,
        "playback_failure": app.viewer.sync.failure,
    }
    if state.is_open and 0 <= state.current_index < len(reels):
        reel = reels[state.current_index]
        snap["reel"] = {"id": reel.id, "video_url": reel.video_url,
                        "posted": fmt_date(reel.posted_at)}
    return snap


# ── action translation ─────────────────────────────────────────────────────
_SIMPLE = {
    "next":    {"type": "navigate", "direction": "next"},
    "prev":    {"type": "navigate", "direction": "prev"},
    "close":   {"type": "close"},
    "mute":    {"type": "toggle_mute"},
    "caption": {"type": "toggle_caption"},
    "play":    {"type": "toggle_play"},
    "quit":    {"type": "quit"},
}


def action_for(query: str) -> dict | None:
    """Map an /action query string to an action dict; None if invalid."""
    qs  = urllib.parse.parse_qs(query)
    cmd = qs.get("cmd", [""])[0]

    if cmd in _SIMPLE:
        return dict(_SIMPLE[cmd])
    if cmd == "open":
        try:
            return {"type": "open", "index": int(qs.get("index", [""])[0])}
        except ValueError:
            return None
    if cmd == "search":
        username = qs.get("username", [""])[0]
        limit    = qs.get("limit", [None])[0]
        if limit is not None and not limit.strip().isdigit():
            return None
        return {"type": "search", "username": username, "limit": limit}
    return None


# ── reusable threaded HTTP server ──────────────────────────────────────────
class ReusableTCPServer(socketserver.ThreadingMixIn, http.server.HTTPServer):
    daemon_threads      = True
    allow_reuse_address = True


# ── request handler ────────────────────────────────────────────────────────
class RemoteHandler(http.server.BaseHTTPRequestHandler):
    def log_message(self, fmt, *args):
        log.debug("remote %s - " + fmt, self.address_string(), *args)

    def do_GET(self):
        parsed = urllib.parse.urlparse(self.path)
        path, qs = parsed.path, parsed.query

        if path == "/":
            return self._serve_html()
        if path == "/state":
            return self._serve_json(viewer_snapshot(self.server.app))   # type: ignore
        if path in ("/diag", "/data"):
            _maybe_update_diagnostics()
            return self._serve_json(monitor_data)
        if path == "/log":
            return self._serve_log()
        if path == "/action":
            return self._serve_action(qs)

        self.send_error(404, "Not found")

    # ── helpers for each route ───────────────────────────────────────────
    def _serve_html(self):
        b = HTML_PAGE.encode("utf-8")
        self.send_response(200)
        self.send_header("Content-Type", "text/html; charset=utf-8")
        self.send_header("Content-Length", str(len(b)))
        self.end_headers()
        self.wfile.write(b)

    def _serve_json(self, obj: Any):
        b = json.dumps(obj).encode("utf-8")
        self.send_response(200)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(b)))
        self.end_headers()
        self.wfile.write(b)

    def _serve_log(self):
        try:
            with open(config.LOG_FILE, "rb") as f:
                data = f.read()
        except OSError:
            return self.send_error(404, "Log file not found")
        self.send_response(200)
        self.send_header("Content-Type", "text/plain; charset=utf-8")
        self.send_header("Content-Length", str(len(data)))
        self.end_headers()
        self.wfile.write(data)

    def _serve_action(self, query: str):
        act = action_for(query)
        if act is None:
            return self.send_error(400, "Unknown or malformed cmd")
        self.server.app.events.post(act)                                # type: ignore
        self.send_response(204)
        self.end_headers()


# ── simple HTML UI ─────────────────────────────────────────────────────────
HTML_PAGE = """
<!doctype html><html><head><meta charset="utf-8">
<title>Reels Remote</title>
<style>
 body{background:#111;color:#e9d5ff;font-family:monospace;padding:1em;}
 a.button{display:inline-block;margin:4px;padding:6px 12px;border:1px solid #c084fc;
          text-decoration:none;color:#e9d5ff;}
 pre{margin:0.5em 0;font-family:monospace;}
</style></head><body>
<h2>Reels Remote</h2>
<form onsubmit="go(event)">
 <input id="u" placeholder="@username"> <input id="l" size="4" value="6">
 <button>Explore</button>
</form>
<a class="button" href="#" onclick="act('prev')">▲ Prev</a>
<a class="button" href="#" onclick="act('next')">Next ▼</a>
<a class="button" href="#" onclick="act('play')">Play / Pause</a>
<a class="button" href="#" onclick="act('mute')">Mute</a>
<a class="button" href="#" onclick="act('caption')">Caption</a>
<a class="button" href="#" onclick="act('close')">Close</a>
<a class="button" href="/log">View log</a>

<div><h3>Viewer</h3><pre id="state"></pre></div>
<div><h3>Diagnostics</h3><pre id="diag"></pre></div>

<script>
 function act(cmd){ fetch('/action?cmd=' + cmd); return false; }
 function go(e){
   e.preventDefault();
   let u = encodeURIComponent(document.getElementById('u').value);
   let l = encodeURIComponent(document.getElementById('l').value);
   fetch('/action?cmd=search&username=' + u + '&limit=' + l);
 }
 async function refreshUI(){
   try {
     let s  = await fetch('/state'); let st = await s.json();
     document.getElementById('state').textContent = JSON.stringify(st, null, 1);
     let d  = await fetch('/diag');  let dg = await d.json();
     let txt = '';
     for (let [k,v] of Object.entries(dg)){
       txt += k.padEnd(20,' ') + v + '\\n';
     }
     document.getElementById('diag').textContent = txt;
   } catch(e){
     console.error(e);
   }
 }
 setInterval(refreshUI, 500);
 refreshUI();
</script>
</body></html>
"""


# ── server bootstrap with auto-restart ────────────────────────────────────
def start(app: "ReelsExplorer", port: int = config.WEB_PORT):
    def _serve_loop():
        while True:
            try:
                with ReusableTCPServer(("", port), RemoteHandler) as httpd:
                    httpd.app = app
                    httpd.serve_forever()
            except Exception:
                tb = traceback.format_exc()
                log.error("web remote crashed, restarting:\n%s", tb)
                monitor_data["last_http_crash"] = tb.replace("\n", "<br>")
                time.sleep(1)

    threading.Thread(target=_serve_loop, daemon=True).start()
    log.info("web remote listening on port %d (pid %d)", port, os.getpid())
