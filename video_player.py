# =========  video_player.py  =========
"""
GStreamer VideoPlayer for remote reel URLs

Public API
----------
open(uri, on_error)   → start playback from the beginning (non-blocking)
decode_frame()        → latest frame (HxWx3 uint8) or None before the first one
play() / pause() / toggle_pause()
set_muted(bool)
close()
Properties
----------
.uri     → current source
.paused  → pause flag
.sar     → sample-aspect ratio

Load and decode errors arrive later on the bus thread and are handed to
the `on_error(message)` given to the `open` that started that source; the
player never raises for them.
"""
import logging
import queue
import threading

import gi
import numpy as np
gi.require_version("Gst", "1.0")
from gi.repository import Gst, GLib

from playback_sync import PlaybackError

log = logging.getLogger(__name__)


# ────────────────────────────────────────────────────────────────────────────
class VideoPlayer:
    def __init__(self):
        Gst.init(None)

        self.player = Gst.ElementFactory.make("playbin", "player")
        if self.player is None:
            raise PlaybackError("GStreamer playbin element is unavailable")

        self._vsink = self._build_sink()
        self.player.set_property("video-sink", self._vsink)
        self.player.set_property("audio-sink",
                                 Gst.ElementFactory.make("autoaudiosink", "aud"))

        # state
        self._q, self._last = queue.Queue(maxsize=1), None
        self.sar    = 1.0
        self.uri    = ""
        self.paused = False
        self._ml  = None
        self._ml_thread = None
        self._bus_handler = None

    # ── sink builder ────────────────────────────────────────────────────────
    def _build_sink(self):
        """RGB appsink; playbin inserts the decoder and converter."""
        vs = Gst.ElementFactory.make("appsink", "vsink")
        vs.set_property("emit-signals", True)
        vs.set_property("max-buffers", 2)
        vs.set_property("drop", True)
        vs.set_property("sync", True)
        vs.set_property("caps", Gst.Caps.from_string("video/x-raw,format=RGB"))
        vs.connect("new-sample", self._on_sample)
        return vs

    # ── public API ──────────────────────────────────────────────────────────
    def open(self, uri: str, on_error=None):
        self.close()
        while not self._q.empty():
            self._q.get_nowait()
        self._last = None

        if not uri:
            raise PlaybackError("reel has no video URL")
        if not Gst.uri_is_valid(uri):
            uri = Gst.filename_to_uri(uri)

        self.uri = uri
        self.player.set_property("uri", uri)

        # bus watch in a side loop
        bus = self.player.get_bus()
        self._ml = GLib.MainLoop()
        bus.add_signal_watch()
        # errors reach the callback of the source that raised them
        self._bus_handler = bus.connect("message", self._on_bus_msg, on_error)
        self._ml_thread = threading.Thread(target=self._ml.run, daemon=True)
        self._ml_thread.start()

        if self.player.set_state(Gst.State.PLAYING) == Gst.StateChangeReturn.FAILURE:
            raise PlaybackError(f"cannot start playback of {uri}")
        self.paused = False

    def decode_frame(self):
        data = None
        while True:
            try:
                data = self._q.get_nowait()
            except queue.Empty:
                break
        if data is not None:
            self._last = self._bytes_to_arr(*data)
        return self._last

    def play(self):
        self.player.set_state(Gst.State.PLAYING)
        self.paused = False

    def pause(self):
        self.player.set_state(Gst.State.PAUSED)
        self.paused = True

    def toggle_pause(self):
        self.play() if self.paused else self.pause()

    def set_muted(self, muted: bool):
        self.player.set_property("mute", bool(muted))

    def close(self):
        if self._ml:
            self._ml.quit()
            self._ml = None
            bus = self.player.get_bus()
            bus.disconnect(self._bus_handler)
            bus.remove_signal_watch()
            self._bus_handler = None
        if self._ml_thread and threading.current_thread() is not self._ml_thread:
            self._ml_thread.join(timeout=0.5)
        self._ml_thread = None
        self.player.set_state(Gst.State.NULL)
        self.uri = ""

    # ── internals ───────────────────────────────────────────────────────────
    def _bytes_to_arr(self, data: bytes, w: int, h: int):
        """Strip row padding from an RGB888 buffer."""
        stride = len(data) // h
        rows   = np.frombuffer(data, np.uint8).reshape((h, stride))
        return np.ascontiguousarray(rows[:, : w * 3].reshape((h, w, 3)))

    def _on_sample(self, sink):
        samp = sink.emit("pull-sample")
        if samp:
            caps = samp.get_caps().get_structure(0)
            w, h = caps.get_int("width")[1], caps.get_int("height")[1]
            if caps.has_field("pixel-aspect-ratio"):
                num, den = caps.get_fraction("pixel-aspect-ratio")[-2:]
                self.sar = num / den if den else 1.0
            buf = samp.get_buffer()
            ok, mi = buf.map(Gst.MapFlags.READ)
            if ok:
                try:
                    self._q.put_nowait((bytes(mi.data), w, h))
                except queue.Full:
                    pass
                buf.unmap(mi)
        return Gst.FlowReturn.OK

    def _on_bus_msg(self, bus, msg, on_error):
        if msg.type == Gst.MessageType.EOS:
            # hold the last frame
            self.paused = True
        elif msg.type == Gst.MessageType.ERROR:
            err, debug = msg.parse_error()
            log.error("GStreamer error on %s: %s (%s)", self.uri, err, debug)
            if on_error:
                on_error(str(err))
        return True
