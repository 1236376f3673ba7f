"""Pytest fixtures for the reels explorer tests."""

import pytest

from events import EventManager
from playback_sync import PlaybackError
from reel_store import Reel, ReelStore
from viewer import ViewerController


class FakePlayer:
    """Records what the synchronizer asks of the media backend."""

    def __init__(self, fail_uris=()):
        self.fail_uris = set(fail_uris)
        self.uri = ""
        self.paused = False
        self.sar = 1.0
        self.opened = []
        self.mute_calls = []
        self.close_calls = 0
        self.error_callbacks = []    # one per opened source

    def open(self, uri, on_error=None):
        if uri in self.fail_uris:
            raise PlaybackError(f"cannot open {uri}")
        self.uri = uri
        self.paused = False
        self.opened.append(uri)
        self.error_callbacks.append(on_error)

    def bus_error(self, message, source=-1):
        """Report an error from the n-th opened source, as the bus thread would."""
        self.error_callbacks[source](message)

    def set_muted(self, muted):
        self.mute_calls.append(muted)

    def toggle_pause(self):
        self.paused = not self.paused

    def decode_frame(self):
        return f"frame:{self.uri}"

    def close(self):
        self.close_calls += 1
        self.uri = ""


def make_reels(n, captions=None):
    captions = captions or {}
    return [
        Reel(id=f"r{i}",
             thumbnail_url=f"https://cdn.test/{i}.jpg",
             video_url=f"https://cdn.test/{i}.mp4",
             likes=i * 10,
             caption=captions.get(i, f"reel {i}"))
        for i in range(n)
    ]


@pytest.fixture
def store():
    s = ReelStore()
    s.begin("someone", 6)
    s.replace(make_reels(3))
    return s


@pytest.fixture
def players():
    """Every FakePlayer the factory hands out, in creation order."""
    return []


@pytest.fixture
def player_factory(players):
    def _factory():
        p = FakePlayer()
        players.append(p)
        return p
    return _factory


@pytest.fixture
def events():
    return EventManager()


@pytest.fixture
def controller(store, events, player_factory):
    return ViewerController(store, events, player_factory)
