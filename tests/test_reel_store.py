"""Reel parsing and the store's request flow."""

from datetime import datetime, timezone

import pytest

from conftest import make_reels
from reel_store import FAILED, IDLE, LOADED, LOADING, Reel, ReelStore, parse_reels
from viewer_state import ViewerStateMachine


class TestParsing:
    def test_full_record(self):
        r = Reel.from_json({
            "id": 42, "thumbnail_url": "t.jpg", "video_url": "v.mp4",
            "likes": "1200", "comments": 3, "views": 10,
            "caption": "hello", "posted_at": "2023-01-02T03:04:05+00:00",
        })
        assert r.id == "42"
        assert r.likes == 1200
        assert r.posted_at == datetime(2023, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", [None, "lots", -1, True, [1]])
    def test_unusable_counts_become_none(self, value):
        assert Reel.from_json({"id": "a", "views": value}).views is None

    @pytest.mark.parametrize("value", [None, "", "yesterday", {}])
    def test_unusable_dates_become_none(self, value):
        assert Reel.from_json({"id": "a", "posted_at": value}).posted_at is None

    def test_epoch_date(self):
        r = Reel.from_json({"id": "a", "posted_at": 0})
        assert r.posted_at.year == 1970

    def test_missing_id_uses_position(self):
        reels = parse_reels({"reels": [{"id": "x"}, {"caption": None}]})
        assert [r.id for r in reels] == ["x", "1"]
        assert reels[1].caption == ""

    @pytest.mark.parametrize("payload", [None, [], {"reels": None}, {"reels": "nope"}])
    def test_malformed_payloads(self, payload):
        assert parse_reels(payload) == []

    def test_reels_are_frozen(self):
        r = make_reels(1)[0]
        with pytest.raises(AttributeError):
            r.caption = "changed"


class TestStore:
    def test_request_flow(self):
        s = ReelStore()
        assert s.status == IDLE and not s.has_searched
        s.begin("who", 4)
        assert s.status == LOADING and s.loading and s.has_searched
        s.replace(make_reels(2))
        assert s.status == LOADED and s.count() == 2
        assert s.at(1).id == "r1"

    def test_fail_clears_collection(self):
        s = ReelStore()
        s.replace(make_reels(2))
        s.begin("who", 4)
        s.fail("nope")
        assert s.status == FAILED and s.error == "nope"
        assert s.count() == 0

    def test_replace_is_whole_collection(self):
        s = ReelStore()
        s.replace(make_reels(3))
        s.replace(make_reels(1))
        assert [r.id for r in s.reels] == ["r0"]

    def test_subscribers_run_in_order(self):
        s = ReelStore()
        seen = []
        s.subscribe(lambda reels: seen.append(("a", len(reels))))
        s.subscribe(lambda reels: seen.append(("b", len(reels))))
        s.replace(make_reels(2))
        assert seen == [("a", 2), ("b", 2)]

    def test_empty_result_is_not_a_failure(self):
        s = ReelStore()
        machine = ViewerStateMachine(s)
        s.begin("quiet", 6)
        s.replace([])
        assert s.status == LOADED and s.error is None
        machine.open(0)
        assert not machine.is_open
