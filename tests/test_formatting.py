"""Count, date and caption helpers."""

import datetime

import pytest

from formatting import caption_expandable, fmt_count, fmt_date


@pytest.mark.parametrize("num, text", [
    (None, "0"), (0, "0"), (999, "999"), (1000, "1.0K"), (1530, "1.5K"),
    (999_999, "1000.0K"), (1_000_000, "1.0M"), (2_345_678, "2.3M"),
])
def test_fmt_count(num, text):
    assert fmt_count(num) == text


def test_fmt_date_same_year():
    when = datetime.datetime(2024, 3, 5, 12, 0)
    assert fmt_date(when, today=datetime.date(2024, 12, 1)) == "Mar 5"


def test_fmt_date_other_year():
    when = datetime.datetime(2022, 11, 17, 7, 11)
    assert fmt_date(when, today=datetime.date(2024, 1, 1)) == "Nov 17, 2022"


def test_fmt_date_missing():
    assert fmt_date(None) == ""


def test_caption_expandable():
    assert caption_expandable("a" * 200)
    assert not caption_expandable("a" * 50)
    assert not caption_expandable("a" * 150)
    assert not caption_expandable("")
    assert not caption_expandable(None)
