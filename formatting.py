"""
Display helpers shared by the overlays and the web remote.
"""

from __future__ import annotations

import datetime
from typing import Optional

import config


def fmt_count(num: Optional[int]) -> str:
    """Compact engagement count: 999 → "999", 1 500 → "1.5K", 2 300 000 → "2.3M"."""
    if num is None:
        return "0"
    if num >= 1_000_000:
        return f"{num / 1_000_000:.1f}M"
    if num >= 1_000:
        return f"{num / 1_000:.1f}K"
    return f"{num:,}"


def fmt_date(when: Optional[datetime.datetime],
             today: Optional[datetime.date] = None) -> str:
    """ "Mar 5" this year, "Mar 5, 2023" otherwise; "" when there is no date."""
    if when is None:
        return ""
    today = today or datetime.date.today()
    text = f"{when.strftime('%b')} {when.day}"
    if when.year != today.year:
        text += f", {when.year}"
    return text


def caption_expandable(caption: Optional[str]) -> bool:
    return bool(caption) and len(caption) > config.CAPTION_EXPAND_THRESHOLD
