from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass
class Entry:
    """One published content file.

    ``body`` stays empty until the entry is rendered on its own page or
    lands in the feed window.
    """

    path: Path
    title: str
    url: str
    created: dt.datetime
    updated: dt.datetime
    body: str = ""


def order_entries(entries: list[Entry]) -> list[Entry]:
    """Most recently created first; equal creation times keep walk order."""
    return sorted(entries, key=lambda entry: entry.created, reverse=True)


def latest(entries: list[Entry], count: int) -> list[Entry]:
    """The first ``count`` entries, or all of them when there are fewer."""
    return entries[: max(0, count)]


def site_updated(ordered: list[Entry]) -> Optional[dt.datetime]:
    # Taken from the most recently created entry, not the newest update.
    if not ordered:
        return None
    return ordered[0].updated
