from __future__ import annotations

import datetime as dt
from pathlib import Path
from typing import Callable, Optional

SHORT_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def parse_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y", "on"}
    return False


def parse_int(value: object, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return default


def modified_time(path: Path) -> Optional[dt.datetime]:
    try:
        return dt.datetime.fromtimestamp(path.stat().st_mtime, tz=dt.timezone.utc)
    except FileNotFoundError:
        return None


def newest(*times: dt.datetime) -> dt.datetime:
    return max(times)


def is_stale(watermark: dt.datetime, dest_mod: Optional[dt.datetime]) -> bool:
    return dest_mod is None or watermark > dest_mod


def trunc10(value: dt.datetime) -> str:
    return value.strftime("%Y-%m-%d")


def rfc3339(value: dt.datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt.timezone.utc)
    return value.isoformat(timespec="seconds")


def datediff() -> Callable[[dt.datetime], str]:
    """Archive row labels that only repeat the year or month when it changes.

    The returned callable remembers the previous date it formatted, so a
    fresh one is needed for every archive render.
    """
    last: Optional[dt.datetime] = None

    def label(value: dt.datetime) -> str:
        nonlocal last
        month = SHORT_MONTHS[value.month - 1]
        if last is None or value.year != last.year:
            text = (
                f"<i><b>{value.year}</b></i></td><td></td></tr>\n"
                f"    <tr><td><b>{month}</b></td><td></td></tr>\n"
                f"    <tr><td> {value.day}"
            )
        elif value.month != last.month:
            text = f"<b>{month}</b></td><td></td></tr>\n   <tr><td> {value.day}"
        else:
            text = str(value.day)
        last = value
        return text

    return label
