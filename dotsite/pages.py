from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

from jinja2 import Environment

from .attributes import DocSet
from .entries import Entry
from .render import ARCHIVE_TEMPLATE, FEED_TEMPLATE, INDEX_TEMPLATE, render_if_changed


def _target(docset: DocSet, location: Optional[Path], marker: str, filename: str) -> Optional[Path]:
    if location is None:
        print(f"Warning: no {marker} found, skipping {filename}.", file=sys.stderr)
        return None
    return docset.dest(location / filename)


def build_archive(env: Environment, docset: DocSet, data: dict, ordered: list[Entry]) -> Optional[Path]:
    dest = _target(docset, docset.locations.archive, ".archivetarget", "index.html")
    if dest is None:
        return None
    if render_if_changed(env, ARCHIVE_TEMPLATE, {**data, "entries": ordered}, dest):
        return dest
    return None


def build_index(env: Environment, docset: DocSet, data: dict, window: list[Entry]) -> Optional[Path]:
    dest = _target(docset, docset.locations.main, ".maintarget", "index.html")
    if dest is None:
        return None
    if render_if_changed(env, INDEX_TEMPLATE, {**data, "entries": window}, dest):
        return dest
    return None


def build_feed(env: Environment, docset: DocSet, data: dict, window: list[Entry]) -> Optional[Path]:
    dest = _target(docset, docset.locations.feed, ".feedtarget", "index.atom")
    if dest is None:
        return None
    if render_if_changed(env, FEED_TEMPLATE, {**data, "entries": window}, dest):
        return dest
    return None
