"""Publishing attributes derived from marker files in the source tree.

Every directory may hold marker files (``.verbatim``, ``.include``, ...).
VERBATIM, INCLUDE and IGNORE cascade down the tree; MAIN, FEED, ARCHIVE and
ROOT only describe the directory that carries them.
"""

from __future__ import annotations

import enum
import os
from pathlib import Path
from typing import Optional

from .errors import ConfigurationError

OUTPUT_DIR = "dst"
TMP_DIR = "tmp"
TEMPLATE_DIR = "tpl"
INCLUDE_DIR = "inc"
KNOWN_IGNORED = (OUTPUT_DIR, TMP_DIR, TEMPLATE_DIR, INCLUDE_DIR, ".git")

CONTENT_SUFFIXES = (".html", ".md")


class Attr(enum.IntFlag):
    NONE = 0
    VERBATIM = enum.auto()
    INCLUDE = enum.auto()
    MAIN = enum.auto()
    FEED = enum.auto()
    ARCHIVE = enum.auto()
    IGNORE = enum.auto()
    ROOT = enum.auto()

    def has(self, other: "Attr") -> bool:
        return bool(self & other)


NON_CASCADING = Attr.MAIN | Attr.FEED | Attr.ARCHIVE | Attr.ROOT

MARKER_FILES = {
    ".verbatim": Attr.VERBATIM,
    ".include": Attr.INCLUDE,
    ".maintarget": Attr.MAIN,
    ".feedtarget": Attr.FEED,
    ".archivetarget": Attr.ARCHIVE,
    ".ignore": Attr.IGNORE,
    ".root": Attr.ROOT,
}


def merge(parent: Attr, local: Attr) -> Attr:
    """Combine a directory's own markers with its parent's resolved set."""
    result = local & NON_CASCADING
    if parent.has(Attr.IGNORE) or local.has(Attr.IGNORE):
        return result | Attr.IGNORE
    if parent.has(Attr.VERBATIM):
        result |= Attr.INCLUDE if local.has(Attr.INCLUDE) else Attr.VERBATIM
    if parent.has(Attr.INCLUDE):
        result |= Attr.VERBATIM if local.has(Attr.VERBATIM) else Attr.INCLUDE
    return result


def local_markers(path: Path) -> Attr:
    if not path.is_dir():
        return Attr.NONE
    attr = Attr.NONE
    for name in os.listdir(path):
        flag = MARKER_FILES.get(name)
        if flag is not None:
            attr |= flag
    return attr


def normalize(path: Path | str) -> Path:
    return Path(os.path.abspath(path))


class Locations:
    """Write-once slots for the directories that exist at most once per site."""

    _labels = {
        "root": ".root",
        "main": ".maintarget",
        "archive": ".archivetarget",
        "feed": ".feedtarget",
    }

    def __init__(self) -> None:
        self.root: Optional[Path] = None
        self.main: Optional[Path] = None
        self.archive: Optional[Path] = None
        self.feed: Optional[Path] = None

    def assign(self, slot: str, path: Path) -> None:
        current = getattr(self, slot)
        if current is not None:
            raise ConfigurationError(f"Multiple {self._labels[slot]} found: {current}, {path}")
        setattr(self, slot, path)

    def record(self, attr: Attr, path: Path) -> None:
        if attr.has(Attr.ROOT):
            self.assign("root", path)
        if attr.has(Attr.MAIN):
            self.assign("main", path)
        if attr.has(Attr.ARCHIVE):
            self.assign("archive", path)
        if attr.has(Attr.FEED):
            self.assign("feed", path)


class DocSet:
    """Resolved attributes for every path of one site, plus its locations.

    Build one with :meth:`discover`, which climbs from a starting path to
    the ``.root`` directory. Each DocSet owns its cache and its locations,
    so separate builds never share state.
    """

    def __init__(self) -> None:
        self._cache: dict[Path, Attr] = {}
        self.locations = Locations()

    @classmethod
    def discover(cls, start: Path | str) -> "DocSet":
        docset = cls()
        docset.resolve(start)
        docset._ignore_known_dirs()
        return docset

    @property
    def root(self) -> Path:
        if self.locations.root is None:
            raise ConfigurationError("Failed to find a .root.")
        return self.locations.root

    def _ignore_known_dirs(self) -> None:
        for name in KNOWN_IGNORED:
            self._cache[self.root / name] = Attr.IGNORE

    def resolve(self, path: Path | str) -> Attr:
        path = normalize(path)
        if path in self._cache:
            return self._cache[path]

        # Climb until a cached ancestor or a .root, reading markers on the way.
        pending: list[tuple[Path, Attr]] = []
        current = path
        inherited: Optional[Attr] = None
        while True:
            local = local_markers(current)
            self.locations.record(local, current)
            if local.has(Attr.ROOT):
                self._cache[current] = local
                inherited = local
                break
            pending.append((current, local))
            parent = current.parent
            if parent == current:
                raise ConfigurationError("Failed to find a .root.")
            if parent in self._cache:
                inherited = self._cache[parent]
                break
            current = parent

        for directory, local in reversed(pending):
            inherited = merge(inherited, local)
            self._cache[directory] = inherited
        return self._cache[path]

    def relative(self, path: Path | str) -> Path:
        path = normalize(path)
        try:
            return path.relative_to(self.root)
        except ValueError:
            raise ConfigurationError(f"{path} is outside of the root {self.root}") from None

    def dest(self, path: Path | str) -> Path:
        """Output path for a source path, mirrored under the output subtree."""
        return self.root / OUTPUT_DIR / self.relative(path)

    def page_dest(self, path: Path | str) -> Path:
        """Output path of a rendered content file; Markdown sources become HTML."""
        dest = self.dest(path)
        if dest.suffix == ".md":
            dest = dest.with_suffix(".html")
        return dest

    def url(self, path: Path | str) -> str:
        """Site URL of a content file, without its extension."""
        rel = self.relative(path)
        if rel.suffix in CONTENT_SUFFIXES:
            rel = rel.with_suffix("")
        return "/" + rel.as_posix()
