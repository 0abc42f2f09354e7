"""Walk the source tree once and bring the output tree up to date."""

from __future__ import annotations

import datetime as dt
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from jinja2 import Environment

from .attributes import CONTENT_SUFFIXES, INCLUDE_DIR, MARKER_FILES, TEMPLATE_DIR, Attr, DocSet, normalize
from .config import Settings
from .content import ContentFile, extract_element, parse_content, read_include
from .entries import Entry, latest, order_entries, site_updated
from .errors import ConfigurationError
from .latex import expand_latex
from .pages import build_archive, build_feed, build_index
from .render import ENTRY_TEMPLATE, copy_verbatim, render_page, template_env
from .utils import is_stale, modified_time, newest


@dataclass
class Includes:
    header: str
    inline_css: str
    titlebar: str
    footer: str
    # Newest of every shared input an entry page depends on.
    modified: dt.datetime


@dataclass
class BuildResult:
    entries: list[Entry] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    written: list[Path] = field(default_factory=list)


def load_includes(docset: DocSet, settings: Settings) -> Includes:
    inc = docset.root / INCLUDE_DIR
    header, header_mod = extract_element(inc / "header.html", "head")
    inline_css, css_mod = read_include(docset.root / settings.inline_css)
    footer, footer_mod = extract_element(inc / "footer.html", "body")
    titlebar, titlebar_mod = extract_element(inc / "titlebar.html", "body")
    times = [header_mod, css_mod, footer_mod, titlebar_mod]
    entry_mod = modified_time(docset.root / TEMPLATE_DIR / ENTRY_TEMPLATE)
    if entry_mod is not None:
        times.append(entry_mod)
    return Includes(
        header=header,
        inline_css=inline_css,
        titlebar=titlebar,
        footer=footer,
        modified=newest(*times),
    )


class SiteBuilder:
    def __init__(self, docset: DocSet, settings: Settings, env: Optional[Environment] = None) -> None:
        self.docset = docset
        self.settings = settings
        self.env = env or template_env(docset.root / TEMPLATE_DIR)
        self.includes = load_includes(docset, settings)
        self.result = BuildResult()
        self._skip_files = set()
        self._pages: dict[Path, Path] = {}
        if settings.config_path is not None:
            self._skip_files.add(normalize(settings.config_path))

    def template_data(self, entries: list[Entry]) -> dict:
        return {
            "domain": self.settings.domain,
            "site_title": self.settings.site_title,
            "header": self.includes.header,
            "inline_css": self.includes.inline_css,
            "titlebar": self.includes.titlebar,
            "footer": self.includes.footer,
            "entries": entries,
            "updated": None,
        }

    def run(self) -> BuildResult:
        self._walk(self.docset.root)

        ordered = order_entries(self.result.entries)
        self.result.entries = ordered
        data = self.template_data(ordered)
        data["updated"] = site_updated(ordered)

        self._record(build_archive(self.env, self.docset, data, ordered))

        window = latest(ordered, self.settings.feed_len)
        for entry in window:
            entry.body = self.expanded_body(parse_content(entry.path))
        self._record(build_index(self.env, self.docset, data, window))
        self._record(build_feed(self.env, self.docset, data, window))
        return self.result

    def _record(self, written: Optional[Path]) -> None:
        if written is not None:
            self.result.written.append(written)

    def _walk(self, path: Path) -> None:
        if not self.visit(path, is_dir=True):
            return
        with os.scandir(path) as it:
            children = sorted(it, key=lambda item: item.name)
        for child in children:
            child_path = path / child.name
            if child.is_dir(follow_symlinks=False):
                self._walk(child_path)
            else:
                self.visit(child_path, is_dir=False)

    def visit(self, path: Path, is_dir: bool) -> bool:
        """Act on one path; returns False when a directory must not be descended."""
        attr = self.docset.resolve(path)
        if is_dir:
            return not attr.has(Attr.IGNORE)
        if path.name in MARKER_FILES or normalize(path) in self._skip_files:
            return True
        if attr.has(Attr.INCLUDE) and path.suffix in CONTENT_SUFFIXES:
            self.transform(path)
        if attr.has(Attr.VERBATIM):
            self.copy(path)
        return True

    def expanded_body(self, content: ContentFile) -> str:
        if self.settings.latex:
            for error in expand_latex(content.document, timeout=self.settings.latex_timeout):
                message = f"Error: expanding LaTeX in {content.path}: {error}"
                print(message, file=sys.stderr)
                self.result.errors.append(message)
        return content.body()

    def transform(self, path: Path) -> None:
        dest = self.docset.page_dest(path)
        other = self._pages.setdefault(dest, path)
        if other != path:
            raise ConfigurationError(f"{other} and {path} both publish to {dest}")
        content = parse_content(path)
        entry = Entry(
            path=path,
            title=content.title,
            url=self.docset.url(path),
            created=content.created,
            updated=content.updated,
        )
        self.result.entries.append(entry)

        watermark = newest(content.updated, self.includes.modified)
        if not is_stale(watermark, modified_time(dest)):
            return
        print(f"INCLUDE:  {dest}")
        entry.body = self.expanded_body(content)
        render_page(self.env, ENTRY_TEMPLATE, self.template_data([entry]), dest)
        self.result.written.append(dest)

    def copy(self, path: Path) -> None:
        dest = self.docset.dest(path)
        if not is_stale(modified_time(path), modified_time(dest)):
            return
        print(f"VERBATIM: {dest}")
        copy_verbatim(path, dest)
        self.result.written.append(dest)


def build_site(start: Path, settings: Settings) -> BuildResult:
    docset = DocSet.discover(start)
    print(f"Root: {docset.root}")
    return SiteBuilder(docset, settings).run()
