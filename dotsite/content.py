from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import markdown
from bs4 import BeautifulSoup

CREATED_META = "created"
# HTML5 tree building supplies the implied <head> and <body> of fragments.
HTML_PARSER = "html5lib"
MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "codehilite"]


@dataclass
class ContentFile:
    """A parsed content source, ready for body extraction and rendering."""

    path: Path
    document: BeautifulSoup
    title: str
    created: dt.datetime
    updated: dt.datetime
    synthesized: bool = False

    def body(self) -> str:
        body = self.document.body
        if body is None:
            return ""
        return "".join(str(child) for child in body.contents)


def file_mtime(path: Path) -> dt.datetime:
    return dt.datetime.fromtimestamp(path.stat().st_mtime, tz=dt.timezone.utc)


def now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc).astimezone().replace(microsecond=0)


def parse_created(value: str) -> Optional[dt.datetime]:
    try:
        parsed = dt.datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt.timezone.utc)
    return parsed


def format_created(value: dt.datetime) -> str:
    return value.isoformat(timespec="seconds")


def parse_front_matter(text: str) -> tuple[dict, str, Optional[list[str]]]:
    """Split ``---`` front matter from a Markdown body.

    Returns the metadata, the body and the raw front-matter lines (None when
    there is no block) so the block can be written back with additions.
    """
    clean_text = text.lstrip("\ufeff")
    lines = clean_text.splitlines()
    if not lines or lines[0].strip() != "---":
        return {}, clean_text, None

    end = None
    for i in range(1, len(lines)):
        if lines[i].strip() == "---":
            end = i
            break
    if end is None:
        return {}, clean_text, None

    meta = {}
    raw = lines[1:end]
    for line in raw:
        line = line.strip()
        if not line or line.startswith("#") or ":" not in line:
            continue
        key, value = line.split(":", 1)
        meta[key.strip().lower()] = value.strip().strip("'\"")
    body = "\n".join(lines[end + 1 :])
    return meta, body, raw


def extract_title(meta: dict, body: str) -> tuple[str, str]:
    if meta.get("title"):
        return meta["title"], body
    lines = body.splitlines()
    for i, line in enumerate(lines):
        stripped = line.strip()
        if stripped.startswith("# "):
            title = stripped[2:].strip()
            new_body = "\n".join(lines[i + 1 :]).lstrip()
            return title, new_body
        if stripped:
            break
    return "", body


def _html_title(soup: BeautifulSoup) -> str:
    title = soup.find("title")
    if title is None:
        return ""
    return "".join(str(text) for text in title.find_all(string=True, recursive=False))


def _meta_created(soup: BeautifulSoup) -> Optional[dt.datetime]:
    for meta in soup.find_all("meta"):
        if meta.get("name") != CREATED_META or meta.get("value") is None:
            continue
        created = parse_created(meta["value"])
        if created is not None:
            return created
    return None


def parse_html(path: Path) -> ContentFile:
    text = path.read_text(encoding="utf-8")
    soup = BeautifulSoup(text, HTML_PARSER)
    created = _meta_created(soup)
    synthesized = created is None
    if synthesized:
        created = now()
        meta = soup.new_tag("meta", attrs={"value": format_created(created), "name": CREATED_META})
        soup.head.append(meta)
        path.write_text(str(soup), encoding="utf-8")
    return ContentFile(
        path=path,
        document=soup,
        title=_html_title(soup),
        created=created,
        updated=file_mtime(path),
        synthesized=synthesized,
    )


def _with_created(text: str, raw: Optional[list[str]], created: dt.datetime) -> str:
    line = f"{CREATED_META}: {format_created(created)}"
    clean_text = text.lstrip("\ufeff")
    if raw is None:
        return f"---\n{line}\n---\n{clean_text}"
    lines = clean_text.splitlines()
    lines.insert(len(raw) + 1, line)
    trailing = "\n" if clean_text.endswith("\n") else ""
    return "\n".join(lines) + trailing


def parse_markdown(path: Path) -> ContentFile:
    text = path.read_text(encoding="utf-8")
    meta, body, raw = parse_front_matter(text)
    created = parse_created(meta.get(CREATED_META, "")) if meta.get(CREATED_META) else None
    synthesized = created is None
    if synthesized:
        created = now()
        path.write_text(_with_created(text, raw, created), encoding="utf-8")
    title, body = extract_title(meta, body)
    md = markdown.Markdown(extensions=MARKDOWN_EXTENSIONS)
    html_content = md.convert(body)
    soup = BeautifulSoup(f"<html><head></head><body>{html_content}</body></html>", HTML_PARSER)
    title_tag = soup.new_tag("title")
    title_tag.string = title
    soup.head.append(title_tag)
    return ContentFile(
        path=path,
        document=soup,
        title=title,
        created=created,
        updated=file_mtime(path),
        synthesized=synthesized,
    )


def parse_content(path: Path) -> ContentFile:
    """Parse a content file, minting and saving a creation time if it has none."""
    if path.suffix == ".md":
        return parse_markdown(path)
    return parse_html(path)


def extract_element(path: Path, element: str) -> tuple[str, dt.datetime]:
    """Rendered children of every outermost ``element`` in an HTML file."""
    mtime = file_mtime(path)
    soup = BeautifulSoup(path.read_text(encoding="utf-8"), HTML_PARSER)
    parts = []
    for node in soup.find_all(element):
        if node.find_parent(element) is not None:
            continue
        parts.extend(str(child) for child in node.contents)
    return "".join(parts), mtime


def read_include(path: Path) -> tuple[str, dt.datetime]:
    mtime = file_mtime(path)
    return path.read_text(encoding="utf-8"), mtime
