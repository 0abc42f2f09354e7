from __future__ import annotations

import shutil
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from .utils import datediff, rfc3339, trunc10

ENTRY_TEMPLATE = "entry.html"
ARCHIVE_TEMPLATE = "archive.html"
INDEX_TEMPLATE = "index.html"
FEED_TEMPLATE = "index.atom"


def template_env(template_dir: Path) -> Environment:
    env = Environment(loader=FileSystemLoader(str(template_dir)), autoescape=False, keep_trailing_newline=True)
    env.filters["trunc10"] = trunc10
    env.filters["rfc3339"] = rfc3339
    return env


def render_text(env: Environment, name: str, data: dict) -> str:
    return env.get_template(name).render(datediff=datediff(), **data)


def write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def render_page(env: Environment, name: str, data: dict, dest: Path) -> None:
    write_text(dest, render_text(env, name, data))


def render_if_changed(env: Environment, name: str, data: dict, dest: Path) -> bool:
    """Render ``name`` to ``dest`` unless the file already holds that exact text."""
    text = render_text(env, name, data)
    if dest.exists() and dest.read_text(encoding="utf-8") == text:
        return False
    write_text(dest, text)
    return True


def copy_verbatim(src: Path, dest: Path) -> None:
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(src, dest)
