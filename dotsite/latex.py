"""Replace ``<latex-pic>`` elements with inline PNG images rendered by tex2im."""

from __future__ import annotations

import base64
import subprocess
import tempfile
from pathlib import Path

from bs4 import BeautifulSoup, Tag

LATEX_ELEMENT = "latex-pic"
TEX2IM = "tex2im"
DEFAULT_TIMEOUT = 600


class LatexError(Exception):
    pass


def render_png(source: str, timeout: float = DEFAULT_TIMEOUT) -> bytes:
    with tempfile.TemporaryDirectory(prefix="dotsite-latex-") as tmp:
        tex = Path(tmp) / "pic.tex"
        png = Path(tmp) / "pic.png"
        tex.write_text(source, encoding="utf-8")
        try:
            subprocess.run(
                [TEX2IM, "-z", "-a", "-o", str(png), str(tex)],
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                timeout=timeout,
                check=True,
            )
        except FileNotFoundError as exc:
            raise LatexError(f"{TEX2IM} is not installed: {exc}") from exc
        except subprocess.TimeoutExpired as exc:
            raise LatexError(f"{TEX2IM} timed out after {timeout}s") from exc
        except subprocess.CalledProcessError as exc:
            output = (exc.stdout or b"").decode("utf-8", "replace")
            raise LatexError(f"Failed to run {TEX2IM}: {output!r} {exc}") from exc
        try:
            return png.read_bytes()
        except OSError as exc:
            raise LatexError(f"Failed to read PNG: {exc}") from exc


def _image_for(document: BeautifulSoup, source: str, timeout: float) -> Tag:
    uri = "data:image/png;base64," + base64.b64encode(render_png(source, timeout)).decode("ascii")
    return document.new_tag("img", attrs={"src": uri, "alt": source, "title": source})


def expand_latex(document: BeautifulSoup, timeout: float = DEFAULT_TIMEOUT) -> list[str]:
    """Expand every LaTeX element in place.

    Elements that fail to render stay in the document; one message per
    failure is returned so the caller can report it without stopping.
    """
    errors = []
    for node in document.find_all(LATEX_ELEMENT):
        source = node.get_text()
        try:
            img = _image_for(document, source, timeout)
        except LatexError as exc:
            errors.append(str(exc))
            continue
        node.replace_with(img)
    return errors
