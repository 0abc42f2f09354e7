"""Tests for LaTeX expansion with tex2im mocked out."""

from __future__ import annotations

import subprocess
import unittest
from pathlib import Path
from unittest import mock

from bs4 import BeautifulSoup

from dotsite.latex import DEFAULT_TIMEOUT, expand_latex

PNG = b"\x89PNG fake"


def fake_tex2im(cmd, **kwargs):
    Path(cmd[cmd.index("-o") + 1]).write_bytes(PNG)
    return subprocess.CompletedProcess(cmd, 0, b"")


def document() -> BeautifulSoup:
    return BeautifulSoup(
        "<html><body><p>before</p><latex-pic>$x^2$</latex-pic><latex-pic>$y$</latex-pic></body></html>",
        "html.parser",
    )


class LatexTests(unittest.TestCase):
    def test_elements_become_inline_images(self) -> None:
        doc = document()
        with mock.patch("dotsite.latex.subprocess.run", side_effect=fake_tex2im) as run:
            errors = expand_latex(doc)
        self.assertEqual(errors, [])
        self.assertEqual(run.call_count, 2)
        self.assertEqual(run.call_args.kwargs["timeout"], DEFAULT_TIMEOUT)
        self.assertEqual(doc.find_all("latex-pic"), [])
        images = doc.find_all("img")
        self.assertEqual([img["alt"] for img in images], ["$x^2$", "$y$"])
        self.assertTrue(images[0]["src"].startswith("data:image/png;base64,"))
        self.assertEqual(images[0]["title"], "$x^2$")

    def test_missing_tool_is_reported_not_raised(self) -> None:
        doc = document()
        with mock.patch("dotsite.latex.subprocess.run", side_effect=FileNotFoundError("tex2im")):
            errors = expand_latex(doc)
        self.assertEqual(len(errors), 2)
        self.assertEqual(len(doc.find_all("latex-pic")), 2)

    def test_timeout_leaves_element_in_place(self) -> None:
        doc = document()
        calls = []

        def run(cmd, **kwargs):
            calls.append(kwargs["timeout"])
            if len(calls) == 1:
                raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])
            return fake_tex2im(cmd, **kwargs)

        with mock.patch("dotsite.latex.subprocess.run", side_effect=run):
            errors = expand_latex(doc, timeout=5)
        self.assertEqual(calls, [5, 5])
        self.assertEqual(len(errors), 1)
        self.assertIn("timed out", errors[0])
        self.assertEqual([node.get_text() for node in doc.find_all("latex-pic")], ["$x^2$"])
        self.assertEqual(len(doc.find_all("img")), 1)

    def test_failed_run_includes_tool_output(self) -> None:
        doc = BeautifulSoup("<latex-pic>\\bad</latex-pic>", "html.parser")
        error = subprocess.CalledProcessError(1, ["tex2im"], output=b"undefined control sequence")
        with mock.patch("dotsite.latex.subprocess.run", side_effect=error):
            errors = expand_latex(doc)
        self.assertEqual(len(errors), 1)
        self.assertIn("undefined control sequence", errors[0])


if __name__ == "__main__":
    unittest.main()
