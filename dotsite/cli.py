from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

from jinja2 import TemplateError

from .builder import build_site
from .config import load_config, settings_from_config
from .errors import ConfigurationError


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument(
        "--config",
        default="site.toml",
        help="Path to site config file (TOML/YAML/JSON).",
    )
    pre_args, _ = pre_parser.parse_known_args(argv)
    config_path = Path(pre_args.config)
    try:
        config = load_config(config_path)
    except ConfigurationError as exc:
        print(exc, file=sys.stderr)
        sys.exit(1)
    defaults = settings_from_config(config)

    parser = argparse.ArgumentParser(description="Incremental static site generator driven by marker files.")
    parser.add_argument("--config", default=pre_args.config, help="Path to site config file (TOML/YAML/JSON).")
    parser.add_argument(
        "--source",
        default=".",
        help="Any directory at or below the .root directory.",
    )
    parser.add_argument("--site-title", default=defaults.site_title, help="Site title.")
    parser.add_argument("--domain", default=defaults.domain, help="Domain the site is served from.")
    parser.add_argument(
        "--feed-len",
        default=defaults.feed_len,
        type=int,
        help="Number of entries on the main page and in the feed.",
    )
    parser.add_argument(
        "--inline-css",
        default=defaults.inline_css,
        help="Stylesheet inlined into every page, relative to the root.",
    )
    parser.add_argument(
        "--latex",
        action=argparse.BooleanOptionalAction,
        default=defaults.latex,
        help="Render <latex-pic> elements with tex2im.",
    )
    parser.add_argument(
        "--latex-timeout",
        default=defaults.latex_timeout,
        type=int,
        help="Seconds before a single tex2im run is abandoned.",
    )
    args = parser.parse_args(argv)
    args.config_path = config_path if config_path.exists() else None
    return args


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    settings = settings_from_config(
        {
            "site_title": args.site_title,
            "domain": args.domain,
            "feed_len": args.feed_len,
            "inline_css": args.inline_css,
            "latex": args.latex,
            "latex_timeout": args.latex_timeout,
        },
        config_path=args.config_path,
    )
    start = time.perf_counter()
    try:
        result = build_site(Path(args.source), settings)
    except ConfigurationError as exc:
        print(f"Error building docset: {exc}", file=sys.stderr)
        sys.exit(1)
    except (OSError, UnicodeDecodeError, TemplateError) as exc:
        print(f"Error building site: {exc}", file=sys.stderr)
        sys.exit(1)
    elapsed = time.perf_counter() - start
    print(f"Build completed in {elapsed:.2f}s, {len(result.written)} files written.")
    if result.errors:
        print(f"{len(result.errors)} warnings.", file=sys.stderr)
