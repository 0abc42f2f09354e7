from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigurationError
from .latex import DEFAULT_TIMEOUT
from .utils import parse_bool, parse_int

try:
    import tomllib as toml
except ImportError:
    try:
        import tomli as toml
    except ImportError:  # pragma: no cover - optional dependency
        toml = None

try:
    import yaml
except ImportError:  # pragma: no cover - optional dependency
    yaml = None

SITE_TITLE = "BitWorking"
DOMAIN = "https://bitworking.org/"
FEED_LEN = 4
INLINE_CSS = "css/b.css"


@dataclass
class Settings:
    site_title: str = SITE_TITLE
    domain: str = DOMAIN
    feed_len: int = FEED_LEN
    inline_css: str = INLINE_CSS
    latex: bool = True
    latex_timeout: int = DEFAULT_TIMEOUT
    config_path: Path | None = None


def load_config(path: Path) -> dict:
    if not path.exists():
        return {}
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix == ".toml":
        if toml is None:
            raise ConfigurationError("TOML config requires tomllib (Python 3.11+) or tomli.")
        try:
            data = toml.loads(text)
        except Exception as exc:  # pragma: no cover - depends on parser
            raise ConfigurationError(f"Invalid TOML in config file {path}: {exc}") from exc
    elif suffix in {".yml", ".yaml"}:
        if yaml is None:
            raise ConfigurationError("YAML config requires PyYAML.")
        try:
            data = yaml.safe_load(text)
        except Exception as exc:  # pragma: no cover - depends on parser
            raise ConfigurationError(f"Invalid YAML in config file {path}: {exc}") from exc
        if data is None:
            return {}
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Invalid JSON in config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file must be a mapping: {path}")
    return data


def settings_from_config(config: dict, config_path: Path | None = None) -> Settings:
    defaults = Settings()
    return Settings(
        site_title=str(config.get("site_title", defaults.site_title)),
        domain=str(config.get("domain", defaults.domain)),
        feed_len=parse_int(config.get("feed_len"), defaults.feed_len),
        inline_css=str(config.get("inline_css", defaults.inline_css)),
        latex=parse_bool(config["latex"]) if "latex" in config else defaults.latex,
        latex_timeout=parse_int(config.get("latex_timeout"), defaults.latex_timeout),
        config_path=config_path,
    )
