from __future__ import annotations


class ConfigurationError(Exception):
    """The source tree or the site config cannot be built as given."""
