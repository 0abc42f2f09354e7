"""Incremental static site generator driven by marker files."""
