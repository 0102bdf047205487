"""Command-line interface for distdedup."""

from .main import app

__all__ = ["app"]
