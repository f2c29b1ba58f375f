"""
podtrigger CLI Package

This package exposes the top-level Typer `app` for tests and the console
entrypoint.
"""

from .main import app

__all__ = ["app"]
