"""Command-line interface for Piano Pitch."""

from .main import cli, main

__all__ = ["cli", "main"]
