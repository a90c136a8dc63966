"""Display collaborators for detection events."""

from .display import ConsoleDisplay

__all__ = ["ConsoleDisplay"]
