"""Terminal rendering and notification collaborators."""

from .notifier import ConsoleNotifier
from .renderer import ConsoleRenderer

__all__ = ["ConsoleNotifier", "ConsoleRenderer"]
