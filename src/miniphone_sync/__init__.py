"""Offline-first message delivery and sync core for the MiniPhone chat client."""

from miniphone_sync._version import __version__

__all__ = ["__version__"]
