"""Concrete implementations of collaborator interfaces."""

from .connectivity import HttpConnectivityProbe, StaticConnectivityProbe
from .console import ConsoleNotifier, ConsoleRenderer

__all__ = [
    "ConsoleNotifier",
    "ConsoleRenderer",
    "HttpConnectivityProbe",
    "StaticConnectivityProbe",
]
