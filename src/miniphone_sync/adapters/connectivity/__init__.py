"""Connectivity probe implementations."""

from .http import HttpConnectivityProbe
from .static import StaticConnectivityProbe

__all__ = ["HttpConnectivityProbe", "StaticConnectivityProbe"]
