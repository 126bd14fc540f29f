"""Protocol definitions for pluggable collaborators."""

from .connectivity import ConnectivityProbe
from .notifier import NoticeLevel, Notifier
from .renderer import Renderer
from .store import DurableStore

__all__ = ["ConnectivityProbe", "DurableStore", "NoticeLevel", "Notifier", "Renderer"]
