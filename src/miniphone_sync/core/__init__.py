"""Core sync logic.

This module exports the main components:
- ChatClient: Orchestrator the UI layer talks to
- ChatRegistry: In-memory chat state, single source of truth
- SendPipeline: Offline-first send with queue fallback
- OfflineQueue: Persisted queue of messages awaiting resync
- ActivityMonitor: Idle detection with a single recurring check
- ReadReceipts: Read markers for assistant messages
"""

from miniphone_sync.core.activity import ActivityClock, ActivityMonitor, MonitorState
from miniphone_sync.core.client import ChatClient, create_client
from miniphone_sync.core.offline_queue import OfflineQueue
from miniphone_sync.core.pipeline import SendPipeline
from miniphone_sync.core.receipts import ReadReceipts
from miniphone_sync.core.registry import ChatRegistry, seed_demo_chats

__all__ = [
    "ActivityClock",
    "ActivityMonitor",
    "ChatClient",
    "ChatRegistry",
    "MonitorState",
    "OfflineQueue",
    "ReadReceipts",
    "SendPipeline",
    "create_client",
    "seed_demo_chats",
]
