"""Abstract interface for connectivity detection."""

from typing import Protocol


class ConnectivityProbe(Protocol):
    """Best-effort answer to "can we deliver right now?".

    The value is not race-free: connectivity may change right after the
    probe answers.
    """

    async def is_online(self) -> bool:
        """Return True if immediate delivery should be attempted."""
        ...
