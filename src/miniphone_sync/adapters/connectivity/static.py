"""Fixed-answer connectivity probe."""


class StaticConnectivityProbe:
    """Answers a preset value; flip it with :meth:`set_online`."""

    def __init__(self, online: bool = True) -> None:
        self._online = online
        self.calls = 0

    def set_online(self, online: bool) -> None:
        self._online = online

    async def is_online(self) -> bool:
        self.calls += 1
        return self._online
