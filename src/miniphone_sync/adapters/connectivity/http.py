"""HTTP reachability probe.

Implements the ConnectivityProbe protocol by issuing a ``HEAD`` request. Any
HTTP response, including 4xx/5xx, proves the network path works; only
transport-level errors count as offline.
"""

from __future__ import annotations

import httpx
import structlog

log = structlog.get_logger()


class HttpConnectivityProbe:
    """Connectivity probe backed by ``httpx.AsyncClient``.

    Example:
        probe = HttpConnectivityProbe("https://api.openai.com/v1/models", timeout=3.0)
        if await probe.is_online():
            ...
    """

    def __init__(
        self,
        check_url: str,
        timeout: float = 3.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the probe.

        Args:
            check_url: URL to probe
            timeout: Request timeout in seconds
            transport: Optional custom transport (tests)
        """
        self._check_url = check_url
        self._timeout = timeout
        self._transport = transport

    @property
    def check_url(self) -> str:
        return self._check_url

    async def is_online(self) -> bool:
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.head(self._check_url)
        except httpx.HTTPError as e:
            log.debug(
                "connectivity_probe_offline",
                url=self._check_url,
                error_type=type(e).__name__,
                error=str(e),
            )
            return False

        log.debug("connectivity_probe_online", url=self._check_url, status=response.status_code)
        return True
