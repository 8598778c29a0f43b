"""Connectivity probes used to gate dispatch passes."""
import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


class HttpConnectivityProbe:
    """
    Reports reachability by sending a HEAD request to a known URL.

    Any HTTP response, even an error status, means the network path works.
    Only transport failures (DNS, refused connection, timeout) count as
    unreachable.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 3.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            url: URL to probe, normally the remote API host.
            timeout: Seconds before the probe gives up.
            http_client: Optional pre-configured httpx client (for testing).
        """
        self.url = url
        self.timeout = timeout
        self._http_client = http_client

    async def is_reachable(self) -> bool:
        try:
            if self._http_client is not None:
                await self._http_client.head(self.url, timeout=self.timeout)
            else:
                async with httpx.AsyncClient() as client:
                    await client.head(self.url, timeout=self.timeout)
        except httpx.HTTPError as exc:
            logger.info("Connectivity probe to %s failed: %s", self.url, exc)
            return False
        return True


class StaticConnectivityProbe:
    """Probe with a fixed answer; flip ``reachable`` to simulate going offline."""

    def __init__(self, reachable: bool = True):
        self.reachable = reachable

    async def is_reachable(self) -> bool:
        return self.reachable
