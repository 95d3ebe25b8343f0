"""
HTTP client for the CRM web application's internal API.

The call record and calendar live in the CRM app; the bridge reaches them
through authenticated JSON POSTs. One client (and its connection pool) is
shared by the call status and booking adapters for the life of the process.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from voice_bridge.config.constants import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)


class CrmApiClient:
    """
    Thin async wrapper around httpx for CRM API calls.

    Args:
        base_url: Root URL of the CRM app, e.g. https://crm.example.com
        secret: Bearer token expected by the CRM internal routes
        timeout: Request timeout in seconds
        transport: Optional httpx transport, used by tests
    """

    def __init__(
        self,
        base_url: str,
        secret: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._secret = secret
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def start(self) -> None:
        """Create the HTTP client."""
        headers = {"Content-Type": "application/json"}
        if self._secret:
            headers["Authorization"] = f"Bearer {self._secret}"
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=self._timeout,
            transport=self._transport,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def post(self, path: str, payload: Dict[str, Any]) -> httpx.Response:
        """
        POST a JSON body to a CRM route.

        Raises:
            httpx.HTTPError: On transport failures and timeouts
        """
        if not self._client:
            await self.start()
        logger.debug(f"POST {self.base_url}{path}")
        return await self._client.post(path, json=payload)
