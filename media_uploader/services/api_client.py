"""HTTP adapter for backend API operations."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from ..errors import APIError

logger = logging.getLogger(__name__)


class HTTPAPIClient:
    """
    HTTP client adapter for API calls.

    Implements IAPIClient protocol. Requests are sent once; there is no
    retry at this layer.
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: int = 60,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url
        self._token = token
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        headers = {"Authorization": f"Bearer {self._token}"} if self._token else None
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            headers=headers,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args):
        if self._client:
            await self._client.aclose()
            self._client = None

    async def post(self, endpoint: str, json: Dict) -> Any:
        if not self._client:
            raise RuntimeError("HTTPAPIClient not initialized. Use 'async with' context.")

        logger.debug("POST %s", endpoint)
        response = await self._client.post(endpoint, json=json)

        if response.status_code >= 400:
            try:
                error_detail = response.json()
            except ValueError:
                error_detail = response.text
            raise APIError(
                f"API error {response.status_code} on POST {endpoint}: {error_detail}",
                status_code=response.status_code,
                detail=error_detail,
            )

        return response
