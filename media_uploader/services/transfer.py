"""
Transfer Service - Single Responsibility: write bytes to object storage.

Performs a single ``PUT`` against a presigned URL.
"""
import logging
from typing import Optional

import httpx

from ..errors import TransferError

logger = logging.getLogger(__name__)


class TransferService:
    """
    Direct-to-storage uploader.

    Implements ITransferClient. No retry, no resumability; timeouts are the
    transport defaults.
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        self._client = httpx.AsyncClient(transport=self._transport)
        return self

    async def __aexit__(self, *args):
        if self._client:
            await self._client.aclose()
            self._client = None

    async def put(self, upload_url: str, data: bytes, content_type: str) -> None:
        """
        Upload raw bytes.

        Args:
            upload_url: Presigned URL issued by the backend
            data: File contents
            content_type: Declared MIME type, sent as Content-Type

        Raises:
            TransferError: on any non-2xx response or transport error
        """
        if not self._client:
            raise RuntimeError("TransferService not initialized. Use 'async with' context.")

        try:
            response = await self._client.put(
                upload_url,
                content=data,
                headers={"Content-Type": content_type},
            )
        except httpx.HTTPError as exc:
            raise TransferError(f"Upload to storage failed: {exc}") from exc

        if not response.is_success:
            body = response.text
            raise TransferError(
                f"Upload to storage failed with status {response.status_code}: {body}",
                status_code=response.status_code,
                body=body,
            )

        logger.debug("Stored %d bytes (%s)", len(data), content_type)
