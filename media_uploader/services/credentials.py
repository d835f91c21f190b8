"""
Credential Service - Single Responsibility: obtain one-time upload targets.

The backend answers ``{"data": {"uploadUrl": ..., "key": ...}}``.
"""
import logging
from typing import Any

import httpx

from ..errors import APIError, CredentialError
from ..models import UploadTarget
from ..protocols import IAPIClient

logger = logging.getLogger(__name__)

DEFAULT_UPLOAD_URL_PATH = "image/upload-url"
DEFAULT_ERROR_MESSAGE = "Failed to obtain upload URL"


def _backend_message(detail: Any) -> str:
    if isinstance(detail, dict) and detail.get("message"):
        return str(detail["message"])
    if isinstance(detail, str) and detail.strip():
        return detail.strip()
    return DEFAULT_ERROR_MESSAGE


class CredentialClient:
    """
    Requests upload targets from the backend API.

    Errors are raised as CredentialError and are never retried here.
    """

    def __init__(self, api_client: IAPIClient, endpoint: str = DEFAULT_UPLOAD_URL_PATH):
        """
        Initialize credential client.

        Args:
            api_client: Backend API client (HTTPAPIClient)
            endpoint: Path of the upload-url endpoint, relative to the API base
        """
        self._api = api_client
        self._endpoint = endpoint

    async def request_upload_target(
        self,
        file_name: str,
        content_type: str,
        date_partition: str,
    ) -> UploadTarget:
        """
        Exchange file details for an upload target.

        Args:
            file_name: Percent-encoded file name
            content_type: Declared MIME type of the file
            date_partition: ``YYYY-MM-DD`` partition used by the backend

        Returns:
            UploadTarget with the presigned URL and the storage key

        Raises:
            CredentialError: on transport errors, error statuses or bad bodies
        """
        payload = {"fileName": file_name, "fileType": content_type, "date": date_partition}

        try:
            response = await self._api.post(self._endpoint, json=payload)
        except APIError as exc:
            raise CredentialError(_backend_message(exc.detail), status_code=exc.status_code) from exc
        except httpx.HTTPError as exc:
            raise CredentialError(f"{DEFAULT_ERROR_MESSAGE}: {exc}") from exc

        try:
            data = response.json()["data"]
            target = UploadTarget(upload_url=str(data["uploadUrl"]), storage_key=str(data["key"]))
        except (ValueError, KeyError, TypeError) as exc:
            raise CredentialError(f"Malformed upload target response: {exc}") from exc

        logger.debug("Upload target issued for %s: key=%s", file_name, target.storage_key)
        return target
