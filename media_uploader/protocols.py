"""
Protocols (Interfaces) for Dependency Inversion.

Each pipeline stage is injected into the orchestrator through one of these
small interfaces so tests can swap in doubles.
"""
from typing import Any, Dict, Protocol, runtime_checkable

from .models import CandidateFile, UploadTarget


@runtime_checkable
class IAPIClient(Protocol):
    """Interface for backend API operations."""

    async def post(self, endpoint: str, json: Dict) -> Any:
        """POST request to API."""
        ...


@runtime_checkable
class ICompressor(Protocol):
    """Interface for best-effort image compression."""

    async def compress(self, file: CandidateFile) -> CandidateFile:
        """Return a smaller file of the same content type, or the original."""
        ...


@runtime_checkable
class ICredentialClient(Protocol):
    """Interface for one-time upload target issuance."""

    async def request_upload_target(
        self,
        file_name: str,
        content_type: str,
        date_partition: str,
    ) -> UploadTarget:
        """Exchange file details for an upload target."""
        ...


@runtime_checkable
class ITransferClient(Protocol):
    """Interface for direct writes to object storage."""

    async def put(self, upload_url: str, data: bytes, content_type: str) -> None:
        """Write bytes to upload_url; raise on failure."""
        ...


@runtime_checkable
class IURLResolver(Protocol):
    """Interface for turning storage keys into retrievable addresses."""

    def resolve(self, storage_key: str) -> str:
        ...
