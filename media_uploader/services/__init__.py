"""Services for media_uploader module."""
from .api_client import HTTPAPIClient
from .compression import CompressionService
from .credentials import CredentialClient
from .resolver import URLResolver
from .transfer import TransferService

__all__ = [
    "HTTPAPIClient",
    "CompressionService",
    "CredentialClient",
    "URLResolver",
    "TransferService",
]
