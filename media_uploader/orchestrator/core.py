"""Core orchestrator - wires services into bound media lists."""
from typing import Any, Iterable, Optional

import httpx

from ..models import FROM_CONFIG, UploadConfig
from ..protocols import ICompressor, ICredentialClient, ITransferClient
from ..services.api_client import HTTPAPIClient
from ..services.compression import CompressionService
from ..services.credentials import CredentialClient
from ..services.resolver import URLResolver
from ..services.transfer import TransferService
from ..utils.events import EventEmitter
from .pipeline import UploadPipeline
from .reconciler import ListReconciler


class UploadOrchestrator:
    """
    Orchestrates batch image uploads using injected services.

    Follows:
    - Dependency Injection (services injected or built from config)
    - Single Responsibility (the reconciler owns list state, the pipeline owns one file)

    Usage:
        async with UploadOrchestrator(api_url, cdn_domain, token=token) as uploader:
            field = uploader.bind(max_items=5)
            result = await field.pick([Path("entry.png")])
    """

    def __init__(
        self,
        api_url: str,
        cdn_domain: str,
        config: Optional[UploadConfig] = None,
        token: Optional[str] = None,
        credential_client: Optional[ICredentialClient] = None,
        transfer_client: Optional[ITransferClient] = None,
        compressor: Optional[ICompressor] = None,
        api_transport: Optional[httpx.AsyncBaseTransport] = None,
        storage_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize orchestrator with dependencies.

        Args:
            api_url: Backend API base URL (issues upload targets)
            cdn_domain: Content-delivery domain for resolved URLs (required)
            config: Upload configuration
            token: Optional bearer token for the backend API
            credential_client: Pre-built credential client (skips HTTPAPIClient)
            transfer_client: Pre-built transfer client (skips TransferService)
            compressor: Pre-built compressor
            api_transport: httpx transport for the backend API (tests)
            storage_transport: httpx transport for storage writes (tests)
        """
        self._api_url = api_url
        self._config = config or UploadConfig()
        self._token = token
        # Fails fast when the domain is missing
        self._resolver = URLResolver(cdn_domain)
        self._external_credentials = credential_client
        self._external_transfer = transfer_client
        self._compressor = compressor
        self._api_transport = api_transport
        self._storage_transport = storage_transport

        # Initialized in __aenter__
        self._api_client: Optional[HTTPAPIClient] = None
        self._transfer_service: Optional[TransferService] = None
        self._pipeline: Optional[UploadPipeline] = None
        self._events: Optional[EventEmitter] = None

    async def __aenter__(self):
        """Initialize services and pipeline."""
        credentials = self._external_credentials
        if credentials is None:
            self._api_client = HTTPAPIClient(
                self._api_url, token=self._token, transport=self._api_transport
            )
            await self._api_client.__aenter__()
            credentials = CredentialClient(self._api_client, self._config.upload_url_path)

        transfer = self._external_transfer
        if transfer is None:
            self._transfer_service = TransferService(transport=self._storage_transport)
            await self._transfer_service.__aenter__()
            transfer = self._transfer_service

        compressor = self._compressor or CompressionService(self._config)

        self._events = EventEmitter()
        self._pipeline = UploadPipeline(
            compressor,
            credentials,
            transfer,
            self._resolver,
            self._config,
            self._events,
        )
        return self

    async def __aexit__(self, *args):
        """Cleanup resources."""
        if self._transfer_service:
            await self._transfer_service.__aexit__(*args)
        if self._api_client:
            await self._api_client.__aexit__(*args)

    @property
    def events(self) -> EventEmitter:
        """Pipeline emitter: ``task_state`` for every task of every bound list."""
        if self._events is None:
            raise RuntimeError("UploadOrchestrator not initialized. Use 'async with' context.")
        return self._events

    def bind(
        self,
        entries: Iterable[Any] = (),
        max_items: Optional[int] = FROM_CONFIG,
        annotated: Optional[bool] = None,
        disabled: bool = False,
    ) -> ListReconciler:
        """
        Bind a media list to a form field.

        Args:
            entries: Current value of the field (resolved entries)
            max_items: Capacity of the field (defaults to config.max_items; None is uncapped)
            annotated: Attach title/analysis to each resolved entry
            disabled: Read-only field; every mutation is ignored

        Returns:
            ListReconciler owning the field value and its own change events
        """
        if self._pipeline is None:
            raise RuntimeError("UploadOrchestrator not initialized. Use 'async with' context.")
        return ListReconciler(
            self._pipeline,
            self._config,
            entries=entries,
            max_items=max_items,
            annotated=annotated,
            disabled=disabled,
        )
