"""
media_uploader - Batch image upload orchestration for form fields.

Follows SOLID principles:
- Single Responsibility: Each service handles one pipeline stage
- Open/Closed: Extend via new services
- Liskov Substitution: Services implement protocols
- Dependency Injection: Services injected into orchestrator

Usage:
    from media_uploader import UploadOrchestrator, UploadConfig

    async with UploadOrchestrator(api_url, cdn_domain, token=token) as uploader:
        field = uploader.bind(max_items=5)
        field.on("change", lambda entries: print(len(entries)))

        # File picker / drag-and-drop / clipboard paste
        result = await field.pick([Path("chart.png")])
        result = await field.drop([Path("a.jpg"), Path("b.webp")])
        result = await field.paste([ClipboardItem("image/png", png_bytes)])

    # Annotated variant (title + analysis per image)
    field = uploader.bind(max_items=10, annotated=True)
    await field.metadata.update(key, title="Breakout", analysis="Volume confirms")
"""
from .orchestrator import (
    ClipboardItem,
    InputSurfaceAdapter,
    ListReconciler,
    MetadataBinding,
    TaskState,
    UploadOrchestrator,
)
from .models import (
    Annotation,
    BatchResult,
    CandidateFile,
    MediaResource,
    Placeholder,
    Resolved,
    UploadConfig,
    UploadResult,
    UploadStatus,
    UploadTarget,
)
from .errors import (
    ConfigurationError,
    CredentialError,
    EntryNotFoundError,
    TransferError,
    UploaderError,
    ValidationError,
)
from .services import (
    CompressionService,
    CredentialClient,
    TransferService,
    URLResolver,
)

__version__ = "0.1.0"
__all__ = [
    # Main
    "UploadOrchestrator",
    "ListReconciler",
    "MetadataBinding",
    "InputSurfaceAdapter",
    "ClipboardItem",
    "TaskState",
    # Models
    "Annotation",
    "BatchResult",
    "CandidateFile",
    "MediaResource",
    "Placeholder",
    "Resolved",
    "UploadConfig",
    "UploadResult",
    "UploadStatus",
    "UploadTarget",
    # Errors
    "UploaderError",
    "ConfigurationError",
    "CredentialError",
    "EntryNotFoundError",
    "TransferError",
    "ValidationError",
    # Services
    "CompressionService",
    "CredentialClient",
    "TransferService",
    "URLResolver",
]
